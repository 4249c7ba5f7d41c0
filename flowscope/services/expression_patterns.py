# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Expression patterns used to locate a variable inside node parameters.

Two families:
- script: JavaScript declaration/usage forms, for Code/Function nodes
- declarative: n8n expression forms ({{ }}, $json, $node[...], $('...'))

Script nodes try the script family first; every other node tries the
declarative family first. Each SearchPattern carries its index in that final
ordering, which is its priority (lower wins during deduplication).
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, List, Pattern, Tuple

SCRIPT_NODE_TYPES = frozenset({
    "n8n-nodes-base.code",
    "n8n-nodes-base.function",
    "n8n-nodes-base.functionItem",
})

SCRIPT_FAMILY = "script"
DECLARATIVE_FAMILY = "declarative"


def is_script_node(node_type: Any) -> bool:
    return node_type in SCRIPT_NODE_TYPES


def escape_term(term: Any) -> str:
    """
    Escape a search term for literal use inside a regex.

    Non-string and empty input escape to "".
    """
    if not isinstance(term, str) or not term:
        return ""
    return re.escape(term)


@dataclass(frozen=True)
class SearchPattern:
    index: int
    family: str
    name: str
    regex: Pattern[str]

    def search(self, text: str):
        return self.regex.search(text)


PatternBuilder = Callable[[str], str]

SCRIPT_PATTERNS: Tuple[Tuple[str, PatternBuilder], ...] = (
    ("function-declaration", lambda t: r"function\s+" + t + r"\s*\("),
    ("const-declaration", lambda t: r"const\s+" + t + r"\s*="),
    ("let-declaration", lambda t: r"let\s+" + t + r"\s*="),
    ("var-declaration", lambda t: r"var\s+" + t + r"\s*="),
    ("method-call", lambda t: r"\." + t + r"\s*\("),
    ("property-access", lambda t: r"\." + t + r"\b"),
    ("assignment", lambda t: t + r"\s*=\s*"),
    ("invocation", lambda t: t + r"\s*\("),
    ("bracket-access", lambda t: r"\[['\"]" + t + r"['\"]\]"),
    ("object-key", lambda t: t + r"\s*:"),
    ("class-declaration", lambda t: r"class\s+" + t + r"\b"),
    ("constructor-call", lambda t: r"new\s+" + t + r"\s*\("),
    ("import-reference", lambda t: r"import.*" + t),
    ("export-reference", lambda t: r"export.*" + t),
)

DECLARATIVE_PATTERNS: Tuple[Tuple[str, PatternBuilder], ...] = (
    ("exact-match", lambda t: r"\b" + t + r"\b"),
    ("node-reference-quote", lambda t: r"\$\(['\"]" + t + r"['\"]\)"),
    ("node-reference-bracket", lambda t: r"\$node\[['\"]" + t + r"['\"]\]"),
    ("json-property", lambda t: r"\$json\." + t),
    ("property-chain", lambda t: t + r"\.[\w.\[\]]+"),
    ("property-contains", lambda t: r"\.[\w.]*" + t + r"[\w.]*"),
    ("node-reference-bare", lambda t: r"\$\(" + t + r"\)"),
    ("template-expression", lambda t: r"\{\{[^}]*" + t + r"[^}]*\}\}"),
    ("dollar-interpolation", lambda t: r"\$\{" + t + r"\}"),
    ("json-path", lambda t: r"\$json\..*" + t + r".*"),
    ("items-reference", lambda t: r"\$items\[[^\]]*\].*" + t + r".*"),
    ("input-reference", lambda t: r"\$input.*" + t + r".*"),
)


def patterns_for(search_term: Any, is_script: bool) -> List[SearchPattern]:
    """
    Build the ordered, case-insensitive pattern list for a term.

    Args:
        search_term: Raw term typed by the user (escaped here)
        is_script: Whether the node holds source code

    Returns:
        Patterns in priority order; [] when the term is empty
    """
    escaped = escape_term(search_term)
    if not escaped:
        return []

    if is_script:
        families = ((SCRIPT_FAMILY, SCRIPT_PATTERNS), (DECLARATIVE_FAMILY, DECLARATIVE_PATTERNS))
    else:
        families = ((DECLARATIVE_FAMILY, DECLARATIVE_PATTERNS), (SCRIPT_FAMILY, SCRIPT_PATTERNS))

    patterns: List[SearchPattern] = []
    for family, builders in families:
        for name, build in builders:
            patterns.append(SearchPattern(
                index=len(patterns),
                family=family,
                name=name,
                regex=re.compile(build(escaped), re.IGNORECASE),
            ))
    return patterns
