# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Recursive walk over node parameter trees.

Parameter trees come straight from the n8n API and are treated as untrusted:
descent is bounded by a depth ceiling, and containers that are already on the
current path (or that cannot be serialized because they are circular) are
skipped with a diagnostic instead of traversed.
"""

import json
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Sequence, Set, Tuple

from flowscope.core.logging import get_service_logger
from flowscope.services.expression_patterns import SearchPattern

logger = get_service_logger("parameter_walker")


@dataclass(frozen=True)
class RawMatch:
    """A pattern hit before deduplication"""
    field: str
    expression: str
    full_value: str
    context: str
    match_index: int
    priority: int
    pattern_type: str
    family: str


@dataclass
class WalkOutcome:
    matches: List[RawMatch] = field(default_factory=list)
    diagnostics: List[str] = field(default_factory=list)


def _child_path(path: str, key: Any) -> str:
    return f"{path}.{key}" if path else str(key)


class ParameterWalker:
    """
    Collects pattern matches from one node's parameter trees.

    A walker is created per node; walk() may be called several times (for
    `parameters` and then `credentials`) and matchIndex keeps counting across
    calls.
    """

    def __init__(
        self,
        patterns: Sequence[SearchPattern],
        node_name: str,
        is_script: bool = False,
        max_depth: int = 10,
        line_context_threshold: int = 100
    ):
        self.patterns = list(patterns)
        self.node_name = node_name
        self.is_script = is_script
        self.max_depth = max_depth
        self.line_context_threshold = line_context_threshold
        self.outcome = WalkOutcome()
        self._next_index = 0

    def walk(self, tree: Any, root_path: str = "") -> WalkOutcome:
        """
        Walk a parameter tree depth-first in key order.

        Args:
            tree: Mapping of parameters (anything else is ignored)
            root_path: Path prefix for reported fields ("parameters", "credentials")

        Returns:
            The accumulated outcome for this node
        """
        if isinstance(tree, Mapping) and self.patterns:
            self._walk_mapping(tree, root_path, self.max_depth, {id(tree)})
        return self.outcome

    # Private helper methods

    def _walk_mapping(self, obj: Mapping[str, Any], path: str, depth: int, ancestors: Set[int]) -> None:
        if depth <= 0:
            return
        for key, value in obj.items():
            self._visit(value, _child_path(path, key), depth, ancestors)

    def _walk_sequence(self, items: Sequence[Any], path: str, depth: int, ancestors: Set[int]) -> None:
        for index, item in enumerate(items):
            self._visit(item, f"{path}[{index}]", depth, ancestors)

    def _visit(self, value: Any, path: str, depth: int, ancestors: Set[int]) -> None:
        if isinstance(value, str):
            if value.strip():
                self._match_string(value, path)
            return

        if isinstance(value, (Mapping, list, tuple)):
            if id(value) in ancestors or not self._is_acyclic(value):
                self._diagnose(f"Circular reference detected at {path}")
                return
            nested = ancestors | {id(value)}
            if isinstance(value, Mapping):
                self._walk_mapping(value, path, depth - 1, nested)
            else:
                # Lists do not consume depth; their mapping elements do.
                self._walk_sequence(value, path, depth, nested)

    @staticmethod
    def _is_acyclic(value: Any) -> bool:
        try:
            json.dumps(value, default=str)
        except (ValueError, RecursionError):
            return False
        return True

    def _diagnose(self, message: str) -> None:
        logger.warning(f"{message} (node '{self.node_name}')")
        self.outcome.diagnostics.append(message)

    def _match_string(self, value: str, path: str) -> None:
        emitted: Set[Tuple[str, str]] = set()
        narrow = self.is_script and len(value) > self.line_context_threshold
        lines = value.split("\n") if narrow else None

        for pattern in self.patterns:
            if not pattern.search(value):
                continue

            expression = value
            context = f"Node: {self.node_name}"
            if lines is not None:
                located = self._first_matching_line(pattern, lines)
                if located is not None:
                    line_number, line = located
                    expression = line.strip()
                    context = f"Code Node: {self.node_name} (Line {line_number})"

            key = (path, expression)
            if key in emitted:
                continue
            emitted.add(key)

            self.outcome.matches.append(RawMatch(
                field=path,
                expression=expression,
                full_value=value,
                context=context,
                match_index=self._next_index,
                priority=pattern.index,
                pattern_type=pattern.name,
                family=pattern.family,
            ))
            self._next_index += 1

    @staticmethod
    def _first_matching_line(pattern: SearchPattern, lines: List[str]) -> Optional[Tuple[int, str]]:
        for number, line in enumerate(lines, start=1):
            if pattern.search(line):
                return number, line
        return None


def walk(
    node_parameters: Any,
    is_script_node: bool,
    node_name: str,
    patterns: Sequence[SearchPattern],
    root_path: str = "parameters",
    max_depth: int = 10,
    line_context_threshold: int = 100
) -> WalkOutcome:
    """Walk a single parameter tree with a fresh walker."""
    walker = ParameterWalker(
        patterns,
        node_name,
        is_script=is_script_node,
        max_depth=max_depth,
        line_context_threshold=line_context_threshold,
    )
    return walker.walk(node_parameters, root_path)
