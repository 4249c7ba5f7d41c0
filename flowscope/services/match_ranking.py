# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Deduplication and relevance ranking of search matches.
"""

from typing import Iterable, List

from flowscope.models import Match, SearchResult
from flowscope.services.parameter_walker import RawMatch

NODE_NAME_BONUS = 50
MATCH_WEIGHT = 10
SHORT_EXPRESSION_LENGTH = 50


def dedupe(raw_matches: Iterable[RawMatch]) -> List[Match]:
    """
    Collapse duplicate hits, keeping the one from the highest-priority pattern.

    Hits are stably ordered by pattern priority first, so among equal keys the
    lowest pattern index wins and equal priorities keep discovery order.
    """
    ordered = sorted(raw_matches, key=lambda raw: raw.priority)

    seen = set()
    unique: List[Match] = []
    for raw in ordered:
        key = (raw.field, raw.expression, raw.match_index)
        if key in seen:
            continue
        seen.add(key)
        unique.append(Match(
            field=raw.field,
            expression=raw.expression,
            full_value=raw.full_value,
            context=raw.context,
            match_index=raw.match_index,
        ))
    return unique


def _match_points(expression: str, search_term: str) -> int:
    if expression == search_term:
        points = 30
    elif expression.lower() == search_term.lower():
        points = 25
    elif search_term in expression:
        points = 15
    else:
        points = 5

    if len(expression) < SHORT_EXPRESSION_LENGTH:
        points += 5
    return points


def score(result: SearchResult, search_term: str) -> int:
    """
    Relevance of a node's result for a term.

    10 per match, +50 when the node name contains the term, plus per-match
    points for how closely the expression equals the term.
    """
    total = len(result.matches) * MATCH_WEIGHT
    if search_term.lower() in result.node_name.lower():
        total += NODE_NAME_BONUS
    for match in result.matches:
        total += _match_points(match.expression, search_term)
    return total


def rank(results: Iterable[SearchResult], search_term: str) -> List[SearchResult]:
    """Order results by descending score; ties keep document order."""
    return sorted(results, key=lambda result: score(result, search_term), reverse=True)
