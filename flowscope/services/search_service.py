# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Search Service - Finds where a variable or expression is used in a workflow.

Provides functionality to:
- Fetch a workflow document from n8n
- Walk every node's parameters and credentials with type-specific patterns
- Deduplicate matches per node and rank nodes by relevance
"""

from typing import Any, List

from flowscope.core.errors import InvalidWorkflowDataError
from flowscope.core.logging import get_service_logger, log_event
from flowscope.models import SearchResult, WorkflowNode
from flowscope.services.expression_patterns import is_script_node, patterns_for
from flowscope.services.match_ranking import dedupe, rank
from flowscope.services.n8n_client import N8nClient
from flowscope.services.parameter_walker import ParameterWalker

logger = get_service_logger("search")


def search_node(
    node: WorkflowNode,
    search_term: str,
    max_depth: int = 10,
    line_context_threshold: int = 100
) -> SearchResult:
    """Search one node's parameters, then its credentials."""
    script = is_script_node(node.type)
    walker = ParameterWalker(
        patterns_for(search_term, script),
        node.name,
        is_script=script,
        max_depth=max_depth,
        line_context_threshold=line_context_threshold,
    )
    walker.walk(node.parameters, "parameters")
    if node.credentials:
        walker.walk(node.credentials, "credentials")

    if walker.outcome.diagnostics:
        log_event(
            logger, "parameter_walk_diagnostics", level="WARNING",
            node_id=node.id, diagnostics=walker.outcome.diagnostics
        )

    return SearchResult(
        node_name=node.name,
        node_type=node.type,
        node_id=node.id,
        matches=dedupe(walker.outcome.matches),
    )


def search_workflow(
    workflow: Any,
    search_term: str,
    max_depth: int = 10,
    line_context_threshold: int = 100
) -> List[SearchResult]:
    """
    Search an already-fetched workflow document.

    Args:
        workflow: Raw workflow JSON (must carry a `nodes` list)
        search_term: Term to look for (case-insensitive)

    Returns:
        Nodes with at least one match, most relevant first

    Raises:
        InvalidWorkflowDataError: If the document has no node list
    """
    if not isinstance(workflow, dict) or not isinstance(workflow.get("nodes"), list):
        raise InvalidWorkflowDataError(workflow.get("id") if isinstance(workflow, dict) else None)

    results: List[SearchResult] = []
    for raw_node in workflow["nodes"]:
        if not isinstance(raw_node, dict):
            continue
        node = WorkflowNode.model_validate(raw_node)
        result = search_node(node, search_term, max_depth, line_context_threshold)
        if result.matches:
            results.append(result)

    return rank(results, search_term)


class SearchService:
    """
    Service for variable/expression search.

    Responsibilities:
    - Fetch the workflow through N8nClient
    - Validate the document shape
    - Delegate to search_workflow
    """

    def __init__(self, client: N8nClient, max_depth: int = 10, line_context_threshold: int = 100):
        self.client = client
        self.max_depth = max_depth
        self.line_context_threshold = line_context_threshold

    async def search(self, workflow_id: str, search_term: str) -> List[SearchResult]:
        """
        Search one workflow for a term.

        Raises:
            UpstreamError: If the workflow cannot be fetched
            InvalidWorkflowDataError: If the fetched document has no node list
        """
        workflow = await self.client.get_workflow(workflow_id)
        results = search_workflow(workflow, search_term, self.max_depth, self.line_context_threshold)

        match_count = sum(len(result.matches) for result in results)
        logger.info(f"Search '{search_term}' in workflow {workflow_id}: {match_count} matches in {len(results)} nodes")
        return results
