# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Sub-workflow graph: which workflows call which through Execute Workflow nodes.
"""

from typing import Any, Dict, List, Optional, Tuple

from flowscope.core.logging import get_service_logger
from flowscope.models import (
    SubworkflowEdge,
    SubworkflowGraph,
    SubworkflowWorkflowMeta,
    WorkflowDocument,
)
from flowscope.services.n8n_client import N8nClient

logger = get_service_logger("subworkflows")

EXECUTE_WORKFLOW_TYPE = "n8n-nodes-base.executeWorkflow"
DYNAMIC_PREFIX = "__dynamic__"


def extract_workflow_id(raw: Any) -> Optional[Tuple[str, bool, Optional[str]]]:
    """
    Read the target of an Execute Workflow node's `workflowId` parameter.

    Accepts a resource locator ({"__rl": true, "value": "<id>"}), a plain id
    string or an expression ("={{ ... }}"), which cannot be resolved statically.

    Returns:
        (target id, is dynamic, expression) or None
    """
    if isinstance(raw, dict):
        if raw.get("__rl") and isinstance(raw.get("value"), str) and raw["value"]:
            return raw["value"], False, None
        return None

    if isinstance(raw, str):
        if raw.startswith("={{"):
            return f"{DYNAMIC_PREFIX}{raw}", True, raw
        if raw:
            return raw, False, None

    return None


def build_subworkflow_graph(items: List[Dict[str, Any]]) -> SubworkflowGraph:
    """Build the call graph from raw workflow list items (archived ones excluded)."""
    documents = [WorkflowDocument.model_validate(item) for item in items]
    documents = [document for document in documents if not document.is_archived]

    known = {
        document.id: SubworkflowWorkflowMeta(
            id=document.id,
            name=document.name,
            active=document.active,
            updated_at=document.updated_at,
        )
        for document in documents
    }

    edges: List[SubworkflowEdge] = []
    dynamic_refs: List[SubworkflowEdge] = []
    participants: List[str] = []
    targets: List[str] = []

    def remember(bucket: List[str], value: str) -> None:
        if value not in bucket:
            bucket.append(value)

    for document in documents:
        for node in document.nodes or []:
            if node.type != EXECUTE_WORKFLOW_TYPE:
                continue
            extracted = extract_workflow_id(node.parameters.get("workflowId"))
            if extracted is None:
                continue

            target_id, is_dynamic, expression = extracted
            target = known.get(target_id)
            edge = SubworkflowEdge(
                caller_id=document.id,
                caller_name=document.name,
                target_id=target_id,
                target_name=None if is_dynamic or target is None else target.name,
                is_dynamic=is_dynamic,
                expression=expression,
            )
            edges.append(edge)
            remember(participants, document.id)

            if is_dynamic:
                dynamic_refs.append(edge)
            else:
                remember(targets, target_id)
                remember(participants, target_id)

    missing = [target_id for target_id in targets if target_id not in known]
    if missing:
        logger.info(f"{len(missing)} sub-workflow targets are not present on the instance")

    return SubworkflowGraph(
        edges=edges,
        workflows={wid: known[wid] for wid in participants if wid in known},
        missing_targets=missing,
        dynamic_refs=dynamic_refs,
    )


class SubworkflowService:
    def __init__(self, client: N8nClient):
        self.client = client

    async def build_graph(self) -> SubworkflowGraph:
        items = await self.client.fetch_all_workflows()
        graph = build_subworkflow_graph(items)
        logger.info(f"Sub-workflow graph: {len(graph.edges)} edges across {len(graph.workflows)} workflows")
        return graph
