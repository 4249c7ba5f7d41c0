# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Workflow Service - Catalog operations over the workflows of an n8n instance.

Provides functionality to:
- List workflows as compact summaries (active first, newest first)
- Test that a connection's credentials are accepted
- Fetch one workflow's analysis view (nodes, connections, settings)
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from flowscope.core.errors import UpstreamError, ValidationError
from flowscope.core.logging import get_service_logger
from flowscope.models import WorkflowDocument, WorkflowSummary
from flowscope.services.n8n_client import N8nClient

logger = get_service_logger("workflows")

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _parse_timestamp(value: Optional[str]) -> datetime:
    if not value:
        return _EPOCH
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return _EPOCH
    return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=timezone.utc)


def sort_summaries(summaries: List[WorkflowSummary]) -> List[WorkflowSummary]:
    """Active workflows first, then most recently updated first."""
    by_updated = sorted(summaries, key=lambda s: _parse_timestamp(s.updated_at), reverse=True)
    return sorted(by_updated, key=lambda s: not s.active)


class WorkflowService:
    """
    Service for workflow catalog operations.

    Responsibilities:
    - Summarize workflow list items
    - Surface connection problems as caller errors
    - Shape single-workflow documents for analysis
    """

    def __init__(self, client: N8nClient):
        self.client = client

    async def list_workflows(self) -> List[WorkflowSummary]:
        """
        List every workflow on the instance.

        Returns:
            Summaries sorted active first, then by updatedAt descending
        """
        items = await self.client.fetch_all_workflows()
        summaries = []
        for item in items:
            document = WorkflowDocument.model_validate(item)
            summaries.append(WorkflowSummary(
                id=document.id,
                name=document.name,
                active=document.active,
                nodes=document.node_count,
                updated_at=document.updated_at,
                created_at=document.created_at,
                tags=document.tags,
            ))
        return sort_summaries(summaries)

    async def test_connection(self) -> None:
        """
        Check that the instance answers a workflow list call.

        Raises:
            ValidationError: With the upstream message when the call fails
        """
        try:
            await self.client.list_workflows_page()
        except UpstreamError as e:
            logger.warning(f"Connection test failed for {self.client.base_url}: {e.message}")
            raise ValidationError(e.message)

    async def get_workflow_details(self, workflow_id: str) -> Dict[str, Any]:
        """Fetch one workflow reduced to the fields used for analysis."""
        workflow = await self.client.get_workflow(workflow_id)
        if not isinstance(workflow, dict):
            workflow = {}
        return {
            "id": workflow.get("id", workflow_id),
            "name": workflow.get("name"),
            "nodes": workflow.get("nodes") or [],
            "connections": workflow.get("connections") or {},
            "settings": workflow.get("settings") or {},
            "active": workflow.get("active"),
            "createdAt": workflow.get("createdAt"),
            "updatedAt": workflow.get("updatedAt"),
        }
