# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Workflow API Routes

Handles catalog operations against an n8n instance:
- Workflow listing and connection testing
- Single workflow details
- Sub-workflow call graph
"""

from typing import Any, Callable, Dict

from fastapi import APIRouter, Depends

from flowscope.core.dependencies import get_connection_resolver, get_n8n_client_factory
from flowscope.core.validation import require_string
from flowscope.models import ConnectionRequest
from flowscope.services.connection_resolver import ConnectionResolver
from flowscope.services.subworkflow_service import SubworkflowService
from flowscope.services.workflow_service import WorkflowService

router = APIRouter(prefix="/n8n", tags=["workflows"])


@router.post("/workflows")
async def list_workflows(
    body: ConnectionRequest,
    resolver: ConnectionResolver = Depends(get_connection_resolver),
    client_factory: Callable = Depends(get_n8n_client_factory)
) -> Dict[str, Any]:
    """List all workflows, active first"""
    connection = resolver.resolve(body.connection_id, body.base_url, body.api_key)
    async with client_factory(connection) as client:
        workflows = await WorkflowService(client).list_workflows()
    return {
        "success": True,
        "data": {"workflows": [workflow.model_dump(by_alias=True) for workflow in workflows]},
    }


@router.post("/test-connection")
async def test_connection(
    body: ConnectionRequest,
    resolver: ConnectionResolver = Depends(get_connection_resolver),
    client_factory: Callable = Depends(get_n8n_client_factory)
) -> Dict[str, Any]:
    """Check that the n8n instance accepts the credentials"""
    connection = resolver.resolve(body.connection_id, body.base_url, body.api_key)
    async with client_factory(connection) as client:
        await WorkflowService(client).test_connection()
    return {"success": True}


@router.post("/workflow-details/{workflow_id}")
async def get_workflow_details(
    workflow_id: str,
    body: ConnectionRequest,
    resolver: ConnectionResolver = Depends(get_connection_resolver),
    client_factory: Callable = Depends(get_n8n_client_factory)
) -> Dict[str, Any]:
    """Get one workflow's nodes, connections and settings"""
    workflow_id = require_string(workflow_id, "workflowId")
    connection = resolver.resolve(body.connection_id, body.base_url, body.api_key)
    async with client_factory(connection) as client:
        workflow = await WorkflowService(client).get_workflow_details(workflow_id)
    return {"success": True, "data": {"workflow": workflow}}


@router.post("/subworkflow-graph")
async def get_subworkflow_graph(
    body: ConnectionRequest,
    resolver: ConnectionResolver = Depends(get_connection_resolver),
    client_factory: Callable = Depends(get_n8n_client_factory)
) -> Dict[str, Any]:
    """Map which workflows call which through Execute Workflow nodes"""
    connection = resolver.resolve(body.connection_id, body.base_url, body.api_key)
    async with client_factory(connection) as client:
        graph = await SubworkflowService(client).build_graph()
    return {"success": True, "data": graph.model_dump(by_alias=True)}
