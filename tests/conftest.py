# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Test Fixtures and Utilities

Provides pytest fixtures for a fake n8n API (httpx.MockTransport), sample
workflow documents and helpers to build clients against them.
"""

import json
import pytest
import httpx
from typing import Any, Callable, Dict, List, Optional

from flowscope.services.n8n_client import N8nClient


BASE_URL = "http://n8n.test"
API_KEY = "test-api-key"


# ============================================================================
# Fake n8n API
# ============================================================================

class FakeN8n:
    """
    In-memory n8n public API.

    Serves GET /api/v1/workflows (paginated) and GET /api/v1/workflows/{id}.
    Records every request so tests can assert on call counts and headers.
    """

    def __init__(self, workflows: Optional[List[Dict[str, Any]]] = None, page_size: int = 100):
        self.workflows = list(workflows or [])
        self.page_size = page_size
        self.requests: List[httpx.Request] = []
        self.failures: Dict[str, httpx.Response] = {}

    def fail(self, path: str, status_code: int, body: Any = None) -> None:
        """Answer `path` with an error response."""
        content = json.dumps(body) if isinstance(body, (dict, list)) else (body or "")
        self.failures[path] = httpx.Response(status_code, content=content)

    def list_calls(self) -> int:
        return sum(1 for request in self.requests if request.url.path == "/api/v1/workflows")

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path in self.failures:
            return self.failures[path]

        if path == "/api/v1/workflows":
            start = int(request.url.params.get("cursor") or 0)
            page = self.workflows[start:start + self.page_size]
            next_start = start + self.page_size
            next_cursor = str(next_start) if next_start < len(self.workflows) else None
            return httpx.Response(200, json={"data": page, "nextCursor": next_cursor})

        if path.startswith("/api/v1/workflows/"):
            workflow_id = path.rsplit("/", 1)[-1]
            for workflow in self.workflows:
                if workflow.get("id") == workflow_id:
                    return httpx.Response(200, json=workflow)
            return httpx.Response(404, json={"message": "Workflow not found"})

        return httpx.Response(404, json={"message": "Not found"})

    def client(self, base_url: str = BASE_URL, api_key: str = API_KEY, **kwargs: Any) -> N8nClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
        return N8nClient(base_url, api_key, http_client=http_client, **kwargs)

    def client_factory(self) -> Callable:
        return lambda connection: self.client(connection.base_url, connection.api_key)


# ============================================================================
# Sample Workflows
# ============================================================================

def make_workflow(
    workflow_id: str,
    nodes: List[Dict[str, Any]],
    name: Optional[str] = None,
    active: bool = True,
    **extra: Any
) -> Dict[str, Any]:
    workflow = {
        "id": workflow_id,
        "name": name or f"Workflow {workflow_id}",
        "active": active,
        "nodes": nodes,
        "connections": {},
        "updatedAt": "2024-01-01T00:00:00.000Z",
        "createdAt": "2024-01-01T00:00:00.000Z",
    }
    workflow.update(extra)
    return workflow


def schedule_node(node_id: str, parameters: Dict[str, Any], notes: Optional[str] = None) -> Dict[str, Any]:
    node = {
        "id": node_id,
        "name": f"Schedule {node_id}",
        "type": "n8n-nodes-base.scheduleTrigger",
        "parameters": parameters,
    }
    if notes is not None:
        node["notes"] = notes
    return node


@pytest.fixture
def fake_n8n():
    """Empty fake n8n instance"""
    return FakeN8n()


@pytest.fixture
def sample_search_workflow():
    """Workflow with an HTTP Request node and a Set node"""
    return make_workflow("test-workflow-1", [
        {
            "id": "node-1",
            "name": "HTTP Request",
            "type": "n8n-nodes-base.httpRequest",
            "parameters": {
                "url": "https://api.example.com/data",
                "method": "GET",
                "headers": {
                    "Authorization": "Bearer {{$json.token}}",
                    "Content-Type": "application/json",
                },
            },
        },
        {
            "id": "node-2",
            "name": "Set Variable",
            "type": "n8n-nodes-base.set",
            "parameters": {
                "values": {
                    "string": [
                        {"name": "apiUrl", "value": "https://api.example.com/{{$json.endpoint}}"},
                        {"name": "userId", "value": "{{$node[\"HTTP Request\"].json.userId}}"},
                    ]
                }
            },
        },
    ], name="Test Workflow")
