# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Unit tests for SearchService

Tests whole-workflow search and document validation.
"""

import pytest
from unittest.mock import AsyncMock

from flowscope.core.errors import InvalidWorkflowDataError, UpstreamError
from flowscope.services.search_service import SearchService, search_workflow
from tests.conftest import FakeN8n, make_workflow


class TestSearchWorkflow:
    """Test search_workflow function"""

    def test_finds_json_in_authorization_header(self, sample_search_workflow):
        """Should locate "json" under parameters.headers.Authorization"""
        results = search_workflow(sample_search_workflow, "json")

        http = next(r for r in results if r.node_id == "node-1")
        fields = [m.field for m in http.matches]
        assert "parameters.headers.Authorization" in fields

    def test_reports_only_nodes_with_matches(self, sample_search_workflow):
        """Should omit nodes without matches"""
        results = search_workflow(sample_search_workflow, "userId")

        assert [r.node_name for r in results] == ["Set Variable"]
        assert [m.field for m in results[0].matches] == [
            "parameters.values.string[1].name",
            "parameters.values.string[1].value",
        ]

    def test_expressions_unique_per_node(self, sample_search_workflow):
        """Should never repeat a (field, expression) pair within a node"""
        for result in search_workflow(sample_search_workflow, "json"):
            pairs = [(m.field, m.expression) for m in result.matches]
            assert len(pairs) == len(set(pairs))

    def test_searches_credentials(self):
        """Should walk credentials after parameters"""
        workflow = make_workflow("wf", [{
            "id": "n1",
            "name": "Call API",
            "type": "n8n-nodes-base.httpRequest",
            "parameters": {"url": "https://example.com"},
            "credentials": {"httpHeaderAuth": {"id": "7", "name": "Partner Token"}},
        }])

        results = search_workflow(workflow, "token")

        assert [m.field for m in results[0].matches] == ["credentials.httpHeaderAuth.name"]

    def test_code_node_reports_line(self):
        """Should narrow code matches to a line"""
        code = "\n".join(["const items = $input.all();"] + ["// filler line"] * 10 + ["const apiToken = 'x';"])
        workflow = make_workflow("wf", [{
            "id": "c1", "name": "Code", "type": "n8n-nodes-base.code", "parameters": {"jsCode": code},
        }])

        results = search_workflow(workflow, "apiToken")

        match = results[0].matches[0]
        assert match.expression == "const apiToken = 'x';"
        assert match.context == "Code Node: Code (Line 12)"

    def test_equal_scores_keep_document_order(self):
        """Should keep document order for equally relevant nodes"""
        nodes = [
            {"id": f"n{i}", "name": f"Step {i}", "type": "n8n-nodes-base.set", "parameters": {"v": "{{$json.total}}"}}
            for i in range(3)
        ]

        results = search_workflow(make_workflow("wf", nodes), "total")

        assert [r.node_id for r in results] == ["n0", "n1", "n2"]

    def test_skips_malformed_nodes(self):
        """Should ignore node entries that are not objects"""
        workflow = make_workflow("wf", ["junk", {"id": "n1", "name": "Set", "type": "x", "parameters": {"a": "total"}}])
        assert [r.node_id for r in search_workflow(workflow, "total")] == ["n1"]

    @pytest.mark.parametrize("workflow", [
        {"id": "wf", "name": "No nodes"},
        {"id": "wf", "nodes": "not-a-list"},
        [],
        None,
    ])
    def test_invalid_workflow_data(self, workflow):
        """Should reject documents without a node list"""
        with pytest.raises(InvalidWorkflowDataError) as exc_info:
            search_workflow(workflow, "x")
        assert exc_info.value.message == "Invalid workflow data received from n8n"


class TestSearchService:
    """Test SearchService.search method"""

    @pytest.mark.asyncio
    async def test_fetches_and_searches(self, sample_search_workflow):
        """Should fetch the workflow by id and search it"""
        fake = FakeN8n([sample_search_workflow])
        service = SearchService(fake.client())

        results = await service.search("test-workflow-1", "userId")

        assert results[0].node_id == "node-2"
        assert fake.requests[0].url.path == "/api/v1/workflows/test-workflow-1"
        assert fake.requests[0].headers["X-N8N-API-KEY"] == "test-api-key"

    @pytest.mark.asyncio
    async def test_uses_client_workflow(self, sample_search_workflow):
        """Should search whatever document the client returns"""
        client = AsyncMock()
        client.get_workflow.return_value = sample_search_workflow
        service = SearchService(client)

        results = await service.search("test-workflow-1", "json")

        client.get_workflow.assert_awaited_once_with("test-workflow-1")
        assert results

    @pytest.mark.asyncio
    async def test_propagates_upstream_errors(self):
        """Should surface upstream failures unchanged"""
        fake = FakeN8n([])
        service = SearchService(fake.client())

        with pytest.raises(UpstreamError) as exc_info:
            await service.search("missing", "x")

        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Workflow not found"
