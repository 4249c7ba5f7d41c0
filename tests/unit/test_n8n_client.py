# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Unit tests for N8nClient

Tests pagination, envelope handling and upstream error mapping.
"""

import asyncio

import httpx
import pytest

from flowscope.core.errors import UpstreamError, UpstreamTimeoutError
from flowscope.services.n8n_client import N8nClient
from tests.conftest import API_KEY, BASE_URL, FakeN8n, make_workflow


def client_for(handler):
    return N8nClient(BASE_URL + "/", API_KEY, http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


class TestPagination:
    """Test list_workflows_page and fetch_all_workflows"""

    @pytest.mark.asyncio
    async def test_follows_cursor_until_exhausted(self):
        """Should fetch every page"""
        fake = FakeN8n([make_workflow(f"wf-{i}", []) for i in range(5)], page_size=2)

        workflows = await fake.client().fetch_all_workflows()

        assert [w["id"] for w in workflows] == [f"wf-{i}" for i in range(5)]
        assert fake.list_calls() == 3
        assert fake.requests[0].url.params["limit"] == "100"
        assert "cursor" not in fake.requests[0].url.params
        assert fake.requests[1].url.params["cursor"] == "2"

    @pytest.mark.asyncio
    async def test_stops_on_repeated_cursor(self):
        """Should not loop forever when n8n repeats a cursor"""
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={"data": [{"id": str(len(calls))}], "nextCursor": "same"})

        workflows = await client_for(handler).fetch_all_workflows()

        assert len(calls) == 2
        assert len(workflows) == 2

    @pytest.mark.asyncio
    async def test_sends_api_key_and_strips_trailing_slash(self):
        """Should authenticate with X-N8N-API-KEY against the normalized URL"""
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"data": []})

        client = client_for(handler)
        await client.list_workflows_page()

        assert client.base_url == BASE_URL
        assert str(seen[0].url).startswith(f"{BASE_URL}/api/v1/workflows")
        assert seen[0].headers["X-N8N-API-KEY"] == API_KEY


class TestGetWorkflow:
    """Test get_workflow method"""

    @pytest.mark.asyncio
    async def test_returns_plain_document(self):
        """Should return the workflow document"""
        fake = FakeN8n([make_workflow("wf-1", [])])
        workflow = await fake.client().get_workflow("wf-1")
        assert workflow["id"] == "wf-1"

    @pytest.mark.asyncio
    async def test_unwraps_data_envelope(self):
        """Should unwrap {"data": {...}} responses"""
        client = client_for(lambda request: httpx.Response(200, json={"data": {"id": "wf-1", "nodes": []}}))
        workflow = await client.get_workflow("wf-1")
        assert workflow == {"id": "wf-1", "nodes": []}


class TestErrorMapping:
    """Test upstream failure mapping"""

    @pytest.mark.asyncio
    async def test_json_message(self):
        """Should prefer the JSON message"""
        client = client_for(lambda request: httpx.Response(401, json={"message": "unauthorized"}))

        with pytest.raises(UpstreamError) as exc_info:
            await client.get_workflow("wf-1")

        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "unauthorized"

    @pytest.mark.asyncio
    async def test_text_body(self):
        """Should fall back to the response body text"""
        client = client_for(lambda request: httpx.Response(502, content=b"Bad gateway"))

        with pytest.raises(UpstreamError) as exc_info:
            await client.get_workflow("wf-1")

        assert exc_info.value.status_code == 502
        assert exc_info.value.message == "Bad gateway"

    @pytest.mark.asyncio
    async def test_generic_status(self):
        """Should use a generic message for empty bodies"""
        client = client_for(lambda request: httpx.Response(503))

        with pytest.raises(UpstreamError) as exc_info:
            await client.get_workflow("wf-1")

        assert exc_info.value.message == "HTTP error! status: 503"

    @pytest.mark.asyncio
    async def test_timeout(self):
        """Should map timeouts to UpstreamTimeoutError (504)"""
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(UpstreamTimeoutError) as exc_info:
            await client_for(handler).get_workflow("wf-1")

        assert exc_info.value.status_code == 504
        assert exc_info.value.message == "Upstream request timed out"

    @pytest.mark.asyncio
    async def test_total_deadline(self):
        """Should give up on a slow upstream once the whole request exceeds the timeout"""
        async def handler(request):
            await asyncio.sleep(5)
            return httpx.Response(200, json={"data": []})

        client = N8nClient(
            BASE_URL, API_KEY, timeout=0.05,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )

        with pytest.raises(UpstreamTimeoutError) as exc_info:
            await client.list_workflows_page()

        assert exc_info.value.status_code == 504

    @pytest.mark.asyncio
    async def test_transport_error(self):
        """Should map connection failures to UpstreamError (500)"""
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(UpstreamError) as exc_info:
            await client_for(handler).list_workflows_page()

        assert exc_info.value.status_code == 500
        assert "connection refused" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        """Should reject non-JSON success bodies"""
        client = client_for(lambda request: httpx.Response(200, content=b"<html>"))

        with pytest.raises(UpstreamError) as exc_info:
            await client.get_workflow("wf-1")

        assert exc_info.value.message == "Invalid JSON received from n8n"
