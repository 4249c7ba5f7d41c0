# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
n8n API Client - Fetches workflow definitions from an n8n instance.

Provides functionality to:
- List workflows page by page (cursor pagination)
- Fetch every workflow across all pages
- Fetch a single workflow document
- Map upstream failures onto flowscope errors (status + upstream message)
"""

import asyncio
import httpx
from typing import List, Dict, Any, Optional, Tuple

from flowscope.core.logging import get_service_logger
from flowscope.core.errors import UpstreamError, UpstreamTimeoutError

logger = get_service_logger("n8n_client")


class N8nClient:
    """
    Client for the n8n public REST API (v1).

    Responsibilities:
    - Authenticate with the X-N8N-API-KEY header
    - Paginate the workflow list
    - Unwrap {"data": ...} envelopes
    - Bound every call with a fixed timeout
    """

    WORKFLOWS_PATH = "/api/v1/workflows"
    API_KEY_HEADER = "X-N8N-API-KEY"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 15.0,
        page_size: int = 100,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize n8n client.

        Args:
            base_url: n8n instance URL (trailing slash is ignored)
            api_key: n8n API key
            timeout: Total deadline per request in seconds
            page_size: Workflows requested per list page
            http_client: Optional pre-built client (shared pool or test transport)
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.page_size = page_size
        self.timeout_seconds = timeout
        self.timeout = httpx.Timeout(timeout)
        self._owns_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(timeout=self.timeout)

    async def __aenter__(self) -> "N8nClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self.http_client.aclose()

    # Public API

    async def list_workflows_page(self, cursor: Optional[str] = None) -> Tuple[List[Dict[str, Any]], Optional[str]]:
        """
        Fetch one page of the workflow list.

        Args:
            cursor: Continuation cursor from the previous page

        Returns:
            (workflows on this page, next cursor or None)

        Raises:
            UpstreamError: On non-2xx responses or transport failures
            UpstreamTimeoutError: When the request exceeds the timeout
        """
        params: Dict[str, Any] = {"limit": self.page_size}
        if cursor:
            params["cursor"] = cursor

        payload = await self._get_json(self.WORKFLOWS_PATH, params=params)
        if not isinstance(payload, dict):
            return [], None

        items = payload.get("data")
        workflows = [item for item in items if isinstance(item, dict)] if isinstance(items, list) else []
        next_cursor = payload.get("nextCursor")
        return workflows, next_cursor if isinstance(next_cursor, str) and next_cursor else None

    async def fetch_all_workflows(self) -> List[Dict[str, Any]]:
        """
        Fetch every workflow by following nextCursor until it is exhausted.

        Returns:
            All workflow list items, in upstream order
        """
        workflows: List[Dict[str, Any]] = []
        seen_cursors = set()
        cursor: Optional[str] = None

        while True:
            page, cursor = await self.list_workflows_page(cursor)
            workflows.extend(page)
            if not cursor:
                break
            if cursor in seen_cursors:
                logger.warning(f"n8n returned a repeated cursor, stopping pagination at {len(workflows)} workflows")
                break
            seen_cursors.add(cursor)

        logger.info(f"Fetched {len(workflows)} workflows from {self.base_url}")
        return workflows

    async def get_workflow(self, workflow_id: str) -> Any:
        """
        Fetch a single workflow document.

        The public API returns the workflow itself; some proxies wrap it in
        {"data": {...}}. Both are accepted. The result is returned untyped so
        callers can validate its shape.
        """
        payload = await self._get_json(f"{self.WORKFLOWS_PATH}/{workflow_id}")
        if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
            return payload["data"]
        return payload

    # Private helper methods

    async def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}{path}"
        headers = {
            self.API_KEY_HEADER: self.api_key,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

        try:
            response = await asyncio.wait_for(
                self.http_client.get(url, params=params, headers=headers, timeout=self.timeout),
                timeout=self.timeout_seconds,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            logger.error(f"n8n request timed out: {url}")
            raise UpstreamTimeoutError(url=url)
        except httpx.HTTPError as e:
            logger.error(f"n8n request failed: {url}: {e}")
            raise UpstreamError(str(e) or "Upstream request failed", status_code=500, url=url)

        if response.is_error:
            message = self._error_message(response)
            logger.warning(f"n8n returned {response.status_code} for {url}: {message}")
            raise UpstreamError(message, status_code=response.status_code, url=url)

        try:
            return response.json()
        except ValueError:
            raise UpstreamError("Invalid JSON received from n8n", status_code=500, url=url)

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        """Prefer the JSON `message`, then the raw body, then a generic status line."""
        fallback = f"HTTP error! status: {response.status_code}"
        text = response.text
        try:
            body = response.json()
        except ValueError:
            return text or fallback

        if isinstance(body, dict) and isinstance(body.get("message"), str) and body["message"]:
            return body["message"]
        return fallback
