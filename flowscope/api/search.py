# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Search API Routes

Handles variable/expression search inside a single workflow.
"""

from typing import Any, Callable, Dict

from fastapi import APIRouter, Depends

from flowscope.core.config import Config
from flowscope.core.dependencies import get_connection_resolver, get_current_config, get_n8n_client_factory
from flowscope.core.validation import require_string
from flowscope.models import SearchRequest
from flowscope.services.connection_resolver import ConnectionResolver
from flowscope.services.search_service import SearchService

router = APIRouter(prefix="/n8n", tags=["search"])


@router.post("/search-variable")
async def search_variable(
    body: SearchRequest,
    resolver: ConnectionResolver = Depends(get_connection_resolver),
    client_factory: Callable = Depends(get_n8n_client_factory),
    config: Config = Depends(get_current_config)
) -> Dict[str, Any]:
    """Find every node parameter that references the search term"""
    workflow_id = require_string(body.workflow_id, "workflowId")
    search_term = require_string(body.search_term, "searchTerm", trim=False)
    connection = resolver.resolve(body.connection_id, body.base_url, body.api_key)

    async with client_factory(connection) as client:
        service = SearchService(
            client,
            max_depth=config.search_max_depth,
            line_context_threshold=config.line_context_threshold,
        )
        results = await service.search(workflow_id, search_term)

    return {
        "success": True,
        "data": {"results": [result.model_dump(by_alias=True) for result in results]},
    }
