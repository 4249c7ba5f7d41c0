# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Dependency injection for flowscope.

Provides FastAPI dependencies for configuration, connection resolution, the
n8n client factory and the shared schedule cache.
"""

from typing import Callable

from fastapi import Depends, Request

from flowscope.core.config import Config, get_config
from flowscope.core.logging import get_logger

logger = get_logger(__name__)


# Configuration dependency
def get_current_config() -> Config:
    """
    Get current application configuration.

    Returns:
        Config: Application configuration
    """
    return get_config()


# Service dependencies

def get_connection_resolver(
    config: Config = Depends(get_current_config)
):
    """Get ConnectionResolver instance."""
    from flowscope.services.connection_resolver import ConnectionResolver
    return ConnectionResolver(config)


def get_n8n_client_factory(
    config: Config = Depends(get_current_config)
) -> Callable:
    """
    Get a factory that opens an N8nClient for a resolved connection.

    Routers use the client as an async context manager so its HTTP pool is
    closed when the request finishes.
    """
    from flowscope.services.n8n_client import N8nClient

    def factory(connection) -> N8nClient:
        return N8nClient(
            connection.base_url,
            connection.api_key,
            timeout=config.n8n_timeout,
            page_size=config.n8n_page_size,
        )

    return factory


def get_schedule_cache(request: Request):
    """Get the process-wide ScheduleCache (initialized at startup)."""
    return request.app.state.schedule_cache
