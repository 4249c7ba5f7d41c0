# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Connection Resolver - Turns a caller's connection selector into n8n credentials.

Credentials come from either:
- explicit baseUrl + apiKey in the request, or
- a named connection from configs/flowscope.yaml whose API key is read from
  the environment variable it names.
"""

import hashlib
from dataclasses import dataclass
from typing import Optional

from flowscope.core.config import Config
from flowscope.core.errors import FlowscopeError, NotFoundError, ValidationError
from flowscope.core.logging import get_service_logger
from flowscope.core.validation import optional_string, require_url, require_string

logger = get_service_logger("connections")


@dataclass(frozen=True)
class ResolvedConnection:
    """A usable (base URL, API key) pair"""
    base_url: str
    api_key: str
    name: Optional[str] = None

    @property
    def fingerprint(self) -> str:
        """Stable identifier for cache keys that does not expose the key itself."""
        digest = hashlib.sha256(self.api_key.encode("utf-8")).hexdigest()[:16]
        return f"{self.base_url}|{digest}"


class ConnectionResolver:
    """
    Resolves connections against the configured n8n instances.

    Priority:
    1. Explicit baseUrl + apiKey
    2. connectionId looked up in config
    3. The configured default connection (or the only one configured)
    """

    def __init__(self, config: Config):
        self.config = config

    def resolve(
        self,
        connection_id: Optional[str] = None,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None
    ) -> ResolvedConnection:
        """
        Resolve a connection.

        Raises:
            ValidationError: Bad selector input or no default connection
            NotFoundError: Unknown connectionId
            FlowscopeError: Connection exists but its API key is not set
        """
        connection_id = optional_string(connection_id, "connectionId")

        if base_url is not None or api_key is not None:
            if base_url is None or api_key is None:
                raise ValidationError("baseUrl and apiKey must be provided together", field="baseUrl")
            return ResolvedConnection(
                base_url=require_url(base_url, "baseUrl"),
                api_key=require_string(api_key, "apiKey"),
            )

        name = connection_id or self._default_connection_name()
        connection = self.config.get_connection(name)
        if connection is None:
            if connection_id:
                raise NotFoundError("Connection", connection_id)
            raise ValidationError("No active connection found")

        key = connection.api_key
        if not key:
            logger.error(f"API key env var {connection.api_key_env} is not set for connection '{name}'")
            raise FlowscopeError(f"API key is not configured for connection '{name}'", status_code=500)

        return ResolvedConnection(base_url=connection.base_url, api_key=key, name=name)

    def _default_connection_name(self) -> str:
        if self.config.default_connection:
            return self.config.default_connection
        if len(self.config.connections) == 1:
            return next(iter(self.config.connections))
        raise ValidationError("No active connection found")
