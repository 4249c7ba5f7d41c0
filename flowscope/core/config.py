# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
flowscope Configuration - Single source of truth.
YAML is king. Env vars ONLY for secrets.

- ALL configuration in plain text (YAML)
- NO hidden state - everything inspectable via `cat`, `grep`, `yq`
"""

import os
import yaml
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Dict, Any


DEFAULT_CONFIG_PATH = "configs/flowscope.yaml"


# =============================================================================
# CONFIGURATION DATACLASS
# =============================================================================

@dataclass(frozen=True)
class ConnectionConfig:
    """A named n8n instance. The API key itself lives in the environment."""

    name: str
    base_url: str
    api_key_env: str

    @property
    def api_key(self) -> Optional[str]:
        return os.getenv(self.api_key_env)


@dataclass(frozen=True)
class Config:
    """
    Immutable application configuration.
    All values from YAML. No hidden state.
    """

    # -- Server --
    service_host: str = "0.0.0.0"
    service_port: int = 8000

    # -- n8n API --
    n8n_timeout: float = 15.0
    n8n_page_size: int = 100

    # -- Schedules --
    max_events_per_workflow: int = 500
    default_event_seconds: int = 300
    events_cache_ttl: float = 60.0

    # -- Search --
    search_max_depth: int = 10
    line_context_threshold: int = 100

    # -- Connections --
    connections: Dict[str, ConnectionConfig] = field(default_factory=dict)
    default_connection: Optional[str] = None

    # -- Logging --
    log_level: str = "INFO"
    log_format: str = "json"

    def get_connection(self, name: str) -> Optional[ConnectionConfig]:
        return self.connections.get(name)


# =============================================================================
# LOADER
# =============================================================================

def _parse_connections(raw: Any) -> Dict[str, ConnectionConfig]:
    """Build ConnectionConfig entries from the `connections` YAML mapping."""
    connections: Dict[str, ConnectionConfig] = {}
    if not isinstance(raw, dict):
        return connections

    for name, entry in raw.items():
        if not isinstance(entry, dict) or not entry.get("base_url"):
            continue
        connections[str(name)] = ConnectionConfig(
            name=str(name),
            base_url=str(entry["base_url"]).rstrip("/"),
            api_key_env=str(entry.get("api_key_env") or f"N8N_{str(name).upper()}_API_KEY"),
        )
    return connections


def load_config(path: str = DEFAULT_CONFIG_PATH) -> Config:
    """
    Load configuration from YAML.
    Returns defaults if file doesn't exist.
    """
    if not Path(path).exists():
        print(f"Config not found at {path}, using defaults")
        return Config()

    with open(path) as f:
        y = yaml.safe_load(f) or {}

    # Helper to safely navigate nested dicts
    def get(d: dict, *keys, default=None):
        for k in keys:
            if not isinstance(d, dict):
                return default
            d = d.get(k, {})
        return d if d != {} else default

    return Config(
        # Server
        service_host=get(y, "server", "host") or "0.0.0.0",
        service_port=get(y, "server", "port") or 8000,

        # n8n API
        n8n_timeout=get(y, "n8n", "timeout_seconds") or 15.0,
        n8n_page_size=get(y, "n8n", "page_size") or 100,

        # Schedules
        max_events_per_workflow=get(y, "schedules", "max_events_per_workflow") or 500,
        default_event_seconds=get(y, "schedules", "default_event_seconds") or 300,
        events_cache_ttl=get(y, "schedules", "cache_ttl_seconds") or 60.0,

        # Search
        search_max_depth=get(y, "search", "max_depth") or 10,
        line_context_threshold=get(y, "search", "line_context_threshold") or 100,

        # Connections
        connections=_parse_connections(get(y, "connections")),
        default_connection=get(y, "default_connection"),

        # Logging
        log_level=os.getenv("LOG_LEVEL") or get(y, "logging", "level") or "INFO",
        log_format=get(y, "logging", "format") or "json",
    )


# =============================================================================
# GLOBAL INSTANCE
# =============================================================================

_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create global config instance."""
    global _config
    if _config is None:
        config_path = os.getenv("FLOWSCOPE_CONFIG_PATH", DEFAULT_CONFIG_PATH)
        _config = load_config(config_path)
    return _config


def reload_config() -> Config:
    """Force reload configuration."""
    global _config
    _config = None
    return get_config()
