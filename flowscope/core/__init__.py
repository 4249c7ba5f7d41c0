# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Core utilities and shared modules for flowscope.

This package contains:
- config: Configuration management
- dependencies: Dependency injection
- errors: Custom exceptions
- logging: Structured logging
"""

from flowscope.core.config import get_config, Config
from flowscope.core.errors import FlowscopeError, NotFoundError, ValidationError
from flowscope.core.logging import get_logger

__all__ = [
    "get_config",
    "Config",
    "FlowscopeError",
    "NotFoundError",
    "ValidationError",
    "get_logger",
]
