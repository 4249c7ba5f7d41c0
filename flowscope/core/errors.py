# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Custom exceptions for flowscope.

All exceptions inherit from FlowscopeError for consistent error handling.
The API layer renders every FlowscopeError as {"success": false, "error": ...}.
"""

from typing import Optional


class FlowscopeError(Exception):
    """Base exception for all flowscope errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[dict] = None
    ):
        """
        Initialize flowscope error.

        Args:
            message: Human-readable error message
            status_code: HTTP status code
            details: Additional error details
        """
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert error to dictionary for API response."""
        return {
            "success": False,
            "error": self.message,
        }


class NotFoundError(FlowscopeError):
    """Resource not found."""

    def __init__(self, resource: str, identifier: str, details: Optional[dict] = None):
        """
        Initialize not found error.

        Args:
            resource: Type of resource (e.g., "Connection", "Workflow")
            identifier: Resource identifier
            details: Additional error details
        """
        message = f"{resource} not found"
        super().__init__(message, status_code=404, details=details)
        self.resource = resource
        self.identifier = identifier


class ValidationError(FlowscopeError):
    """Caller input failed validation. Raised before any upstream I/O."""

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[dict] = None):
        """
        Initialize validation error.

        Args:
            message: Validation error message
            field: Field that failed validation
            details: Additional error details
        """
        super().__init__(message, status_code=400, details=details)
        self.field = field


class UpstreamError(FlowscopeError):
    """The n8n API answered with a non-2xx status or the transport failed."""

    def __init__(self, message: str, status_code: int = 500, url: Optional[str] = None,
                 details: Optional[dict] = None):
        super().__init__(message, status_code=status_code, details=details)
        self.url = url


class UpstreamTimeoutError(UpstreamError):
    """The n8n API did not answer within the configured deadline."""

    def __init__(self, url: Optional[str] = None, details: Optional[dict] = None):
        super().__init__("Upstream request timed out", status_code=504, url=url, details=details)


class InvalidWorkflowDataError(FlowscopeError):
    """The fetch succeeded but the workflow document has no usable node list."""

    def __init__(self, workflow_id: Optional[str] = None, details: Optional[dict] = None):
        super().__init__("Invalid workflow data received from n8n", status_code=500, details=details)
        self.workflow_id = workflow_id


# Error Message Utilities

def sanitize_error_for_user(error: Exception) -> str:
    """
    Sanitize error messages for user display.
    Removes stack traces and sensitive information.

    Args:
        error: The exception to sanitize

    Returns:
        User-friendly error message without stack trace
    """
    error_msg = str(error).strip() or "Unknown error"

    # Limit message length
    if len(error_msg) > 500:
        error_msg = error_msg[:500] + "..."

    return error_msg
