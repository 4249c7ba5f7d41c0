# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Unit tests for the error hierarchy and message sanitizing
"""

from flowscope.core.errors import (
    NotFoundError,
    UpstreamTimeoutError,
    sanitize_error_for_user,
)


class TestSanitizeErrorForUser:
    """Test sanitize_error_for_user function"""

    def test_plain_message(self):
        assert sanitize_error_for_user(RuntimeError("  database locked  ")) == "database locked"

    def test_empty_message(self):
        assert sanitize_error_for_user(RuntimeError()) == "Unknown error"

    def test_truncates_long_messages(self):
        """Should cap messages at 500 characters"""
        message = sanitize_error_for_user(ValueError("x" * 600))
        assert message == "x" * 500 + "..."


class TestFlowscopeErrors:
    """Test error status codes and payloads"""

    def test_not_found(self):
        error = NotFoundError("Connection", "prod")
        assert error.status_code == 404
        assert error.message == "Connection not found"

    def test_timeout_to_dict(self):
        error = UpstreamTimeoutError(url="http://n8n.test/api/v1/workflows")
        assert error.status_code == 504
        assert error.to_dict()["error"] == "Upstream request timed out"
