# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Input validation helpers.

Every helper raises ValidationError (HTTP 400) so bad input is reported before
any upstream call is made.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from urllib.parse import urlparse
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from flowscope.core.errors import ValidationError

# Instants closer than this to datetime.min or datetime.max cannot be shifted
# into another zone safely.
EARLIEST_INSTANT = datetime.min.replace(tzinfo=timezone.utc) + timedelta(days=2)
LATEST_INSTANT = datetime.max.replace(tzinfo=timezone.utc) - timedelta(days=2)


def require_string(
    value: Any,
    field_name: str,
    min_length: int = 1,
    trim: bool = True
) -> str:
    """
    Validate a required string field.

    Args:
        value: Raw value from the request body
        field_name: Name used in the error message (wire name, e.g. "workflowId")
        min_length: Minimum length ignoring surrounding whitespace
        trim: Return the value with surrounding whitespace stripped

    Returns:
        The (trimmed) string

    Raises:
        ValidationError: If the value is missing, not a string, or blank
    """
    if value is None:
        raise ValidationError(f"{field_name} is required", field=field_name)
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string", field=field_name)

    stripped = value.strip()
    if len(stripped) < min_length:
        raise ValidationError(f"{field_name} is required", field=field_name)

    return stripped if trim else value


def optional_string(value: Any, field_name: str, **kwargs: Any) -> Optional[str]:
    """Like require_string, but an absent (None) value is allowed."""
    if value is None:
        return None
    return require_string(value, field_name, **kwargs)


def require_url(value: Any, field_name: str) -> str:
    """Validate an http(s) URL and strip a trailing slash."""
    text = require_string(value, field_name)
    parsed = urlparse(text)
    if not parsed.scheme or not parsed.netloc:
        raise ValidationError(f"{field_name} must be a valid URL", field=field_name)
    if parsed.scheme not in ("http", "https"):
        raise ValidationError(f"{field_name} must start with http or https", field=field_name)
    return text.rstrip("/")


def parse_instant(value: Any, field_name: str) -> datetime:
    """
    Parse an ISO-8601 timestamp into an aware datetime.

    Naive timestamps (and plain dates) are interpreted as UTC. Instants at the
    edges of the datetime range are rejected.
    """
    text = require_string(value, field_name)
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00").replace("z", "+00:00"))
    except ValueError:
        raise ValidationError(f"Invalid {field_name}", field=field_name)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)

    try:
        instant = parsed.astimezone(timezone.utc)
    except OverflowError:
        raise ValidationError(f"Invalid {field_name}", field=field_name)
    if not EARLIEST_INSTANT <= instant <= LATEST_INSTANT:
        raise ValidationError(f"Invalid {field_name}", field=field_name)
    return parsed


def validate_time_zone(value: Optional[str], field_name: str = "timeZone") -> Optional[str]:
    """Check that an optional IANA time zone name is known."""
    name = optional_string(value, field_name)
    if name is None:
        return None
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        raise ValidationError(f"Invalid {field_name}: {name}", field=field_name)
    return name
