# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Occurrence enumeration for cron expressions.

Cron evaluation is delegated to croniter; this module only bounds the
iteration to a window, a time zone and a maximum count.
"""

from datetime import datetime, timedelta, timezone, tzinfo
from typing import List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from croniter import croniter, CroniterError

from flowscope.core.logging import get_service_logger

logger = get_service_logger("occurrences")


def _resolve_zone(time_zone: Optional[str]) -> Optional[tzinfo]:
    if not time_zone:
        return timezone.utc
    try:
        return ZoneInfo(time_zone)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        logger.warning(f"Unknown time zone '{time_zone}', no occurrences computed")
        return None


def _as_aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def occurrences_in_range(
    cron: str,
    range_start: datetime,
    range_end: datetime,
    time_zone: Optional[str] = None,
    max_count: int = 500
) -> List[datetime]:
    """
    Enumerate the instants a cron expression fires within [range_start, range_end].

    Args:
        cron: 5-field cron expression
        range_start: Window start (inclusive); naive values are UTC
        range_end: Window end (inclusive); naive values are UTC
        time_zone: IANA zone the cron fields are evaluated in (default UTC)
        max_count: Stop after this many occurrences

    Returns:
        Timezone-aware, strictly increasing instants. An invalid cron, an
        unknown time zone or a window at the edge of the datetime range
        yields [].
    """
    if max_count <= 0:
        return []

    zone = _resolve_zone(time_zone)
    if zone is None:
        return []

    try:
        start = _as_aware(range_start).astimezone(zone)
        end = _as_aware(range_end).astimezone(zone)
        # croniter yields instants strictly after the cursor; back off one
        # second so an occurrence exactly at range_start is included.
        cursor = start - timedelta(seconds=1)
    except OverflowError:
        logger.warning(f"Window {range_start} - {range_end} is outside the supported date range")
        return []
    if end < start:
        return []

    try:
        iterator = croniter(cron, cursor)
    except (CroniterError, ValueError, KeyError, TypeError) as e:
        logger.warning(f"Invalid cron expression '{cron}': {e}")
        return []

    occurrences: List[datetime] = []
    while len(occurrences) < max_count:
        try:
            occurrence = iterator.get_next(datetime)
        except (CroniterError, ValueError, KeyError, TypeError, OverflowError) as e:
            logger.warning(f"Cron evaluation stopped for '{cron}': {e}")
            break

        if occurrence > end:
            break
        if occurrence < start:
            continue
        if occurrences and occurrence <= occurrences[-1]:
            continue
        occurrences.append(occurrence)

    return occurrences
