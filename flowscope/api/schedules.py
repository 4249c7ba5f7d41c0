# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Schedule API Routes

Handles the schedule views of an n8n instance:
- Scheduled workflows with their normalized cron expressions
- Calendar events within a time window
"""

from typing import Any, Callable, Dict

from fastapi import APIRouter, Depends

from flowscope.core.config import Config
from flowscope.core.dependencies import (
    get_connection_resolver,
    get_current_config,
    get_n8n_client_factory,
    get_schedule_cache,
)
from flowscope.core.errors import ValidationError
from flowscope.core.validation import parse_instant, validate_time_zone
from flowscope.models import SchedulesRequest, ScheduleEventsRequest
from flowscope.services.connection_resolver import ConnectionResolver
from flowscope.services.schedule_cache import ScheduleCache
from flowscope.services.schedule_service import ScheduleService

router = APIRouter(prefix="/n8n", tags=["schedules"])


@router.post("/schedules")
async def list_schedules(
    body: SchedulesRequest,
    resolver: ConnectionResolver = Depends(get_connection_resolver),
    client_factory: Callable = Depends(get_n8n_client_factory),
    config: Config = Depends(get_current_config)
) -> Dict[str, Any]:
    """List active workflows with schedule triggers"""
    time_zone = validate_time_zone(body.time_zone)
    connection = resolver.resolve(body.connection_id, body.base_url, body.api_key)

    async with client_factory(connection) as client:
        service = ScheduleService(
            client,
            max_events_per_workflow=config.max_events_per_workflow,
            default_event_seconds=config.default_event_seconds,
        )
        result = await service.list_schedules(time_zone)

    return {"success": True, "data": result.model_dump(by_alias=True)}


@router.post("/schedules/events")
async def list_schedule_events(
    body: ScheduleEventsRequest,
    resolver: ConnectionResolver = Depends(get_connection_resolver),
    client_factory: Callable = Depends(get_n8n_client_factory),
    cache: ScheduleCache = Depends(get_schedule_cache),
    config: Config = Depends(get_current_config)
) -> Dict[str, Any]:
    """Expand schedules into calendar events between rangeStart and rangeEnd"""
    range_start = parse_instant(body.range_start, "rangeStart")
    range_end = parse_instant(body.range_end, "rangeEnd")
    if range_end < range_start:
        raise ValidationError("rangeEnd must not be before rangeStart", field="rangeEnd")
    time_zone = validate_time_zone(body.time_zone)
    connection = resolver.resolve(body.connection_id, body.base_url, body.api_key)

    async with client_factory(connection) as client:
        service = ScheduleService(
            client,
            cache=cache,
            max_events_per_workflow=config.max_events_per_workflow,
            default_event_seconds=config.default_event_seconds,
            cache_key_prefix=connection.fingerprint,
        )
        result = await service.list_events(range_start, range_end, time_zone)

    return {"success": True, "data": result.model_dump(by_alias=True)}
