# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Schedule Service - Calendar view of when active workflows will run.

Provides functionality to:
- Extract schedule trigger nodes and normalize them to cron
- List scheduled workflows with per-trigger parse diagnostics
- Expand crons into concrete events within a time window (cached briefly)
"""

import math
import re
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from flowscope.core.errors import UpstreamError
from flowscope.core.logging import get_service_logger, log_event
from flowscope.models import (
    ScheduleEvent,
    ScheduleEventsResult,
    ScheduleTrigger,
    ScheduledWorkflow,
    SchedulesResult,
    UnparsedWorkflow,
    WorkflowDocument,
    WorkflowNode,
)
from flowscope.models.schedule import to_iso_utc
from flowscope.services.cron_normalizer import normalize
from flowscope.services.n8n_client import N8nClient
from flowscope.services.occurrences import occurrences_in_range
from flowscope.services.schedule_cache import ScheduleCache

logger = get_service_logger("schedules")

SCHEDULE_TRIGGER_TYPE = "n8n-nodes-base.scheduleTrigger"
SCHEDULE_TRIGGER_TYPES = frozenset({
    SCHEDULE_TRIGGER_TYPE,
    "n8n-nodes-base.cron",
    "n8n-nodes-base.interval",
})

UNPARSED_REASON = "Unable to parse schedule trigger parameters"

_DURATION_PATTERN = re.compile(r"duration\s*=\s*(\d+(?:\.\d+)?)", re.IGNORECASE)


def parse_duration_seconds(notes: Optional[str]) -> Optional[int]:
    """
    Read an expected run time from node notes ("duration=90" or "Duration = 2.5").

    Returns:
        Whole seconds (half rounds up), or None when absent or not positive
    """
    if not notes:
        return None
    match = _DURATION_PATTERN.search(notes)
    if not match:
        return None
    seconds = math.floor(float(match.group(1)) + 0.5)
    return seconds if seconds > 0 else None


def is_schedule_trigger(node: WorkflowNode) -> bool:
    return node.type in SCHEDULE_TRIGGER_TYPES


def extract_schedule_triggers(document: WorkflowDocument) -> List[ScheduleTrigger]:
    """Normalize every schedule trigger node of a workflow, in document order."""
    triggers = []
    for node in document.nodes or []:
        if not is_schedule_trigger(node):
            continue
        parsed = normalize(node.parameters)
        if parsed.errors:
            log_event(
                logger, "schedule_trigger_parse_errors", level="DEBUG",
                workflow_id=document.id, node_id=node.id, errors=parsed.errors
            )
        triggers.append(ScheduleTrigger(
            id=node.id,
            name=node.name,
            type=node.type,
            parameters=node.parameters,
            parsed_crons=parsed.crons,
            parse_errors=parsed.errors,
            duration_seconds=parse_duration_seconds(node.notes),
        ))
    return triggers


def _is_scheduled_candidate(document: WorkflowDocument) -> bool:
    return document.active and not document.is_archived


class ScheduleService:
    """
    Service for schedule listing and calendar events.

    Responsibilities:
    - Fetch every workflow from n8n and keep active, non-archived ones
    - Turn schedule triggers into crons and crons into events
    - Serve repeated identical event queries from ScheduleCache
    """

    def __init__(
        self,
        client: N8nClient,
        cache: Optional[ScheduleCache] = None,
        max_events_per_workflow: int = 500,
        default_event_seconds: int = 300,
        cache_key_prefix: Optional[str] = None
    ):
        """
        Initialize schedule service.

        Args:
            client: n8n API client for the resolved connection
            cache: Shared event cache (no caching when None)
            max_events_per_workflow: Upper bound on events emitted per workflow
            default_event_seconds: Event length when a trigger declares no duration
            cache_key_prefix: Connection identity used in cache keys
                              (defaults to the client's base URL)
        """
        self.client = client
        self.cache = cache
        self.max_events_per_workflow = max_events_per_workflow
        self.default_event_seconds = default_event_seconds
        self.cache_key_prefix = cache_key_prefix or client.base_url

    async def list_schedules(self, time_zone: Optional[str] = None) -> SchedulesResult:
        """
        List active workflows that have schedule triggers.

        Each workflow is re-fetched individually so the full node list is
        available; when that fetch fails the list item is used as-is.

        Raises:
            UpstreamError: If the workflow list cannot be fetched
        """
        items = await self.client.fetch_all_workflows()

        workflows: List[ScheduledWorkflow] = []
        unparsed: List[UnparsedWorkflow] = []

        for item in items:
            if item.get("active") is not True:
                continue

            raw = item
            workflow_id = item.get("id")
            if workflow_id:
                try:
                    detail = await self.client.get_workflow(str(workflow_id))
                    if isinstance(detail, dict):
                        raw = {**item, **detail}
                except UpstreamError as e:
                    logger.warning(f"Failed to hydrate workflow {workflow_id}, using list item: {e.message}")

            document = WorkflowDocument.model_validate(raw)
            if document.is_archived:
                continue

            triggers = extract_schedule_triggers(document)
            if not triggers:
                continue

            if any(not trigger.parsed_crons for trigger in triggers):
                unparsed.append(UnparsedWorkflow(
                    id=document.id,
                    name=document.name,
                    url=f"{self.client.base_url}/workflow/{document.id}",
                    reason=UNPARSED_REASON,
                ))

            workflows.append(ScheduledWorkflow(
                id=document.id,
                name=document.name,
                active=document.active,
                nodes=document.node_count,
                updated_at=document.updated_at,
                schedule_triggers=triggers,
            ))

        logger.info(f"Found {len(workflows)} scheduled workflows ({len(unparsed)} with unparsed triggers)")
        return SchedulesResult(workflows=workflows, time_zone=time_zone, unparsed_workflows=unparsed)

    async def list_events(
        self,
        range_start: datetime,
        range_end: datetime,
        time_zone: Optional[str] = None
    ) -> ScheduleEventsResult:
        """
        Expand every active schedule into events within [range_start, range_end].

        Args:
            range_start: Window start (aware; naive means UTC)
            range_end: Window end
            time_zone: IANA zone the crons are evaluated in

        Returns:
            ScheduleEventsResult, with cached=True when served from the cache

        Raises:
            UpstreamError: If the workflow list cannot be fetched
        """
        start_iso = to_iso_utc(range_start)
        end_iso = to_iso_utc(range_end)

        cache_key = None
        if self.cache is not None:
            cache_key = ScheduleCache.make_key(self.cache_key_prefix, time_zone, start_iso, end_iso)
            cached_events = self.cache.get(cache_key)
            if cached_events is not None:
                log_event(logger, "schedule_events_cache_hit", level="DEBUG", events=len(cached_events))
                return ScheduleEventsResult(
                    events=list(cached_events),
                    time_zone=time_zone,
                    range_start=start_iso,
                    range_end=end_iso,
                    cached=True,
                )

        items = await self.client.fetch_all_workflows()
        events: List[ScheduleEvent] = []

        for item in items:
            document = WorkflowDocument.model_validate(item)
            if not _is_scheduled_candidate(document):
                continue
            events.extend(self._workflow_events(document, range_start, range_end, time_zone))

        events.sort(key=lambda event: event.start)

        if self.cache is not None:
            self.cache.cleanup()
            self.cache.set(cache_key, events)

        logger.info(f"Computed {len(events)} schedule events between {start_iso} and {end_iso}")
        return ScheduleEventsResult(
            events=events,
            time_zone=time_zone,
            range_start=start_iso,
            range_end=end_iso,
            cached=False,
        )

    # Private helper methods

    def _workflow_events(
        self,
        document: WorkflowDocument,
        range_start: datetime,
        range_end: datetime,
        time_zone: Optional[str]
    ) -> List[ScheduleEvent]:
        events: List[ScheduleEvent] = []
        remaining = self.max_events_per_workflow

        for trigger in extract_schedule_triggers(document):
            duration = timedelta(seconds=trigger.duration_seconds or self.default_event_seconds)
            for cron in trigger.parsed_crons:
                if remaining <= 0:
                    logger.warning(
                        f"Workflow {document.id} reached {self.max_events_per_workflow} events, truncating"
                    )
                    return events

                occurrences = occurrences_in_range(cron, range_start, range_end, time_zone, max_count=remaining)
                for index, occurrence in enumerate(occurrences):
                    start = occurrence.astimezone(timezone.utc)
                    events.append(ScheduleEvent(
                        id=f"{document.id}:{trigger.id}:{cron}:{index}",
                        title=document.name,
                        start=start,
                        end=start + duration,
                        workflow_id=document.id,
                        cron=cron,
                    ))
                remaining -= len(occurrences)

        return events

