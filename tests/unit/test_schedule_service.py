# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Unit tests for ScheduleService

Tests schedule listing and event expansion against a fake n8n API.
"""

import httpx
import pytest
from datetime import datetime, timedelta, timezone

from flowscope.core.errors import UpstreamError
from flowscope.models import WorkflowDocument
from flowscope.services.schedule_cache import ScheduleCache
from flowscope.services.schedule_service import (
    ScheduleService,
    UNPARSED_REASON,
    extract_schedule_triggers,
    parse_duration_seconds,
)
from tests.conftest import BASE_URL, FakeN8n, make_workflow, schedule_node


DAILY_AT_NINE = {"rule": {"interval": [{"field": "days", "daysInterval": 1, "triggerAtHour": 9}]}}
HOURLY = {"rule": {"interval": [{"field": "hours", "hoursInterval": 1}]}}

RANGE_START = datetime(2024, 1, 1, tzinfo=timezone.utc)
RANGE_END = datetime(2024, 1, 3, tzinfo=timezone.utc)


@pytest.fixture
def fake():
    return FakeN8n([
        make_workflow("wf-1", [schedule_node("s1", DAILY_AT_NINE, notes="duration=90")], name="Nightly"),
        make_workflow("wf-2", [schedule_node("s2", DAILY_AT_NINE)], name="Reports"),
        make_workflow("wf-3", [schedule_node("s3", HOURLY)], active=False),
        make_workflow("wf-4", [schedule_node("s4", HOURLY)], isArchived=True),
        make_workflow("wf-5", [schedule_node("s5", {"rule": {"interval": [{"field": "years"}]}})], name="Broken"),
        make_workflow("wf-6", [{"id": "n", "name": "Set", "type": "n8n-nodes-base.set", "parameters": {}}]),
    ], page_size=2)


@pytest.fixture
def cache():
    return ScheduleCache(ttl_seconds=60)


class TestParseDurationSeconds:
    """Test parse_duration_seconds function"""

    def test_reads_duration_from_notes(self):
        """Should read duration=N from notes, case-insensitively"""
        assert parse_duration_seconds("runs long\nDuration = 90") == 90

    def test_rounds_half_up(self):
        """Should round decimal durations"""
        assert parse_duration_seconds("duration=2.5") == 3
        assert parse_duration_seconds("duration=2.4") == 2

    def test_absent_or_non_positive(self):
        """Should return None without a positive duration"""
        assert parse_duration_seconds(None) is None
        assert parse_duration_seconds("no hints here") is None
        assert parse_duration_seconds("duration=0") is None
        assert parse_duration_seconds("duration=0.2") is None


class TestExtractScheduleTriggers:
    """Test extract_schedule_triggers function"""

    def test_extracts_trigger_types(self):
        """Should extract schedule, cron and interval nodes"""
        document = WorkflowDocument.model_validate(make_workflow("wf", [
            schedule_node("s1", HOURLY),
            {"id": "c1", "name": "Cron", "type": "n8n-nodes-base.cron",
             "parameters": {"triggerTimes": {"item": [{"mode": "everyHour", "minute": 5}]}}},
            {"id": "i1", "name": "Interval", "type": "n8n-nodes-base.interval",
             "parameters": {"interval": 10, "unit": "minutes"}},
            {"id": "x", "name": "Other", "type": "n8n-nodes-base.set", "parameters": {}},
        ]))

        triggers = extract_schedule_triggers(document)

        assert [t.id for t in triggers] == ["s1", "c1", "i1"]
        assert [t.parsed_crons for t in triggers] == [["0 */1 * * *"], ["5 * * * *"], ["*/10 * * * *"]]


class TestListEvents:
    """Test list_events method"""

    @pytest.mark.asyncio
    async def test_expands_active_workflows(self, fake):
        """Should expand only active, non-archived workflows"""
        service = ScheduleService(fake.client())

        result = await service.list_events(RANGE_START, RANGE_END)

        assert {event.workflow_id for event in result.events} == {"wf-1", "wf-2"}
        assert result.cached is False
        assert result.range_start == "2024-01-01T00:00:00.000Z"
        assert result.range_end == "2024-01-03T00:00:00.000Z"

    @pytest.mark.asyncio
    async def test_simultaneous_workflows_both_produce_events(self, fake):
        """Should keep events of different workflows firing at the same instant"""
        service = ScheduleService(fake.client())

        result = await service.list_events(RANGE_START, RANGE_END)

        nine = datetime(2024, 1, 1, 9, tzinfo=timezone.utc)
        at_nine = [event for event in result.events if event.start == nine]
        assert sorted(event.workflow_id for event in at_nine) == ["wf-1", "wf-2"]

    @pytest.mark.asyncio
    async def test_events_lie_in_range_with_positive_duration(self, fake):
        """Should keep every event inside the window with end = start + duration"""
        service = ScheduleService(fake.client(), default_event_seconds=300)

        result = await service.list_events(RANGE_START, RANGE_END)

        for event in result.events:
            assert RANGE_START <= event.start <= RANGE_END
            expected = 90 if event.workflow_id == "wf-1" else 300
            assert event.end - event.start == timedelta(seconds=expected)

    @pytest.mark.asyncio
    async def test_event_ids(self, fake):
        """Should build ids from workflow, trigger, cron and index"""
        service = ScheduleService(fake.client())

        result = await service.list_events(RANGE_START, RANGE_END)

        ids = [event.id for event in result.events if event.workflow_id == "wf-1"]
        assert ids == ["wf-1:s1:0 9 */1 * *:0", "wf-1:s1:0 9 */1 * *:1"]
        assert len(set(event.id for event in result.events)) == len(result.events)

    @pytest.mark.asyncio
    async def test_caps_events_per_workflow(self):
        """Should not emit more than max_events_per_workflow per workflow"""
        fake = FakeN8n([make_workflow("wf", [
            schedule_node("a", {"rule": {"interval": [{"field": "minutes", "minutesInterval": 1}]}}),
            schedule_node("b", {"rule": {"interval": [{"field": "minutes", "minutesInterval": 2}]}}),
        ])])
        service = ScheduleService(fake.client(), max_events_per_workflow=25)

        result = await service.list_events(RANGE_START, RANGE_END)

        assert len(result.events) == 25

    @pytest.mark.asyncio
    async def test_second_call_within_ttl_is_cached(self, fake, cache):
        """Should serve identical events from the cache without refetching"""
        service = ScheduleService(fake.client(), cache=cache, cache_key_prefix="conn")

        first = await service.list_events(RANGE_START, RANGE_END, "UTC")
        second = await service.list_events(RANGE_START, RANGE_END, "UTC")

        assert first.cached is False
        assert second.cached is True
        assert second.events == first.events
        assert fake.list_calls() == 3  # three pages of two

    @pytest.mark.asyncio
    async def test_cache_is_keyed_by_window(self, fake, cache):
        """Should not reuse entries across different windows"""
        service = ScheduleService(fake.client(), cache=cache)

        await service.list_events(RANGE_START, RANGE_END)
        other = await service.list_events(RANGE_START, RANGE_END + timedelta(days=1))

        assert other.cached is False

    @pytest.mark.asyncio
    async def test_upstream_failure_aborts(self, fake):
        """Should propagate list failures"""
        fake.fail("/api/v1/workflows", 401, {"message": "unauthorized"})
        service = ScheduleService(fake.client())

        with pytest.raises(UpstreamError) as exc_info:
            await service.list_events(RANGE_START, RANGE_END)

        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "unauthorized"


class TestListSchedules:
    """Test list_schedules method"""

    @pytest.mark.asyncio
    async def test_lists_scheduled_workflows(self, fake):
        """Should return active workflows with triggers and diagnostics"""
        service = ScheduleService(fake.client())

        result = await service.list_schedules("Europe/Warsaw")

        assert [w.id for w in result.workflows] == ["wf-1", "wf-2", "wf-5"]
        assert result.time_zone == "Europe/Warsaw"
        assert result.workflows[0].schedule_triggers[0].parsed_crons == ["0 9 */1 * *"]
        assert result.workflows[0].schedule_triggers[0].duration_seconds == 90

        assert len(result.unparsed_workflows) == 1
        unparsed = result.unparsed_workflows[0]
        assert unparsed.id == "wf-5"
        assert unparsed.url == f"{BASE_URL}/workflow/wf-5"
        assert unparsed.reason == UNPARSED_REASON

    @pytest.mark.asyncio
    async def test_hydrates_each_workflow(self):
        """Should use the full document fetched by id"""
        summary = make_workflow("wf-1", [])
        fake = FakeN8n([summary])
        detailed = make_workflow("wf-1", [schedule_node("s1", HOURLY)])

        def handler(request):
            if request.url.path.endswith("/wf-1"):
                fake.requests.append(request)
                return httpx.Response(200, json={"data": detailed})
            return FakeN8n.handler(fake, request)

        fake.handler = handler
        service = ScheduleService(fake.client())

        result = await service.list_schedules()

        assert [w.id for w in result.workflows] == ["wf-1"]
        assert result.workflows[0].nodes == 1

    @pytest.mark.asyncio
    async def test_detail_keeps_list_item_fields(self):
        """Should keep list item fields the detail response omits"""
        fake = FakeN8n([make_workflow("wf-1", [], isArchived=True)])
        detailed = {"id": "wf-1", "name": "Archived", "nodes": [schedule_node("s1", HOURLY)]}

        def handler(request):
            if request.url.path.endswith("/wf-1"):
                return httpx.Response(200, json=detailed)
            return FakeN8n.handler(fake, request)

        fake.handler = handler
        service = ScheduleService(fake.client())

        result = await service.list_schedules()

        assert result.workflows == []

    @pytest.mark.asyncio
    async def test_hydration_failure_keeps_list_item(self, fake):
        """Should fall back to the list item when fetching by id fails"""
        fake.fail("/api/v1/workflows/wf-1", 500, "boom")
        service = ScheduleService(fake.client())

        result = await service.list_schedules()

        assert "wf-1" in [w.id for w in result.workflows]
