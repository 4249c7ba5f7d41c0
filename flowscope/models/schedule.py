# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Schedule Models

Schedule triggers, calendar events and the request/response shapes of the
schedule endpoints.
"""

from datetime import datetime, timezone
from typing import List, Dict, Any, Optional
from pydantic import BaseModel, ConfigDict, Field, field_serializer


def to_iso_utc(value: datetime) -> str:
    """Render an instant as ISO-8601 UTC with millisecond precision ("...Z")."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ScheduleTrigger(BaseModel):
    """A schedule trigger node with its normalized cron expressions"""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    type: str
    parameters: Dict[str, Any] = Field(default_factory=dict)
    parsed_crons: List[str] = Field(default_factory=list, alias="parsedCrons")
    parse_errors: List[str] = Field(default_factory=list, alias="parseErrors")
    duration_seconds: Optional[int] = Field(default=None, alias="durationSeconds")


class ScheduledWorkflow(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    active: bool
    nodes: int
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")
    schedule_triggers: List[ScheduleTrigger] = Field(default_factory=list, alias="scheduleTriggers")


class UnparsedWorkflow(BaseModel):
    """Diagnostic entry for a workflow whose schedule could not be understood"""
    id: str
    name: str
    url: str
    reason: str


class SchedulesResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    workflows: List[ScheduledWorkflow] = Field(default_factory=list)
    time_zone: Optional[str] = Field(default=None, alias="timeZone")
    unparsed_workflows: List[UnparsedWorkflow] = Field(default_factory=list, alias="unparsedWorkflows")


class ScheduleEvent(BaseModel):
    """One concrete run of a workflow on the calendar"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    title: str
    start: datetime
    end: datetime
    workflow_id: str = Field(alias="workflowId")
    cron: str
    average_duration_ms: Optional[int] = Field(default=None, alias="averageDurationMs")

    @field_serializer("start", "end")
    def _serialize_instant(self, value: datetime) -> str:
        return to_iso_utc(value)


class ScheduleEventsResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    events: List[ScheduleEvent] = Field(default_factory=list)
    time_zone: Optional[str] = Field(default=None, alias="timeZone")
    range_start: str = Field(alias="rangeStart")
    range_end: str = Field(alias="rangeEnd")
    cached: bool = False
