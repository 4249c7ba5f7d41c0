# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Pydantic models for flowscope.
"""

from flowscope.models.workflow import (
    WorkflowNode,
    WorkflowDocument,
    WorkflowSummary,
    SubworkflowEdge,
    SubworkflowWorkflowMeta,
    SubworkflowGraph,
)
from flowscope.models.schedule import (
    ScheduleTrigger,
    ScheduledWorkflow,
    UnparsedWorkflow,
    SchedulesResult,
    ScheduleEvent,
    ScheduleEventsResult,
)
from flowscope.models.search import Match, SearchResult
from flowscope.models.requests import (
    ConnectionRequest,
    SearchRequest,
    SchedulesRequest,
    ScheduleEventsRequest,
)

__all__ = [
    "WorkflowNode",
    "WorkflowDocument",
    "WorkflowSummary",
    "SubworkflowEdge",
    "SubworkflowWorkflowMeta",
    "SubworkflowGraph",
    "ScheduleTrigger",
    "ScheduledWorkflow",
    "UnparsedWorkflow",
    "SchedulesResult",
    "ScheduleEvent",
    "ScheduleEventsResult",
    "Match",
    "SearchResult",
    "ConnectionRequest",
    "SearchRequest",
    "SchedulesRequest",
    "ScheduleEventsRequest",
]
