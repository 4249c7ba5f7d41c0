# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Request Models

Bodies accepted by the n8n endpoints. Fields are optional at the schema level;
required/blank checks happen in flowscope.core.validation so they surface as
{"success": false, "error": "<field> is required"}.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class ConnectionRequest(BaseModel):
    """Selects the n8n instance: a configured connection or explicit credentials"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    connection_id: Optional[str] = Field(default=None, alias="connectionId")
    base_url: Optional[str] = Field(default=None, alias="baseUrl")
    api_key: Optional[str] = Field(default=None, alias="apiKey")


class SearchRequest(ConnectionRequest):
    workflow_id: Optional[str] = Field(default=None, alias="workflowId")
    search_term: Optional[str] = Field(default=None, alias="searchTerm")


class SchedulesRequest(ConnectionRequest):
    time_zone: Optional[str] = Field(default=None, alias="timeZone")


class ScheduleEventsRequest(SchedulesRequest):
    range_start: Optional[str] = Field(default=None, alias="rangeStart")
    range_end: Optional[str] = Field(default=None, alias="rangeEnd")
