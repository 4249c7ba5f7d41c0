# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Search Models

Variable/expression search results.
"""

from typing import List
from pydantic import BaseModel, ConfigDict, Field


class Match(BaseModel):
    """One located occurrence of the search term inside a node"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    field: str
    expression: str
    full_value: str = Field(alias="fullValue")
    context: str
    match_index: int = Field(alias="matchIndex")


class SearchResult(BaseModel):
    """A node with at least one match"""
    model_config = ConfigDict(populate_by_name=True)

    node_name: str = Field(alias="nodeName")
    node_type: str = Field(alias="nodeType")
    node_id: str = Field(alias="nodeId")
    matches: List[Match] = Field(default_factory=list)
