# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Workflow Models

Read-only snapshots of n8n workflow documents as returned by the public API.
"""

from typing import List, Dict, Any, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator


# Parameter trees are String | Number | Bool | Null | Map | List, recursively.
# Values are left unvalidated (Any) because malformed input may be cyclic.
ParameterValue = Union[str, int, float, bool, None, Dict[str, Any], List[Any]]
ParameterTree = Dict[str, Any]


class WorkflowNode(BaseModel):
    """One automation step of a workflow"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: str = ""
    name: str = ""
    type: str = ""
    parameters: ParameterTree = Field(default_factory=dict)
    credentials: Optional[ParameterTree] = None
    notes: Optional[str] = None

    @field_validator("id", "name", "type", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("parameters", mode="before")
    @classmethod
    def _coerce_parameters(cls, value: Any) -> Dict[str, Any]:
        return value if isinstance(value, dict) else {}

    @field_validator("credentials", mode="before")
    @classmethod
    def _coerce_credentials(cls, value: Any) -> Optional[Dict[str, Any]]:
        return value if isinstance(value, dict) else None

    @field_validator("notes", mode="before")
    @classmethod
    def _coerce_notes(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None


class WorkflowDocument(BaseModel):
    """A workflow as listed or fetched from n8n"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = ""
    name: str = ""
    active: bool = False
    is_archived: bool = Field(default=False, alias="isArchived")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    tags: List[Any] = Field(default_factory=list)
    nodes: Optional[List[WorkflowNode]] = None

    @field_validator("id", "name", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("active", "is_archived", mode="before")
    @classmethod
    def _strict_flag(cls, value: Any) -> bool:
        # Only a literal true counts; "true" strings or 1 do not.
        return value is True

    @field_validator("nodes", mode="before")
    @classmethod
    def _coerce_nodes(cls, value: Any) -> Optional[List[Any]]:
        if not isinstance(value, list):
            return None
        return [node for node in value if isinstance(node, dict)]

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value: Any) -> List[Any]:
        return value if isinstance(value, list) else []

    @property
    def node_count(self) -> int:
        return len(self.nodes) if self.nodes is not None else 0


class WorkflowSummary(BaseModel):
    """Workflow catalog entry returned to callers"""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    active: bool
    nodes: int
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    tags: List[Any] = Field(default_factory=list)


class SubworkflowEdge(BaseModel):
    """An Execute Workflow node pointing from one workflow to another"""
    model_config = ConfigDict(populate_by_name=True)

    caller_id: str = Field(alias="callerId")
    caller_name: str = Field(alias="callerName")
    target_id: str = Field(alias="targetId")
    target_name: Optional[str] = Field(default=None, alias="targetName")
    is_dynamic: bool = Field(default=False, alias="isDynamic")
    expression: Optional[str] = None


class SubworkflowWorkflowMeta(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    active: bool
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")


class SubworkflowGraph(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    edges: List[SubworkflowEdge] = Field(default_factory=list)
    workflows: Dict[str, SubworkflowWorkflowMeta] = Field(default_factory=dict)
    missing_targets: List[str] = Field(default_factory=list, alias="missingTargets")
    dynamic_refs: List[SubworkflowEdge] = Field(default_factory=list, alias="dynamicRefs")
