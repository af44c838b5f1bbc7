"""Workspace schemas: steps, variables, and the state snapshot."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Step(BaseModel):
    """One numbered, independently editable unit of a sequence."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=1, description="1-based position, dense within the sequence")
    content: str

    @field_validator("content")
    @classmethod
    def strip_content(cls, v: str) -> str:
        # Lines are trimmed on parse, so padding would not survive a round trip
        return v.strip()


class Variable(BaseModel):
    """A user-defined placeholder value, referenced as {{key}} in step text."""

    key: str
    value: str


class WorkspaceStatus(str, Enum):
    EMPTY = "empty"
    POPULATED = "populated"


class WorkspaceSnapshot(BaseModel):
    """Read model of one session's workspace."""

    status: WorkspaceStatus
    steps: list[Step] = Field(default_factory=list)
    editing_step_id: Optional[int] = None
    text: str = Field(default="", description="Canonical 'Step N: ...' serialization")
    variables: list[Variable] = Field(default_factory=list)
    rendered_steps: list[Step] = Field(
        default_factory=list,
        description="Steps with {{key}} placeholders resolved, display only",
    )
