"""Conversation turn schemas.

A turn is one message in a user's conversation. Turns are immutable once
created and ordered by creation time within a user's log.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    """Who authored a stored turn."""
    USER = "user"
    ASSISTANT = "assistant"


class NewTurn(BaseModel):
    """A turn before the store assigns identity and timestamp."""

    user_id: str = Field(..., min_length=1)
    role: Role
    content: str


class Turn(BaseModel):
    """A persisted conversation turn."""

    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    role: Role
    content: str
    created_at: str = Field(description="ISO-8601 UTC timestamp")
