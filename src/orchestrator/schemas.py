"""Schemas for a single completion request and its outcome."""

from typing import Optional, Sequence

from pydantic import BaseModel, Field

from src.conversation.schemas import Role, Turn


class ContextTurn(BaseModel):
    """A turn as sent to a provider: role and content only."""

    role: Role
    content: str


class CompletionContext(BaseModel):
    """Everything a provider sees for one request. Discarded after use."""

    recent_turns: list[ContextTurn] = Field(default_factory=list)
    workspace_text: Optional[str] = Field(
        default=None,
        description="Current sequence in 'Step N: ...' form, if the user has one",
    )

    @classmethod
    def from_history(
        cls,
        history: Sequence[Turn],
        workspace_text: Optional[str] = None,
        limit: int = 5,
    ) -> "CompletionContext":
        """Keep only the last `limit` turns; older context is dropped, not summarized."""
        recent = list(history)[-limit:] if limit > 0 else []
        return cls(
            recent_turns=[ContextTurn(role=t.role, content=t.content) for t in recent],
            workspace_text=workspace_text or None,
        )


class ProviderAttempt(BaseModel):
    provider: str
    model_id: str
    succeeded: bool
    error: Optional[str] = None


class CompletionResult(BaseModel):
    """The assistant reply plus which provider produced it."""

    content: str
    provider: str
    model_id: str
    input_tokens: int = 0
    output_tokens: int = 0
    duration_ms: int = 0
    attempts: list[ProviderAttempt] = Field(default_factory=list)
