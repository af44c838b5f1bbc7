"""Error taxonomy shared by the chat pipeline.

Soft conditions are deliberately absent:
- Raw text with no step markers degrades to a single wrapped step
- Blank edit commits are rejected by returning False
"""

from typing import Optional


class ValidationError(ValueError):
    """Inbound content is malformed or empty. Raised before any side effect."""


class ProviderError(RuntimeError):
    """A single chat-completion backend failed.

    Carries the backend identity and the underlying cause so the
    orchestrator can log it and move on to the next provider.
    """

    def __init__(self, provider: str, model_id: str, cause: Optional[BaseException] = None):
        self.provider = provider
        self.model_id = model_id
        self.cause = cause
        detail = f"{type(cause).__name__}: {cause}" if cause is not None else "unknown error"
        super().__init__(f"{provider} ({model_id}) failed: {detail}")


class AllProvidersFailedError(RuntimeError):
    """Every configured provider failed for one request."""

    def __init__(self, errors: list[ProviderError]):
        self.errors = list(errors)
        attempted = ", ".join(f"{e.provider}/{e.model_id}" for e in self.errors) or "none"
        super().__init__(f"AI services failed to respond (attempted: {attempted})")


class RequestInFlightError(RuntimeError):
    """A completion request is already pending for this session."""


class StepNotFoundError(LookupError):
    """No step with the given id exists in the workspace."""


class EditStateError(ValueError):
    """An edit operation was applied to a step that is not being edited."""
