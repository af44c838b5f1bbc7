"""Chat service tying the store, orchestrator and workspace together.

submit_message handles one user message end to end:
1. Validate content (nothing is written for blank input)
2. Claim the session's single in-flight slot
3. Persist the user turn
4. Build context from recent history plus workspace text
5. Get a reply through the provider chain
6. Persist the assistant turn and load it into the workspace

If every provider fails the user turn stays persisted and the workspace
is left untouched; the caller gets AllProvidersFailedError.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from src.conversation.schemas import NewTurn, Role, Turn
from src.conversation.store import ConversationStore
from src.errors import AllProvidersFailedError, ValidationError
from src.orchestrator.completion import CompletionOrchestrator
from src.orchestrator.schemas import CompletionContext, CompletionResult
from src.workspace.schemas import WorkspaceSnapshot, WorkspaceStatus
from src.workspace.sessions import SessionRegistry

logger = logging.getLogger(__name__)


@dataclass
class SubmitResult:
    user_turn: Turn
    assistant_turn: Turn
    completion: CompletionResult
    workspace: WorkspaceSnapshot
    workspace_updated: bool


class ChatService:
    """Handles message submission and history for all users."""

    def __init__(
        self,
        store: ConversationStore,
        orchestrator: CompletionOrchestrator,
        sessions: SessionRegistry,
        history_limit: int = 5,
    ):
        self.store = store
        self.orchestrator = orchestrator
        self.sessions = sessions
        self.history_limit = history_limit

    def list_messages(self, user_id: str) -> list[Turn]:
        return self.store.list_by_user(user_id)

    def submit_message(
        self,
        user_id: str,
        content: Optional[str],
        workspace_text: Optional[str] = None,
    ) -> SubmitResult:
        """Run one user message through the pipeline.

        Args:
            user_id: Owner of the conversation
            content: The user's message; blank is rejected
            workspace_text: Explicit sequence context. When omitted, the
                session's own workspace is used if it has steps.

        Raises:
            ValidationError: content is absent or blank
            RequestInFlightError: another message is still being processed
            AllProvidersFailedError: no provider produced a reply
        """
        if content is None or not content.strip():
            raise ValidationError("Message content must not be empty")

        session = self.sessions.get(user_id)
        session.acquire_request_slot()
        try:
            user_turn = self.store.append(
                NewTurn(user_id=user_id, role=Role.USER, content=content)
            )

            if workspace_text is None and session.workspace.status == WorkspaceStatus.POPULATED:
                workspace_text = session.workspace.serialize()

            history = self.store.list_by_user(user_id)
            context = CompletionContext.from_history(
                history, workspace_text=workspace_text, limit=self.history_limit
            )
            request_id = session.workspace.issue_request_id()
            label = f"user:{user_id}#{request_id}"

            try:
                completion = self.orchestrator.complete(context, label=label)
            except AllProvidersFailedError:
                logger.error(
                    f"[{label}] No reply; user turn {user_turn.id} kept, workspace unchanged"
                )
                raise

            assistant_turn = self.store.append(
                NewTurn(user_id=user_id, role=Role.ASSISTANT, content=completion.content)
            )
            updated = session.workspace.load(completion.content, request_id=request_id)

            return SubmitResult(
                user_turn=user_turn,
                assistant_turn=assistant_turn,
                completion=completion,
                workspace=session.workspace.snapshot(session.variables),
                workspace_updated=updated,
            )
        finally:
            session.release_request_slot()
