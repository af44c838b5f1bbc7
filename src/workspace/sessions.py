"""Per-user conversation sessions.

Each user has exactly one logical conversation. Its workspace and variable
table live in a ConversationSession owned by the SessionRegistry; sessions
never share state.
"""

import logging
import threading
from dataclasses import dataclass, field

from src.errors import RequestInFlightError
from src.workspace.state import WorkspaceState
from src.workspace.variables import VariableTable

logger = logging.getLogger(__name__)


@dataclass
class ConversationSession:
    user_id: str
    workspace: WorkspaceState
    variables: VariableTable = field(default_factory=VariableTable)
    _in_flight: bool = field(default=False, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def acquire_request_slot(self) -> None:
        """Claim the single completion slot, or raise if it is taken."""
        with self._lock:
            if self._in_flight:
                raise RequestInFlightError(
                    f"A message is already being processed for user {self.user_id}"
                )
            self._in_flight = True

    def release_request_slot(self) -> None:
        with self._lock:
            self._in_flight = False


class SessionRegistry:
    """Maps user ids to their session, creating sessions on first access."""

    def __init__(self):
        self._sessions: dict[str, ConversationSession] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str) -> ConversationSession:
        with self._lock:
            session = self._sessions.get(user_id)
            if session is None:
                session = ConversationSession(
                    user_id=user_id,
                    workspace=WorkspaceState(label=f"user:{user_id}"),
                )
                self._sessions[user_id] = session
                logger.debug(f"Created session for user {user_id}")
            return session

    def reset(self, user_id: str) -> None:
        """Evict the session, abandoning in-flight work.

        A request still running against the evicted session finishes on
        the evicted session; its reply is dropped and the next access starts fresh.
        """
        with self._lock:
            session = self._sessions.pop(user_id, None)
        if session is None:
            return
        session.workspace.invalidate_pending()
        session.workspace.clear()
        session.variables.clear()
        logger.info(f"Session reset for user {user_id}")

    def count(self) -> int:
        with self._lock:
            return len(self._sessions)
