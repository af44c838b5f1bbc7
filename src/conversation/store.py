"""Conversation store gateway.

Append-only log of user/assistant turns per user. The chat service only
sees the ConversationStore protocol; durability belongs to the backend:
- InMemoryConversationStore: process-local, for development and tests
- SqlConversationStore: SQLite/Postgres via src.conversation.db
"""

import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Protocol, runtime_checkable

from src.conversation import db
from src.conversation.schemas import NewTurn, Turn

logger = logging.getLogger(__name__)


@runtime_checkable
class ConversationStore(Protocol):
    """Narrow repository interface the core depends on."""

    def append(self, turn: NewTurn) -> Turn: ...

    def list_by_user(self, user_id: str) -> list[Turn]: ...


def _new_turn_id() -> str:
    return uuid.uuid4().hex


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class InMemoryConversationStore:
    """Turns kept in a dict of per-user lists. Insertion order is creation order."""

    def __init__(self):
        self._turns: dict[str, list[Turn]] = {}
        self._lock = threading.Lock()

    def append(self, turn: NewTurn) -> Turn:
        stored = Turn(
            id=_new_turn_id(),
            user_id=turn.user_id,
            role=turn.role,
            content=turn.content,
            created_at=_now(),
        )
        with self._lock:
            self._turns.setdefault(turn.user_id, []).append(stored)
        return stored

    def list_by_user(self, user_id: str) -> list[Turn]:
        with self._lock:
            return list(self._turns.get(user_id, []))


class SqlConversationStore:
    """Turns persisted in the conversation_turns table."""

    def append(self, turn: NewTurn) -> Turn:
        stored = Turn(
            id=_new_turn_id(),
            user_id=turn.user_id,
            role=turn.role,
            content=turn.content,
            created_at=_now(),
        )
        db.execute(
            """INSERT INTO conversation_turns
               (turn_id, user_id, role, content, created_at)
               VALUES (%s, %s, %s, %s, %s)""",
            (stored.id, stored.user_id, stored.role.value, stored.content, stored.created_at),
        )
        logger.debug(f"Stored {stored.role.value} turn {stored.id} for user {stored.user_id}")
        return stored

    def list_by_user(self, user_id: str) -> list[Turn]:
        rows = db.execute(
            """SELECT turn_id, user_id, role, content, created_at
               FROM conversation_turns WHERE user_id = %s
               ORDER BY seq ASC""",
            (user_id,),
            fetch="all",
        )
        return [
            Turn(
                id=row["turn_id"],
                user_id=row["user_id"],
                role=row["role"],
                content=row["content"],
                created_at=str(row["created_at"]),
            )
            for row in rows
        ]
