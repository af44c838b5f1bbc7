"""Conversation store gateway: turn schemas and store backends."""

from src.conversation.schemas import NewTurn, Role, Turn
from src.conversation.store import (
    ConversationStore,
    InMemoryConversationStore,
    SqlConversationStore,
)

__all__ = [
    "Role",
    "NewTurn",
    "Turn",
    "ConversationStore",
    "InMemoryConversationStore",
    "SqlConversationStore",
]
