"""Service wiring for the API.

Singletons are built lazily from src.config and handed to routes through
FastAPI dependencies, so tests can swap any of them with
app.dependency_overrides.
"""

import logging
from typing import Optional

from fastapi import Header, HTTPException

from src import config
from src.chat.service import ChatService
from src.conversation.store import (
    ConversationStore,
    InMemoryConversationStore,
    SqlConversationStore,
)
from src.llm.factory import build_provider_chain
from src.orchestrator.completion import CompletionOrchestrator
from src.workspace.sessions import SessionRegistry

logger = logging.getLogger(__name__)

_store: Optional[ConversationStore] = None
_sessions: Optional[SessionRegistry] = None
_chat_service: Optional[ChatService] = None


def get_store() -> ConversationStore:
    """Get the global conversation store."""
    global _store
    if _store is None:
        if config.STORE_BACKEND == "memory":
            _store = InMemoryConversationStore()
        elif config.STORE_BACKEND == "sql":
            _store = SqlConversationStore()
        else:
            raise ValueError(
                f"Unknown SEQUENCER_STORE '{config.STORE_BACKEND}'. Expected 'sql' or 'memory'."
            )
        logger.info(f"Conversation store: {type(_store).__name__}")
    return _store


def get_sessions() -> SessionRegistry:
    """Get the global session registry."""
    global _sessions
    if _sessions is None:
        _sessions = SessionRegistry()
    return _sessions


def get_chat_service() -> ChatService:
    """Get the global chat service."""
    global _chat_service
    if _chat_service is None:
        orchestrator = CompletionOrchestrator(
            build_provider_chain(config.PROVIDER_CHAIN, timeout=config.PROVIDER_TIMEOUT)
        )
        _chat_service = ChatService(
            store=get_store(),
            orchestrator=orchestrator,
            sessions=get_sessions(),
            history_limit=config.HISTORY_LIMIT,
        )
    return _chat_service


def get_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    """Identity comes from the auth layer in front of this service."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return x_user_id.strip()
