"""Conversation routes.

Endpoints:
    POST /v1/messages    Send a message, get the assistant reply
    GET  /v1/messages    List the user's turns in creation order
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from src.api.dependencies import get_chat_service, get_user_id
from src.chat.service import ChatService
from src.conversation.schemas import Turn
from src.errors import AllProvidersFailedError, RequestInFlightError, ValidationError
from src.workspace.schemas import WorkspaceSnapshot

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/messages", tags=["messages"])

RETRY_AFTER_SECONDS = 5


class MessageContext(BaseModel):
    workspace: Optional[str] = Field(
        default=None,
        description="Current sequence text; omit to use the session's workspace",
    )


class SubmitMessageRequest(BaseModel):
    """A user message. Blank content is rejected with 400."""

    content: Optional[str] = None
    context: Optional[MessageContext] = None


class SubmitMessageResponse(BaseModel):
    user_message: Turn
    assistant_message: Turn
    workspace: WorkspaceSnapshot
    workspace_updated: bool
    provider: str
    model_id: str


class MessageListResponse(BaseModel):
    messages: list[Turn]
    count: int


@router.post("", response_model=SubmitMessageResponse)
def submit_message(
    request: SubmitMessageRequest,
    user_id: str = Depends(get_user_id),
    service: ChatService = Depends(get_chat_service),
):
    """Send a message.

    Runs synchronously in the worker threadpool; provider calls block.
    """
    workspace_text = request.context.workspace if request.context else None
    try:
        result = service.submit_message(user_id, request.content, workspace_text=workspace_text)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RequestInFlightError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except AllProvidersFailedError as e:
        logger.error(f"AI service error for user {user_id}: {e}")
        raise HTTPException(
            status_code=503,
            detail="Failed to get AI response. Please try again in a moment.",
            headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
        )

    return SubmitMessageResponse(
        user_message=result.user_turn,
        assistant_message=result.assistant_turn,
        workspace=result.workspace,
        workspace_updated=result.workspace_updated,
        provider=result.completion.provider,
        model_id=result.completion.model_id,
    )


@router.get("", response_model=MessageListResponse)
def list_messages(
    user_id: str = Depends(get_user_id),
    service: ChatService = Depends(get_chat_service),
):
    """List the user's conversation."""
    messages = service.list_messages(user_id)
    return MessageListResponse(messages=messages, count=len(messages))
