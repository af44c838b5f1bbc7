"""Workspace routes: view, load, edit steps, manage variables.

Endpoints:
    GET    /v1/workspace                        Snapshot (steps, text, variables, rendered)
    PUT    /v1/workspace                        Replace steps from raw text
    DELETE /v1/workspace                        Reset session, drop pending replies
    POST   /v1/workspace/steps/{id}/edit        Begin editing a step
    POST   /v1/workspace/steps/{id}/commit      Commit an edit (blank is rejected)
    POST   /v1/workspace/steps/{id}/cancel      Cancel an edit
    PUT    /v1/workspace/variables/{key}        Create or update a variable
    DELETE /v1/workspace/variables/{key}        Delete a variable
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from src.api.dependencies import get_sessions, get_user_id
from src.errors import EditStateError, StepNotFoundError, ValidationError
from src.workspace.schemas import WorkspaceSnapshot, WorkspaceStatus
from src.workspace.sessions import SessionRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workspace", tags=["workspace"])


class LoadWorkspaceRequest(BaseModel):
    text: str


class CommitEditRequest(BaseModel):
    content: str = ""


class CommitEditResponse(BaseModel):
    committed: bool
    workspace: WorkspaceSnapshot


class VariableValue(BaseModel):
    value: str


@router.get("", response_model=WorkspaceSnapshot)
async def get_workspace(
    user_id: str = Depends(get_user_id),
    sessions: SessionRegistry = Depends(get_sessions),
):
    session = sessions.get(user_id)
    return session.workspace.snapshot(session.variables)


@router.put("", response_model=WorkspaceSnapshot)
async def load_workspace(
    request: LoadWorkspaceRequest,
    user_id: str = Depends(get_user_id),
    sessions: SessionRegistry = Depends(get_sessions),
):
    """Replace the sequence with user-supplied text."""
    session = sessions.get(user_id)
    session.workspace.load(request.text)
    return session.workspace.snapshot(session.variables)


@router.delete("", response_model=WorkspaceSnapshot)
async def reset_workspace(
    user_id: str = Depends(get_user_id),
    sessions: SessionRegistry = Depends(get_sessions),
):
    sessions.reset(user_id)
    return WorkspaceSnapshot(status=WorkspaceStatus.EMPTY)


@router.post("/steps/{step_id}/edit", response_model=WorkspaceSnapshot)
async def begin_edit(
    step_id: int,
    user_id: str = Depends(get_user_id),
    sessions: SessionRegistry = Depends(get_sessions),
):
    session = sessions.get(user_id)
    try:
        session.workspace.begin_edit(step_id)
    except StepNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return session.workspace.snapshot(session.variables)


@router.post("/steps/{step_id}/commit", response_model=CommitEditResponse)
async def commit_edit(
    step_id: int,
    request: CommitEditRequest,
    user_id: str = Depends(get_user_id),
    sessions: SessionRegistry = Depends(get_sessions),
):
    """Commit an edit. Blank content leaves the step in editing (committed=false)."""
    session = sessions.get(user_id)
    try:
        committed = session.workspace.commit_edit(step_id, request.content)
    except StepNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except EditStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return CommitEditResponse(
        committed=committed,
        workspace=session.workspace.snapshot(session.variables),
    )


@router.post("/steps/{step_id}/cancel", response_model=WorkspaceSnapshot)
async def cancel_edit(
    step_id: int,
    user_id: str = Depends(get_user_id),
    sessions: SessionRegistry = Depends(get_sessions),
):
    session = sessions.get(user_id)
    try:
        session.workspace.cancel_edit(step_id)
    except StepNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return session.workspace.snapshot(session.variables)


@router.put("/variables/{key}", response_model=WorkspaceSnapshot)
async def set_variable(
    key: str,
    request: VariableValue,
    user_id: str = Depends(get_user_id),
    sessions: SessionRegistry = Depends(get_sessions),
):
    session = sessions.get(user_id)
    try:
        session.variables.set(key, request.value)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return session.workspace.snapshot(session.variables)


@router.delete("/variables/{key}", response_model=WorkspaceSnapshot)
async def delete_variable(
    key: str,
    user_id: str = Depends(get_user_id),
    sessions: SessionRegistry = Depends(get_sessions),
):
    session = sessions.get(user_id)
    if not session.variables.delete(key):
        raise HTTPException(status_code=404, detail=f"Variable not found: {key}")
    return session.workspace.snapshot(session.variables)
