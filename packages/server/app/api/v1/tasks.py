"""Task endpoints."""

from __future__ import annotations

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import require_editor, require_member
from app.core.database import get_session
from app.core.workspace import WorkspaceContext
from app.services import tasks as svc
from nct_shared.schemas.common import MessageResponse
from nct_shared.schemas.nct import TaskCreate, TaskRead, TaskUpdate

router = APIRouter()


@router.get("/", response_model=List[TaskRead])
async def list_tasks(
    commitment_id: Optional[uuid.UUID] = None,
    ctx: WorkspaceContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    return await svc.list_tasks(session, ctx.workspace_id, commitment_id=commitment_id)


@router.post("/", response_model=TaskRead, status_code=201)
async def create_task(
    body: TaskCreate,
    ctx: WorkspaceContext = Depends(require_editor),
    session: AsyncSession = Depends(get_session),
):
    task = await svc.create_task(session, ctx, body)
    await session.commit()
    return task


@router.get("/{task_id}", response_model=TaskRead)
async def get_task(
    task_id: uuid.UUID,
    ctx: WorkspaceContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    return await svc.get_task_or_404(session, task_id, ctx.workspace_id)


@router.put("/{task_id}", response_model=TaskRead)
async def update_task(
    task_id: uuid.UUID,
    body: TaskUpdate,
    ctx: WorkspaceContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    task = await svc.get_task_or_404(session, task_id, ctx.workspace_id)
    task = await svc.update_task(session, ctx, task, body)
    await session.commit()
    return task


@router.delete("/{task_id}", response_model=MessageResponse)
async def delete_task(
    task_id: uuid.UUID,
    ctx: WorkspaceContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    task = await svc.get_task_or_404(session, task_id, ctx.workspace_id)
    await svc.delete_task(session, ctx, task)
    await session.commit()
    return MessageResponse(message="Task deleted")
