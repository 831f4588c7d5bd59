"""
Task service: CRUD for tasks under a commitment.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.workspace import WorkspaceContext
from app.models.commitment import Commitment
from app.models.task import Task
from app.services.common import apply_updates, get_scoped_or_404
from app.services.narratives import ensure_can_modify
from nct_shared.schemas.nct import TaskCreate, TaskUpdate

log = structlog.get_logger()


async def get_task_or_404(
    session: AsyncSession, task_id: uuid.UUID, workspace_id: uuid.UUID
) -> Task:
    return await get_scoped_or_404(session, Task, task_id, workspace_id, "Task")


async def list_tasks(
    session: AsyncSession,
    workspace_id: uuid.UUID,
    *,
    commitment_id: Optional[uuid.UUID] = None,
) -> list[Task]:
    stmt = select(Task).where(Task.workspace_id == workspace_id)
    if commitment_id:
        stmt = stmt.where(Task.commitment_id == commitment_id)
    result = await session.execute(stmt.order_by(Task.created_at))
    return list(result.scalars().all())


async def create_task(session: AsyncSession, ctx: WorkspaceContext, req: TaskCreate) -> Task:
    await get_scoped_or_404(session, Commitment, req.commitment_id, ctx.workspace_id, "Commitment")

    task = Task(
        title=req.title,
        description=req.description,
        acceptance_criteria=req.acceptance_criteria,
        due_date=req.due_date,
        status=req.status.value,
        commitment_id=req.commitment_id,
        owner_id=ctx.user_id,
        workspace_id=ctx.workspace_id,
    )
    session.add(task)
    await session.flush()

    log.info("task.created", task_id=str(task.id), commitment_id=str(req.commitment_id))
    return task


async def update_task(session: AsyncSession, ctx: WorkspaceContext, task: Task, req: TaskUpdate) -> Task:
    ensure_can_modify(ctx, task.owner_id)
    data = req.model_dump(exclude_unset=True)

    old_status = task.status
    apply_updates(task, data, required=("title", "status"))
    session.add(task)
    await session.flush()

    if task.status != old_status:
        log.info("task.status_changed", task_id=str(task.id), from_status=old_status, to_status=task.status)
    else:
        log.info("task.updated", task_id=str(task.id), fields=sorted(data))
    return task


async def delete_task(session: AsyncSession, ctx: WorkspaceContext, task: Task) -> None:
    ensure_can_modify(ctx, task.owner_id)
    await session.delete(task)
    await session.flush()

    log.info("task.deleted", task_id=str(task.id), workspace_id=str(ctx.workspace_id))
