"""Commitment endpoints (the middle of the N -> C -> T hierarchy)."""

from __future__ import annotations

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import require_editor, require_member
from app.core.database import get_session
from app.core.workspace import WorkspaceContext
from app.services import commitments as svc
from nct_shared.schemas.common import MessageResponse
from nct_shared.schemas.nct import (
    CommitmentCreate,
    CommitmentDetail,
    CommitmentRead,
    CommitmentUpdate,
)

router = APIRouter()


@router.get("/", response_model=List[CommitmentRead])
async def list_commitments(
    narrative_id: Optional[uuid.UUID] = None,
    ctx: WorkspaceContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    return await svc.list_commitments(session, ctx.workspace_id, narrative_id=narrative_id)


@router.post("/", response_model=CommitmentRead, status_code=201)
async def create_commitment(
    body: CommitmentCreate,
    ctx: WorkspaceContext = Depends(require_editor),
    session: AsyncSession = Depends(get_session),
):
    commitment = await svc.create_commitment(session, ctx, body)
    await session.commit()
    return commitment


@router.get("/{commitment_id}", response_model=CommitmentDetail)
async def get_commitment(
    commitment_id: uuid.UUID,
    ctx: WorkspaceContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    """A commitment with the number of tasks under it."""
    commitment = await svc.get_commitment_or_404(session, commitment_id, ctx.workspace_id)
    return CommitmentDetail(
        **CommitmentRead.model_validate(commitment).model_dump(),
        tasks_count=await svc.count_tasks(session, commitment.id),
    )


@router.put("/{commitment_id}", response_model=CommitmentRead)
async def update_commitment(
    commitment_id: uuid.UUID,
    body: CommitmentUpdate,
    ctx: WorkspaceContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    commitment = await svc.get_commitment_or_404(session, commitment_id, ctx.workspace_id)
    commitment = await svc.update_commitment(session, ctx, commitment, body)
    await session.commit()
    return commitment


@router.delete("/{commitment_id}", response_model=MessageResponse)
async def delete_commitment(
    commitment_id: uuid.UUID,
    ctx: WorkspaceContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    commitment = await svc.get_commitment_or_404(session, commitment_id, ctx.workspace_id)
    await svc.delete_commitment(session, ctx, commitment)
    await session.commit()
    return MessageResponse(message="Commitment deleted")
