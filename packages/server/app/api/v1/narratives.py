"""
Narrative endpoints.

Reads need membership, creates need editor rank, and updates or deletes
additionally pass the ownership check (editors only touch their own).
"""

from __future__ import annotations

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import require_editor, require_member
from app.core.database import get_session
from app.core.workspace import WorkspaceContext
from app.services import narratives as svc
from nct_shared.schemas.common import MessageResponse
from nct_shared.schemas.nct import NarrativeCreate, NarrativeRead, NarrativeUpdate

router = APIRouter()


@router.get("/", response_model=List[NarrativeRead])
async def list_narratives(
    cycle_id: Optional[uuid.UUID] = None,
    team_id: Optional[uuid.UUID] = None,
    ctx: WorkspaceContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    return await svc.list_narratives(session, ctx.workspace_id, cycle_id=cycle_id, team_id=team_id)


@router.post("/", response_model=NarrativeRead, status_code=201)
async def create_narrative(
    body: NarrativeCreate,
    ctx: WorkspaceContext = Depends(require_editor),
    session: AsyncSession = Depends(get_session),
):
    narrative = await svc.create_narrative(session, ctx, body)
    await session.commit()
    return narrative


@router.get("/{narrative_id}", response_model=NarrativeRead)
async def get_narrative(
    narrative_id: uuid.UUID,
    ctx: WorkspaceContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    return await svc.get_narrative_or_404(session, narrative_id, ctx.workspace_id)


@router.put("/{narrative_id}", response_model=NarrativeRead)
async def update_narrative(
    narrative_id: uuid.UUID,
    body: NarrativeUpdate,
    ctx: WorkspaceContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    narrative = await svc.get_narrative_or_404(session, narrative_id, ctx.workspace_id)
    narrative = await svc.update_narrative(session, ctx, narrative, body)
    await session.commit()
    return narrative


@router.delete("/{narrative_id}", response_model=MessageResponse)
async def delete_narrative(
    narrative_id: uuid.UUID,
    ctx: WorkspaceContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    narrative = await svc.get_narrative_or_404(session, narrative_id, ctx.workspace_id)
    await svc.delete_narrative(session, ctx, narrative)
    await session.commit()
    return MessageResponse(message="Narrative deleted")
