"""Team endpoints: teams, team membership and the team dashboard."""

from __future__ import annotations

import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import require_admin, require_member
from app.core.database import get_session
from app.core.workspace import WorkspaceContext
from app.services import teams as svc
from nct_shared.schemas.common import MessageResponse
from nct_shared.schemas.teams import (
    TeamCreate,
    TeamDashboard,
    TeamMemberAdd,
    TeamMemberRead,
    TeamRead,
)

router = APIRouter()


@router.get("/", response_model=List[TeamRead])
async def list_teams(
    ctx: WorkspaceContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    return await svc.list_teams(session, ctx.workspace_id)


@router.post("/", response_model=TeamRead, status_code=201)
async def create_team(
    body: TeamCreate,
    ctx: WorkspaceContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    team = await svc.create_team(session, ctx, body)
    await session.commit()
    return team


@router.get("/{team_id}/members", response_model=List[TeamMemberRead])
async def list_team_members(
    team_id: uuid.UUID,
    ctx: WorkspaceContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    team = await svc.get_team_or_404(session, team_id, ctx.workspace_id)
    return await svc.list_team_members(session, team.id)


@router.post("/{team_id}/members", response_model=TeamMemberRead, status_code=201)
async def add_team_member(
    team_id: uuid.UUID,
    body: TeamMemberAdd,
    ctx: WorkspaceContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    team = await svc.get_team_or_404(session, team_id, ctx.workspace_id)
    member = await svc.add_team_member(session, team, body.user_id)
    await session.commit()
    return member


@router.delete("/{team_id}/members/{user_id}", response_model=MessageResponse)
async def remove_team_member(
    team_id: uuid.UUID,
    user_id: uuid.UUID,
    ctx: WorkspaceContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    team = await svc.get_team_or_404(session, team_id, ctx.workspace_id)
    await svc.remove_team_member(session, team, user_id)
    await session.commit()
    return MessageResponse(message="Team member removed")


@router.get("/{team_id}/dashboard", response_model=TeamDashboard)
async def team_dashboard(
    team_id: uuid.UUID,
    ctx: WorkspaceContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    team = await svc.get_team_or_404(session, team_id, ctx.workspace_id)
    return await svc.team_dashboard(session, team)
