"""
Workspace service: listing, settings updates and onboarding.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import structlog
from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.permissions import is_admin_or_owner
from app.core.workspace import get_membership, list_user_workspaces
from app.models.cycle import Cycle
from app.models.team import Team
from app.models.workspace import Workspace
from app.models.workspace_member import WorkspaceMember
from app.models.year import Year
from app.services.common import apply_updates
from nct_shared.schemas.common import CycleStatus, PlanningRhythm, Role
from nct_shared.schemas.workspaces import (
    OnboardingRequest,
    OnboardingResult,
    WorkspaceUpdate,
    WorkspaceWithRole,
)

log = structlog.get_logger()

DEFAULT_TEAMS = ["My Team"]
DEFAULT_CYCLE_DAYS = 90


async def list_workspaces_with_role(session: AsyncSession, user_id: uuid.UUID) -> list[WorkspaceWithRole]:
    rows = await list_user_workspaces(session, user_id)
    return [
        WorkspaceWithRole(id=ws.id, name=ws.name, role=Role(m.role), joined_at=m.created_at)
        for ws, m in rows
    ]


async def get_member_workspace(
    session: AsyncSession, user_id: uuid.UUID, workspace_id: uuid.UUID
) -> tuple[Workspace, WorkspaceMember]:
    """Load a workspace by id for one of its members.

    Non-members get 403 whether or not the workspace exists.
    """
    membership = await get_membership(session, user_id, workspace_id)
    if membership is None:
        raise HTTPException(status_code=403, detail="Not a member of this workspace")
    workspace = await session.get(Workspace, workspace_id)
    if workspace is None:
        raise HTTPException(status_code=404, detail="Workspace not found")
    return workspace, membership


async def update_workspace(
    session: AsyncSession,
    workspace: Workspace,
    membership: WorkspaceMember,
    req: WorkspaceUpdate,
) -> Workspace:
    if not is_admin_or_owner(membership.role):
        raise HTTPException(status_code=403, detail="Forbidden")

    data = req.model_dump(exclude_unset=True)
    apply_updates(workspace, data, required=("name", "planning_rhythm"))
    session.add(workspace)
    await session.flush()

    log.info("workspace.updated", workspace_id=str(workspace.id), fields=sorted(data))
    return workspace


# ---------------------------------------------------------------------------
# Onboarding
# ---------------------------------------------------------------------------

def first_cycle_window(
    rhythm: PlanningRhythm, cycle_length_weeks: Optional[int], now: datetime
) -> tuple[str, datetime, datetime]:
    """Name and date range of the cycle created during onboarding."""
    if rhythm is PlanningRhythm.QUARTERS:
        start = datetime(now.year, 1, 1, tzinfo=timezone.utc)
        end = datetime(now.year, 3, 31, tzinfo=timezone.utc)
        return f"Q1 {now.year}", start, end
    if rhythm is PlanningRhythm.CYCLES and cycle_length_weeks:
        return "Cycle 1", now, now + timedelta(weeks=cycle_length_weeks)
    return "Cycle 1", now, now + timedelta(days=DEFAULT_CYCLE_DAYS)


async def onboard_workspace(
    session: AsyncSession,
    user_id: uuid.UUID,
    req: OnboardingRequest,
    *,
    now: Optional[datetime] = None,
) -> OnboardingResult:
    """Create a workspace with its owner, the current year, a first active cycle and teams."""
    now = now or datetime.now(timezone.utc)

    workspace = Workspace(
        name=req.name,
        vision=req.vision,
        strategy_doc_url=req.strategy_doc_url,
        planning_rhythm=req.planning_rhythm.value,
        cycle_length_weeks=req.cycle_length_weeks,
        created_by=user_id,
    )
    session.add(workspace)
    await session.flush()

    session.add(WorkspaceMember(workspace_id=workspace.id, user_id=user_id, role=Role.OWNER.value))

    year = Year(workspace_id=workspace.id, year=now.year)
    session.add(year)
    await session.flush()

    name, start, end = first_cycle_window(req.planning_rhythm, req.cycle_length_weeks, now)
    cycle = Cycle(
        workspace_id=workspace.id,
        year_id=year.id,
        name=name,
        start_date=start,
        end_date=end,
        status=CycleStatus.ACTIVE.value,
    )
    session.add(cycle)

    team_names = [t.strip() for t in req.teams if t.strip()] or DEFAULT_TEAMS
    teams = [Team(workspace_id=workspace.id, name=t) for t in team_names]
    session.add_all(teams)
    await session.flush()

    log.info(
        "workspace.onboarded",
        workspace_id=str(workspace.id),
        owner=str(user_id),
        rhythm=req.planning_rhythm.value,
        teams=len(teams),
    )
    return OnboardingResult(
        workspace_id=workspace.id,
        year_id=year.id,
        cycle_id=cycle.id,
        team_ids=[t.id for t in teams],
    )


async def first_workspace_id(session: AsyncSession, user_id: uuid.UUID) -> Optional[uuid.UUID]:
    result = await session.execute(
        select(WorkspaceMember.workspace_id)
        .where(WorkspaceMember.user_id == user_id)
        .order_by(WorkspaceMember.created_at, WorkspaceMember.id)
        .limit(1)
    )
    return result.scalars().first()
