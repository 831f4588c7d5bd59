"""
Teams service: team CRUD, team membership and the per-team dashboard.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

import structlog
from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.workspace import WorkspaceContext, get_membership
from app.models.commitment import Commitment
from app.models.narrative import Narrative
from app.models.task import Task
from app.models.team import Team
from app.models.team_member import TeamMember
from app.models.user import User
from app.services.common import get_scoped_or_404
from app.services.health import is_past_due
from nct_shared.schemas.common import NCT_STATUS_ORDER, NctStatus, TaskStatus, UserSummary
from nct_shared.schemas.teams import (
    TeamCreate,
    TeamDashboard,
    TeamMemberRead,
    TeamNarrativeSummary,
    TeamRef,
    TeamStats,
)

log = structlog.get_logger()

_STATUS_RANK = {status.value: i for i, status in enumerate(NCT_STATUS_ORDER)}


async def list_teams(session: AsyncSession, workspace_id: uuid.UUID) -> list[Team]:
    result = await session.execute(
        select(Team).where(Team.workspace_id == workspace_id).order_by(Team.created_at)
    )
    return list(result.scalars().all())


async def get_team_or_404(session: AsyncSession, team_id: uuid.UUID, workspace_id: uuid.UUID) -> Team:
    return await get_scoped_or_404(session, Team, team_id, workspace_id, "Team")


async def create_team(session: AsyncSession, ctx: WorkspaceContext, req: TeamCreate) -> Team:
    team = Team(workspace_id=ctx.workspace_id, name=req.name)
    session.add(team)
    await session.flush()

    log.info("team.created", team_id=str(team.id), workspace_id=str(ctx.workspace_id))
    return team


# ---------------------------------------------------------------------------
# Membership
# ---------------------------------------------------------------------------

def _team_member_read(member: TeamMember, user: User) -> TeamMemberRead:
    return TeamMemberRead(
        id=member.id,
        user_id=member.user_id,
        created_at=member.created_at,
        user=UserSummary(id=user.id, name=user.name, email=user.email, image=user.image),
    )


async def list_team_members(session: AsyncSession, team_id: uuid.UUID) -> list[TeamMemberRead]:
    result = await session.execute(
        select(TeamMember, User)
        .join(User, User.id == TeamMember.user_id)
        .where(TeamMember.team_id == team_id)
        .order_by(TeamMember.created_at)
    )
    return [_team_member_read(m, u) for m, u in result.all()]


async def _find_team_member(
    session: AsyncSession, team_id: uuid.UUID, user_id: uuid.UUID
) -> Optional[TeamMember]:
    result = await session.execute(
        select(TeamMember).where(TeamMember.team_id == team_id, TeamMember.user_id == user_id)
    )
    return result.scalars().first()


async def add_team_member(session: AsyncSession, team: Team, user_id: uuid.UUID) -> TeamMemberRead:
    """Add a workspace member to `team`."""
    if await get_membership(session, user_id, team.workspace_id) is None:
        raise HTTPException(status_code=400, detail="User is not a workspace member")
    if await _find_team_member(session, team.id, user_id) is not None:
        raise HTTPException(status_code=409, detail="User is already a team member")

    member = TeamMember(team_id=team.id, user_id=user_id)
    session.add(member)
    await session.flush()
    await session.refresh(member)

    user = await session.get(User, user_id)
    log.info("team.member_added", team_id=str(team.id), user_id=str(user_id))
    return _team_member_read(member, user)


async def remove_team_member(session: AsyncSession, team: Team, user_id: uuid.UUID) -> None:
    member = await _find_team_member(session, team.id, user_id)
    if member is None:
        raise HTTPException(status_code=404, detail="User is not a member of this team")

    await session.delete(member)
    await session.flush()
    log.info("team.member_removed", team_id=str(team.id), user_id=str(user_id))


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------

async def team_dashboard(
    session: AsyncSession, team: Team, *, now: Optional[datetime] = None
) -> TeamDashboard:
    """Narrative, commitment and task roll-up for one team."""
    now = now or datetime.now(timezone.utc)

    narratives = list(
        (
            await session.execute(
                select(Narrative).where(
                    Narrative.workspace_id == team.workspace_id,
                    Narrative.team_id == team.id,
                )
            )
        ).scalars().all()
    )
    narrative_ids = [n.id for n in narratives]

    commitments: list[Commitment] = []
    if narrative_ids:
        commitments = list(
            (
                await session.execute(
                    select(Commitment).where(
                        Commitment.workspace_id == team.workspace_id,
                        Commitment.narrative_id.in_(narrative_ids),
                    )
                )
            ).scalars().all()
        )
    commitment_ids = [c.id for c in commitments]

    tasks: list[Task] = []
    if commitment_ids:
        tasks = list(
            (
                await session.execute(
                    select(Task).where(
                        Task.workspace_id == team.workspace_id,
                        Task.commitment_id.in_(commitment_ids),
                    )
                )
            ).scalars().all()
        )

    def n_count(status: NctStatus, rows) -> int:
        return sum(1 for r in rows if r.status == status.value)

    def t_count(status: TaskStatus) -> int:
        return sum(1 for t in tasks if t.status == status.value)

    stats = TeamStats(
        total_narratives=len(narratives),
        active_narratives=n_count(NctStatus.ACTIVE, narratives),
        draft_narratives=n_count(NctStatus.DRAFT, narratives),
        at_risk_narratives=n_count(NctStatus.AT_RISK, narratives),
        completed_narratives=n_count(NctStatus.COMPLETED, narratives),
        total_commitments=len(commitments),
        active_commitments=n_count(NctStatus.ACTIVE, commitments),
        at_risk_commitments=n_count(NctStatus.AT_RISK, commitments),
        completed_commitments=n_count(NctStatus.COMPLETED, commitments),
        total_tasks=len(tasks),
        completed_tasks=t_count(TaskStatus.DONE),
        in_progress_tasks=t_count(TaskStatus.IN_PROGRESS),
        overdue_tasks=sum(
            1 for t in tasks if t.status != TaskStatus.DONE.value and is_past_due(t.due_date, now)
        ),
        blocked_tasks=t_count(TaskStatus.BLOCKED),
    )

    commitments_by_narrative: dict[uuid.UUID, list[Commitment]] = {}
    for c in commitments:
        commitments_by_narrative.setdefault(c.narrative_id, []).append(c)
    tasks_by_commitment: dict[uuid.UUID, list[Task]] = {}
    for t in tasks:
        tasks_by_commitment.setdefault(t.commitment_id, []).append(t)

    summaries = []
    for n in narratives:
        n_commitments = commitments_by_narrative.get(n.id, [])
        n_tasks = [t for c in n_commitments for t in tasks_by_commitment.get(c.id, [])]
        summaries.append(
            TeamNarrativeSummary(
                id=n.id,
                title=n.title,
                status=n.status,
                cycle_id=n.cycle_id,
                commitment_count=len(n_commitments),
                task_count=len(n_tasks),
                tasks_done=sum(1 for t in n_tasks if t.status == TaskStatus.DONE.value),
            )
        )
    summaries.sort(key=lambda s: _STATUS_RANK.get(s.status.value, len(_STATUS_RANK)))

    return TeamDashboard(
        team=TeamRef(id=team.id, name=team.name),
        stats=stats,
        narratives=summaries,
        members=await list_team_members(session, team.id),
    )
