"""
Workspace health scoring.

A fixed linear penalty formula over a workspace's current narratives,
commitments, tasks and strategic pillars. The score is recomputed on every
read and never stored. Penalties and bands are product configuration and are
reproduced exactly.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models.base import as_utc
from app.models.commitment import Commitment
from app.models.narrative import Narrative
from app.models.pillar import StrategicPillar
from app.models.task import Task
from nct_shared.schemas.common import HealthStatus, NctStatus, PillarStatus, TaskStatus
from nct_shared.schemas.reports import HealthReport, HealthStats

BASELINE = 100

PENALTY_PILLAR_WITHOUT_NARRATIVE = 5
PENALTY_NARRATIVE_WITHOUT_COMMITMENT = 10
PENALTY_COMMITMENT_AT_RISK = 5
PENALTY_COMMITMENT_ARCHIVED = 2
PENALTY_ORPHAN_TASK = 3
PENALTY_STALE_NARRATIVE = 5
PENALTY_OVERDUE_TASK = 2

STALE_AFTER_DAYS = 30

HEALTHY_THRESHOLD = 80
NEEDS_ATTENTION_THRESHOLD = 60


def health_status(score: int) -> HealthStatus:
    if score >= HEALTHY_THRESHOLD:
        return HealthStatus.HEALTHY
    if score >= NEEDS_ATTENTION_THRESHOLD:
        return HealthStatus.NEEDS_ATTENTION
    return HealthStatus.AT_RISK


def days_since(value: Optional[datetime], now: datetime) -> int:
    """Whole days elapsed since `value`; 0 when unknown."""
    if value is None:
        return 0
    return (now - as_utc(value)).days


def is_past_due(value: Optional[datetime], now: datetime) -> bool:
    return value is not None and as_utc(value) < now


def _plural(n: int, word: str) -> str:
    return f"{n} {word}{'' if n == 1 else 's'}"


def score_workspace(
    narratives: Sequence[Narrative],
    commitments: Sequence[Commitment],
    tasks: Sequence[Task],
    pillars: Sequence[StrategicPillar],
    *,
    now: Optional[datetime] = None,
) -> HealthReport:
    """Score a workspace snapshot. Pure: same input, same report."""
    now = now or datetime.now(timezone.utc)
    score = BASELINE
    issues: list[str] = []

    # Active pillars nothing points at
    linked_pillars = {n.pillar_id for n in narratives if n.pillar_id is not None}
    for pillar in pillars:
        if pillar.status == PillarStatus.ACTIVE.value and pillar.id not in linked_pillars:
            score -= PENALTY_PILLAR_WITHOUT_NARRATIVE
            issues.append(f"Pillar '{pillar.title}' has no linked narratives")

    narratives_with_commitments = {c.narrative_id for c in commitments}
    uncommitted = [n for n in narratives if n.id not in narratives_with_commitments]
    if uncommitted:
        score -= PENALTY_NARRATIVE_WITHOUT_COMMITMENT * len(uncommitted)
        issues.append(f"{_plural(len(uncommitted), 'narrative')} without commitments")

    at_risk = [c for c in commitments if c.status == NctStatus.AT_RISK.value]
    if at_risk:
        score -= PENALTY_COMMITMENT_AT_RISK * len(at_risk)
        issues.append(f"{_plural(len(at_risk), 'commitment')} at risk")

    archived = [c for c in commitments if c.status == NctStatus.ARCHIVED.value]
    score -= PENALTY_COMMITMENT_ARCHIVED * len(archived)

    commitment_ids = {c.id for c in commitments}
    orphans = [t for t in tasks if t.commitment_id not in commitment_ids]
    score -= PENALTY_ORPHAN_TASK * len(orphans)

    stale = [
        n
        for n in narratives
        if n.status == NctStatus.ACTIVE.value and days_since(n.updated_at, now) > STALE_AFTER_DAYS
    ]
    score -= PENALTY_STALE_NARRATIVE * len(stale)

    overdue = [t for t in tasks if t.status != TaskStatus.DONE.value and is_past_due(t.due_date, now)]
    score -= PENALTY_OVERDUE_TASK * len(overdue)

    score = max(0, min(BASELINE, score))

    stats = HealthStats(
        active_narratives=sum(1 for n in narratives if n.status == NctStatus.ACTIVE.value),
        total_narratives=len(narratives),
        at_risk_commitments=len(at_risk),
        total_commitments=len(commitments),
        completed_tasks=sum(1 for t in tasks if t.status == TaskStatus.DONE.value),
        total_tasks=len(tasks),
        orphan_tasks=len(orphans),
        blocked_tasks=sum(1 for t in tasks if t.status == TaskStatus.BLOCKED.value),
        overdue_tasks=len(overdue),
        on_track_commitments=sum(
            1 for c in commitments if c.status in (NctStatus.ACTIVE.value, NctStatus.DRAFT.value)
        ),
        stale_narratives=len(stale),
    )
    return HealthReport(score=score, status=health_status(score), issues=issues, stats=stats)


async def load_health_snapshot(
    session: AsyncSession, workspace_id: uuid.UUID
) -> tuple[list[Narrative], list[Commitment], list[Task], list[StrategicPillar]]:
    """Fetch the four collections the scorer reads.

    An AsyncSession runs one statement at a time, so the queries are issued
    back to back on the request's session.
    """
    narratives = (await session.execute(select(Narrative).where(Narrative.workspace_id == workspace_id))).scalars().all()
    commitments = (await session.execute(select(Commitment).where(Commitment.workspace_id == workspace_id))).scalars().all()
    tasks = (await session.execute(select(Task).where(Task.workspace_id == workspace_id))).scalars().all()
    pillars = (
        await session.execute(select(StrategicPillar).where(StrategicPillar.workspace_id == workspace_id))
    ).scalars().all()
    return list(narratives), list(commitments), list(tasks), list(pillars)
