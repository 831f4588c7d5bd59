"""
Read-only workspace reports: the NCT tree, alignment gaps and title search.

The builders (`build_nct_tree`, `find_alignment_gaps`, `alignment_score`)
are pure functions over already-loaded rows; the `load_*` and `search`
coroutines do the querying.
"""

from __future__ import annotations

import uuid
from typing import Sequence, Type, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select

from app.models.commitment import Commitment
from app.models.cycle import Cycle
from app.models.narrative import Narrative
from app.models.pillar import StrategicPillar
from app.models.task import Task
from app.models.team import Team
from app.models.workspace import Workspace
from app.models.year import Year
from nct_shared.schemas.common import CycleStatus, PillarStatus
from nct_shared.schemas.nct import CommitmentRead, NarrativeRead, TaskRead
from nct_shared.schemas.reports import (
    AlignmentGap,
    AlignmentReport,
    CommitmentNode,
    CycleNode,
    GapAction,
    GapSeverity,
    GapType,
    NarrativeNode,
    NctTree,
    SearchResults,
    TaskNode,
    TeamNode,
    WorkspaceRef,
    YearNode,
)

M = TypeVar("M", bound=SQLModel)

SEARCH_LIMIT = 10

GAP_PENALTIES = {
    GapSeverity.CRITICAL: 10,
    GapSeverity.WARNING: 5,
    GapSeverity.INFO: 2,
}


async def _all_in_workspace(session: AsyncSession, model: Type[M], workspace_id: uuid.UUID) -> list[M]:
    result = await session.execute(select(model).where(model.workspace_id == workspace_id))
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# NCT tree
# ---------------------------------------------------------------------------

def build_nct_tree(
    workspace: Workspace,
    years: Sequence[Year],
    cycles: Sequence[Cycle],
    teams: Sequence[Team],
    narratives: Sequence[Narrative],
    commitments: Sequence[Commitment],
    tasks: Sequence[Task],
) -> NctTree:
    """Nest Year > Cycle > Team > Narrative > Commitment > Task.

    Narratives missing a cycle or a team are listed under `uncategorized`,
    which is only set when there are any.
    """
    commitments_by_narrative: dict[uuid.UUID, list[Commitment]] = {}
    for c in commitments:
        commitments_by_narrative.setdefault(c.narrative_id, []).append(c)
    tasks_by_commitment: dict[uuid.UUID, list[Task]] = {}
    for t in tasks:
        tasks_by_commitment.setdefault(t.commitment_id, []).append(t)

    def narrative_node(n: Narrative) -> NarrativeNode:
        return NarrativeNode(
            id=n.id,
            title=n.title,
            status=n.status,
            commitments=[
                CommitmentNode(
                    id=c.id,
                    title=c.title,
                    status=c.status,
                    tasks=[
                        TaskNode(id=t.id, title=t.title, status=t.status)
                        for t in tasks_by_commitment.get(c.id, [])
                    ],
                )
                for c in commitments_by_narrative.get(n.id, [])
            ],
        )

    by_cycle_team: dict[tuple[uuid.UUID, uuid.UUID], list[Narrative]] = {}
    uncategorized: list[Narrative] = []
    for n in narratives:
        if n.cycle_id and n.team_id:
            by_cycle_team.setdefault((n.cycle_id, n.team_id), []).append(n)
        else:
            uncategorized.append(n)

    cycles_by_year: dict[uuid.UUID, list[Cycle]] = {}
    for c in cycles:
        cycles_by_year.setdefault(c.year_id, []).append(c)

    year_nodes = [
        YearNode(
            id=y.id,
            year=y.year,
            cycles=[
                CycleNode(
                    id=c.id,
                    name=c.name,
                    status=c.status,
                    start_date=c.start_date,
                    end_date=c.end_date,
                    teams=[
                        TeamNode(
                            id=team.id,
                            name=team.name,
                            narratives=[narrative_node(n) for n in by_cycle_team.get((c.id, team.id), [])],
                        )
                        for team in teams
                    ],
                )
                for c in cycles_by_year.get(y.id, [])
            ],
        )
        for y in sorted(years, key=lambda y: y.year)
    ]

    tree = NctTree(
        workspace=WorkspaceRef(id=workspace.id, name=workspace.name),
        strategy=workspace.vision,
        years=year_nodes,
    )
    if uncategorized:
        tree.uncategorized = [narrative_node(n) for n in uncategorized]
    return tree


async def load_nct_tree(session: AsyncSession, workspace: Workspace) -> NctTree:
    return build_nct_tree(
        workspace,
        await _all_in_workspace(session, Year, workspace.id),
        await _all_in_workspace(session, Cycle, workspace.id),
        await _all_in_workspace(session, Team, workspace.id),
        await _all_in_workspace(session, Narrative, workspace.id),
        await _all_in_workspace(session, Commitment, workspace.id),
        await _all_in_workspace(session, Task, workspace.id),
    )


# ---------------------------------------------------------------------------
# Alignment
# ---------------------------------------------------------------------------

def find_alignment_gaps(
    pillars: Sequence[StrategicPillar],
    narratives: Sequence[Narrative],
    commitments: Sequence[Commitment],
    tasks: Sequence[Task],
    teams: Sequence[Team],
    cycles: Sequence[Cycle],
) -> list[AlignmentGap]:
    """Gaps between strategy and execution, most severe kinds first."""
    gaps: list[AlignmentGap] = []

    linked_pillars = {n.pillar_id for n in narratives if n.pillar_id}
    for pillar in pillars:
        if pillar.status != PillarStatus.ACTIVE.value or pillar.id in linked_pillars:
            continue
        gaps.append(
            AlignmentGap(
                severity=GapSeverity.CRITICAL,
                type=GapType.PILLAR_NO_NARRATIVES,
                message=f'Pillar "{pillar.title}" has no linked narratives',
                action=GapAction(
                    label="Create Narrative",
                    href=f"/dashboard/narratives/new?pillarId={pillar.id}",
                ),
                entity_id=pillar.id,
            )
        )

    active_cycle = next((c for c in cycles if c.status == CycleStatus.ACTIVE.value), None)
    if active_cycle is not None:
        covered = {n.team_id for n in narratives if n.cycle_id == active_cycle.id}
        for team in teams:
            if team.id in covered:
                continue
            gaps.append(
                AlignmentGap(
                    severity=GapSeverity.CRITICAL,
                    type=GapType.TEAM_NO_NARRATIVES,
                    message=f"{team.name} team has no narratives this cycle",
                    action=GapAction(
                        label="Create Narrative",
                        href=f"/dashboard/narratives/new?teamId={team.id}&cycleId={active_cycle.id}",
                    ),
                    entity_id=team.id,
                )
            )

    committed = {c.narrative_id for c in commitments}
    for n in narratives:
        if n.id not in committed:
            gaps.append(
                AlignmentGap(
                    severity=GapSeverity.WARNING,
                    type=GapType.NARRATIVE_NO_COMMITMENTS,
                    message=f'Narrative "{n.title}" has no commitments',
                    action=GapAction(label="Add Commitment", href=f"/dashboard/narratives/{n.id}"),
                    entity_id=n.id,
                )
            )

    tasked = {t.commitment_id for t in tasks}
    for c in commitments:
        if c.id not in tasked:
            gaps.append(
                AlignmentGap(
                    severity=GapSeverity.WARNING,
                    type=GapType.COMMITMENT_NO_TASKS,
                    message=f'Commitment "{c.title}" has no tasks',
                    action=GapAction(label="Add Task", href=f"/dashboard/commitments/{c.id}"),
                    entity_id=c.id,
                )
            )

    for n in narratives:
        if not n.pillar_id:
            gaps.append(
                AlignmentGap(
                    severity=GapSeverity.INFO,
                    type=GapType.NARRATIVE_NO_PILLAR,
                    message=f'Narrative "{n.title}" is not linked to a pillar',
                    action=GapAction(label="Link to Pillar", href=f"/dashboard/narratives/{n.id}"),
                    entity_id=n.id,
                )
            )

    return gaps


def alignment_score(gaps: Sequence[AlignmentGap]) -> int:
    score = 100 - sum(GAP_PENALTIES[g.severity] for g in gaps)
    return max(0, min(100, score))


async def load_alignment(session: AsyncSession, workspace_id: uuid.UUID) -> AlignmentReport:
    gaps = find_alignment_gaps(
        await _all_in_workspace(session, StrategicPillar, workspace_id),
        await _all_in_workspace(session, Narrative, workspace_id),
        await _all_in_workspace(session, Commitment, workspace_id),
        await _all_in_workspace(session, Task, workspace_id),
        await _all_in_workspace(session, Team, workspace_id),
        await _all_in_workspace(session, Cycle, workspace_id),
    )
    return AlignmentReport(gaps=gaps, score=alignment_score(gaps))


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------

async def search(session: AsyncSession, workspace_id: uuid.UUID, query: str) -> SearchResults:
    """Case-insensitive title match across narratives, commitments and tasks."""
    query = (query or "").strip()
    if not query:
        return SearchResults()

    pattern = f"%{query}%"

    async def matching(model: Type[M]) -> list[M]:
        result = await session.execute(
            select(model)
            .where(model.workspace_id == workspace_id, model.title.ilike(pattern))
            .limit(SEARCH_LIMIT)
        )
        return list(result.scalars().all())

    return SearchResults(
        narratives=[NarrativeRead.model_validate(n) for n in await matching(Narrative)],
        commitments=[CommitmentRead.model_validate(c) for c in await matching(Commitment)],
        tasks=[TaskRead.model_validate(t) for t in await matching(Task)],
    )
