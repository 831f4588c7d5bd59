"""
Tests for workspace reports.

Covers:
- NCT tree nesting and the uncategorized bucket
- Alignment gaps: kinds, severities, messages, links and ordering
- Alignment score clamping
- Search endpoint (case-insensitive, workspace scoped, blank query)
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from app.models.commitment import Commitment
from app.models.cycle import Cycle
from app.models.narrative import Narrative
from app.models.pillar import StrategicPillar
from app.models.task import Task
from app.models.team import Team
from app.models.workspace import Workspace
from app.models.year import Year
from app.services.reports import alignment_score, build_nct_tree, find_alignment_gaps
from nct_shared.schemas.reports import GapSeverity, GapType

from conftest import add_user, add_workspace, bearer

OWNER = uuid.uuid4()
WORKSPACE = Workspace(name="Acme", vision="Win", planning_rhythm="quarters", created_by=OWNER)
WS = WORKSPACE.id


def _year(value=2026):
    return Year(workspace_id=WS, year=value)


def _cycle(year, name="Q1", status="active"):
    return Cycle(
        workspace_id=WS, year_id=year.id, name=name, status=status,
        start_date=datetime(2026, 1, 1, tzinfo=timezone.utc),
        end_date=datetime(2026, 3, 31, tzinfo=timezone.utc),
    )


def _narrative(title="N", **kw):
    return Narrative(workspace_id=WS, owner_id=OWNER, title=title, status="active", **kw)


def _commitment(narrative, title="C"):
    return Commitment(workspace_id=WS, owner_id=OWNER, narrative_id=narrative.id, title=title, status="active")


def _task(commitment, title="T"):
    return Task(workspace_id=WS, owner_id=OWNER, commitment_id=commitment.id, title=title, status="todo")


# ---------------------------------------------------------------------------
# NCT tree
# ---------------------------------------------------------------------------

class TestNctTree:
    def test_nesting(self):
        year = _year()
        cycle = _cycle(year)
        team = Team(workspace_id=WS, name="Platform")
        n = _narrative("Placed", cycle_id=cycle.id, team_id=team.id)
        c = _commitment(n)
        t = _task(c)

        tree = build_nct_tree(WORKSPACE, [year], [cycle], [team], [n], [c], [t])

        assert tree.workspace.name == "Acme"
        assert tree.strategy == "Win"
        assert tree.uncategorized is None
        team_node = tree.years[0].cycles[0].teams[0]
        assert team_node.name == "Platform"
        assert team_node.narratives[0].title == "Placed"
        assert team_node.narratives[0].commitments[0].tasks[0].id == t.id

    def test_uncategorized_only_when_present(self):
        year = _year()
        cycle = _cycle(year)
        loose = _narrative("No team", cycle_id=cycle.id)
        tree = build_nct_tree(WORKSPACE, [year], [cycle], [], [loose], [], [])
        assert [n.title for n in tree.uncategorized] == ["No team"]
        assert "uncategorized" in tree.model_dump(exclude_unset=True)

        empty = build_nct_tree(WORKSPACE, [year], [cycle], [], [], [], [])
        assert "uncategorized" not in empty.model_dump(exclude_unset=True)

    def test_years_are_sorted(self):
        tree = build_nct_tree(WORKSPACE, [_year(2027), _year(2025)], [], [], [], [], [])
        assert [y.year for y in tree.years] == [2025, 2027]


# ---------------------------------------------------------------------------
# Alignment
# ---------------------------------------------------------------------------

class TestAlignmentGaps:
    def test_fully_aligned(self):
        year = _year()
        cycle = _cycle(year)
        team = Team(workspace_id=WS, name="Platform")
        pillar = StrategicPillar(workspace_id=WS, year_id=year.id, title="Growth", order=1, status="active")
        n = _narrative(cycle_id=cycle.id, team_id=team.id, pillar_id=pillar.id)
        c = _commitment(n)
        gaps = find_alignment_gaps([pillar], [n], [c], [_task(c)], [team], [cycle])
        assert gaps == []
        assert alignment_score(gaps) == 100

    def test_every_gap_kind(self):
        year = _year()
        cycle = _cycle(year)
        team = Team(workspace_id=WS, name="Platform")
        pillar = StrategicPillar(workspace_id=WS, year_id=year.id, title="Growth", order=1, status="active")
        archived = StrategicPillar(workspace_id=WS, year_id=year.id, title="Old", order=2, status="archived")
        bare = _narrative("Bare")
        with_commitment = _narrative("Committed")
        empty_commitment = _commitment(with_commitment, "Empty")

        gaps = find_alignment_gaps(
            [pillar, archived], [bare, with_commitment], [empty_commitment], [], [team], [cycle]
        )

        assert [g.type for g in gaps] == [
            GapType.PILLAR_NO_NARRATIVES,
            GapType.TEAM_NO_NARRATIVES,
            GapType.NARRATIVE_NO_COMMITMENTS,
            GapType.COMMITMENT_NO_TASKS,
            GapType.NARRATIVE_NO_PILLAR,
            GapType.NARRATIVE_NO_PILLAR,
        ]
        assert [g.severity for g in gaps[:2]] == [GapSeverity.CRITICAL] * 2

        pillar_gap, team_gap, narrative_gap = gaps[:3]
        assert pillar_gap.message == 'Pillar "Growth" has no linked narratives'
        assert pillar_gap.action.href == f"/dashboard/narratives/new?pillarId={pillar.id}"
        assert team_gap.message == "Platform team has no narratives this cycle"
        assert team_gap.action.href == f"/dashboard/narratives/new?teamId={team.id}&cycleId={cycle.id}"
        assert narrative_gap.entity_id == bare.id

        # 2 critical, 2 warning, 2 info
        assert alignment_score(gaps) == 100 - 20 - 10 - 4

    def test_team_gaps_need_an_active_cycle(self):
        year = _year()
        planning = _cycle(year, status="planning")
        team = Team(workspace_id=WS, name="Platform")
        gaps = find_alignment_gaps([], [], [], [], [team], [planning])
        assert gaps == []

    def test_score_is_clamped(self):
        narratives = [_narrative(f"N{i}") for i in range(20)]
        assert alignment_score(find_alignment_gaps([], narratives, [], [], [], [])) == 0


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

class TestReportEndpoints:
    async def test_search(self, client, session, workspace, owner_headers):
        n = (await client.post("/api/v1/narratives/", json={"title": "Enterprise push"}, headers=owner_headers)).json()
        await client.post(
            "/api/v1/commitments/", json={"narrative_id": n["id"], "title": "Ship SSO for enterprise"}, headers=owner_headers
        )
        await client.post("/api/v1/narratives/", json={"title": "Unrelated"}, headers=owner_headers)

        stranger = await add_user(session)
        await add_workspace(session, stranger, "Other")
        await client.post("/api/v1/narratives/", json={"title": "Enterprise elsewhere"}, headers=bearer(stranger))

        data = (await client.get("/api/v1/search?q=ENTERPRISE", headers=owner_headers)).json()
        assert [x["title"] for x in data["narratives"]] == ["Enterprise push"]
        assert [x["title"] for x in data["commitments"]] == ["Ship SSO for enterprise"]
        assert data["tasks"] == []

    async def test_blank_search(self, client, workspace, owner_headers):
        data = (await client.get("/api/v1/search?q=%20", headers=owner_headers)).json()
        assert data == {"narratives": [], "commitments": [], "tasks": []}

    async def test_alignment_endpoint(self, client, workspace, owner_headers):
        await client.post("/api/v1/narratives/", json={"title": "Loose"}, headers=owner_headers)
        data = (await client.get("/api/v1/alignment", headers=owner_headers)).json()
        assert data["score"] == 93
        assert {g["type"] for g in data["gaps"]} == {"narrative_no_commitments", "narrative_no_pillar"}

    async def test_tree_endpoint_omits_empty_uncategorized(self, client, workspace, owner_headers):
        data = (await client.get("/api/v1/nct-tree", headers=owner_headers)).json()
        assert data["workspace"]["name"] == "Acme"
        assert "uncategorized" not in data
