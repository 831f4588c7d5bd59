"""
Tests for onboarding and workspace endpoints.

Covers:
- First-cycle windows per planning rhythm
- POST /onboarding creates workspace, owner, year, cycle and teams
- Onboarding status
- Listing, reading, updating and selecting workspaces
- Non-members are refused with 403
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlmodel import select

from app.core.config import get_settings
from app.models.cycle import Cycle
from app.models.team import Team
from app.models.workspace_member import WorkspaceMember
from app.services.workspaces import first_cycle_window
from nct_shared.schemas.common import PlanningRhythm

from conftest import add_member, add_user, add_workspace, bearer

NOW = datetime(2026, 8, 20, 9, 30, tzinfo=timezone.utc)


class TestFirstCycleWindow:
    def test_quarters_always_start_with_q1(self):
        name, start, end = first_cycle_window(PlanningRhythm.QUARTERS, None, NOW)
        assert name == "Q1 2026"
        assert start == datetime(2026, 1, 1, tzinfo=timezone.utc)
        assert end == datetime(2026, 3, 31, tzinfo=timezone.utc)

    def test_cycles_use_configured_length(self):
        name, start, end = first_cycle_window(PlanningRhythm.CYCLES, 6, NOW)
        assert name == "Cycle 1"
        assert start == NOW
        assert end - start == timedelta(weeks=6)

    @pytest.mark.parametrize("rhythm,weeks", [(PlanningRhythm.CUSTOM, None), (PlanningRhythm.CYCLES, None)])
    def test_default_ninety_days(self, rhythm, weeks):
        _, start, end = first_cycle_window(rhythm, weeks, NOW)
        assert end - start == timedelta(days=90)


class TestOnboarding:
    async def test_creates_workspace(self, client, session):
        user = await add_user(session)
        resp = await client.post(
            "/api/v1/onboarding/",
            json={"name": "Northwind", "teams": ["Platform", "  ", "Growth"]},
            headers=bearer(user),
        )
        assert resp.status_code == 201
        data = resp.json()
        assert len(data["team_ids"]) == 2
        assert resp.cookies.get(get_settings().workspace_cookie) == data["workspace_id"]

        ws_id = uuid.UUID(data["workspace_id"])
        member = (
            await session.execute(select(WorkspaceMember).where(WorkspaceMember.workspace_id == ws_id))
        ).scalars().one()
        assert member.user_id == user.id
        assert member.role == "owner"

        cycle = await session.get(Cycle, uuid.UUID(data["cycle_id"]))
        assert cycle.status == "active"
        assert cycle.name.startswith("Q1 ")

        teams = (await session.execute(select(Team.name).where(Team.workspace_id == ws_id))).scalars().all()
        assert sorted(teams) == ["Growth", "Platform"]

    async def test_default_team(self, client, session):
        user = await add_user(session)
        data = (await client.post("/api/v1/onboarding/", json={"name": "Solo"}, headers=bearer(user))).json()
        team = await session.get(Team, uuid.UUID(data["team_ids"][0]))
        assert team.name == "My Team"

    async def test_name_required(self, client, session):
        user = await add_user(session)
        resp = await client.post("/api/v1/onboarding/", json={"name": ""}, headers=bearer(user))
        assert resp.status_code == 422

    async def test_status(self, client, session):
        user = await add_user(session)
        before = (await client.get("/api/v1/onboarding/status", headers=bearer(user))).json()
        assert before == {"needs_onboarding": True, "workspace_id": None}

        created = (await client.post("/api/v1/onboarding/", json={"name": "Later"}, headers=bearer(user))).json()
        after = (await client.get("/api/v1/onboarding/status", headers=bearer(user))).json()
        assert after == {"needs_onboarding": False, "workspace_id": created["workspace_id"]}

    async def test_requires_sign_in(self, client):
        resp = await client.post("/api/v1/onboarding/", json={"name": "x"})
        assert resp.status_code == 401


class TestWorkspaces:
    async def test_list_with_roles(self, client, session, owner, workspace, owner_headers):
        other_owner = await add_user(session)
        other = await add_workspace(session, other_owner, "Globex")
        await add_member(session, other, owner, "viewer")

        data = (await client.get("/api/v1/workspaces/", headers=owner_headers)).json()
        assert {(w["name"], w["role"]) for w in data} == {("Acme", "owner"), ("Globex", "viewer")}

    async def test_get_detail(self, client, workspace, owner_headers):
        resp = await client.get(f"/api/v1/workspaces/{workspace.id}", headers=owner_headers)
        assert resp.status_code == 200
        assert resp.json()["name"] == "Acme"
        assert resp.json()["role"] == "owner"

    async def test_non_member_gets_403(self, client, session, workspace):
        stranger = await add_user(session)
        resp = await client.get(f"/api/v1/workspaces/{workspace.id}", headers=bearer(stranger))
        assert resp.status_code == 403

    async def test_missing_workspace_also_403(self, client, owner_headers, workspace):
        resp = await client.get(f"/api/v1/workspaces/{uuid.uuid4()}", headers=owner_headers)
        assert resp.status_code == 403

    async def test_update(self, client, workspace, owner_headers):
        resp = await client.put(
            f"/api/v1/workspaces/{workspace.id}",
            json={"vision": "Be useful", "planning_rhythm": "cycles", "cycle_length_weeks": 6},
            headers=owner_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["vision"] == "Be useful"
        assert resp.json()["planning_rhythm"] == "cycles"
        assert resp.json()["name"] == "Acme"

    async def test_editor_cannot_update(self, client, session, workspace):
        editor = await add_user(session)
        await add_member(session, workspace, editor, "editor")
        resp = await client.put(f"/api/v1/workspaces/{workspace.id}", json={"name": "x"}, headers=bearer(editor))
        assert resp.status_code == 403

    async def test_select_switches_active_workspace(self, client, session, owner, workspace, owner_headers):
        other = await add_workspace(session, owner, "Second")
        resp = await client.post(f"/api/v1/workspaces/{other.id}/select", headers=owner_headers)
        assert resp.status_code == 200
        assert resp.cookies.get(get_settings().workspace_cookie) == str(other.id)

        created = (
            await client.post("/api/v1/narratives/", json={"title": "In second"}, headers=owner_headers)
        ).json()
        assert created["workspace_id"] == str(other.id)
