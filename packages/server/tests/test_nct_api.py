"""
Integration tests for Narrative, Commitment and Task endpoints.

Covers:
- Authentication and workspace context (401 cases, cookie refresh)
- CRUD with default statuses and owner stamping
- Viewer / editor / admin authorization including ownership
- Cross-workspace isolation (404, never 403)
- Cascading deletes
- Health report endpoint over real rows
"""

from __future__ import annotations

import uuid

import pytest
from sqlmodel import select

from app.core.config import get_settings
from app.models.commitment import Commitment
from app.models.task import Task

from conftest import add_member, add_user, add_workspace, bearer, use_workspace


@pytest.fixture
async def editor(session, workspace):
    user = await add_user(session, email="ed@example.com", name="Ed Editor")
    await add_member(session, workspace, user, "editor")
    return user


@pytest.fixture
async def viewer(session, workspace):
    user = await add_user(session, email="vi@example.com", name="Vi Viewer")
    await add_member(session, workspace, user, "viewer")
    return user


async def _create_chain(client, headers):
    n = (await client.post("/api/v1/narratives/", json={"title": "Win enterprise"}, headers=headers)).json()
    c = (
        await client.post(
            "/api/v1/commitments/",
            json={"narrative_id": n["id"], "title": "Ship SSO"},
            headers=headers,
        )
    ).json()
    t = (
        await client.post(
            "/api/v1/tasks/",
            json={"commitment_id": c["id"], "title": "SAML metadata"},
            headers=headers,
        )
    ).json()
    return n, c, t


# ---------------------------------------------------------------------------
# Authentication and workspace context
# ---------------------------------------------------------------------------

class TestContext:
    async def test_requires_authentication(self, client):
        resp = await client.get("/api/v1/narratives/")
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Authentication required"

    async def test_invalid_token_is_unauthenticated(self, client):
        resp = await client.get("/api/v1/narratives/", headers={"Authorization": "Bearer garbage"})
        assert resp.status_code == 401

    async def test_revoked_token_is_unauthenticated(self, client, workspace, owner_headers, redis_mock):
        redis_mock.exists.return_value = 1
        resp = await client.get("/api/v1/narratives/", headers=owner_headers)
        assert resp.status_code == 401

    async def test_no_workspace_is_401(self, client, session):
        loner = await add_user(session)
        resp = await client.get("/api/v1/narratives/", headers=bearer(loner))
        assert resp.status_code == 401
        assert resp.json()["detail"] == "No workspace found"

    async def test_resolved_workspace_cookie_is_set(self, client, workspace, owner_headers):
        resp = await client.get("/api/v1/narratives/", headers=owner_headers)
        assert resp.status_code == 200
        assert resp.cookies.get(get_settings().workspace_cookie) == str(workspace.id)

    async def test_matching_cookie_is_not_reset(self, client, workspace, owner_headers):
        use_workspace(client, workspace)
        resp = await client.get("/api/v1/narratives/", headers=owner_headers)
        assert get_settings().workspace_cookie not in resp.headers.get("set-cookie", "")


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------

class TestCrud:
    async def test_create_chain_defaults(self, client, owner, workspace, owner_headers):
        n, c, t = await _create_chain(client, owner_headers)
        assert n["status"] == "active"
        assert n["owner_id"] == str(owner.id)
        assert n["workspace_id"] == str(workspace.id)
        assert c["status"] == "active"
        assert t["status"] == "todo"

        detail = (await client.get(f"/api/v1/commitments/{c['id']}", headers=owner_headers)).json()
        assert detail["tasks_count"] == 1

    async def test_list_filters(self, client, workspace, owner_headers):
        n1, c1, _ = await _create_chain(client, owner_headers)
        await _create_chain(client, owner_headers)

        resp = await client.get(f"/api/v1/commitments/?narrative_id={n1['id']}", headers=owner_headers)
        assert [c["id"] for c in resp.json()] == [c1["id"]]

        resp = await client.get(f"/api/v1/tasks/?commitment_id={c1['id']}", headers=owner_headers)
        assert len(resp.json()) == 1

        resp = await client.get("/api/v1/narratives/", headers=owner_headers)
        assert len(resp.json()) == 2

    async def test_partial_update(self, client, workspace, owner_headers):
        n, _, t = await _create_chain(client, owner_headers)
        resp = await client.put(
            f"/api/v1/narratives/{n['id']}", json={"status": "at_risk"}, headers=owner_headers
        )
        assert resp.status_code == 200
        assert resp.json()["status"] == "at_risk"
        assert resp.json()["title"] == "Win enterprise"

        resp = await client.put(f"/api/v1/tasks/{t['id']}", json={"status": "done"}, headers=owner_headers)
        assert resp.json()["status"] == "done"

    async def test_task_create_keeps_requested_status(self, client, workspace, owner_headers):
        _, c, _ = await _create_chain(client, owner_headers)
        resp = await client.post(
            "/api/v1/tasks/",
            json={"commitment_id": c["id"], "title": "IdP test tenant", "status": "in_progress"},
            headers=owner_headers,
        )
        assert resp.status_code == 201
        assert resp.json()["status"] == "in_progress"

    async def test_commitment_on_unknown_narrative_is_404(self, client, workspace, owner_headers):
        resp = await client.post(
            "/api/v1/commitments/",
            json={"narrative_id": str(uuid.uuid4()), "title": "x"},
            headers=owner_headers,
        )
        assert resp.status_code == 404

    async def test_task_on_unknown_commitment_is_404(self, client, workspace, owner_headers):
        resp = await client.post(
            "/api/v1/tasks/",
            json={"commitment_id": str(uuid.uuid4()), "title": "x"},
            headers=owner_headers,
        )
        assert resp.status_code == 404

    async def test_narrative_with_foreign_team_is_404(self, client, workspace, owner_headers):
        resp = await client.post(
            "/api/v1/narratives/",
            json={"title": "x", "team_id": str(uuid.uuid4())},
            headers=owner_headers,
        )
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Team not found"

    async def test_delete_narrative_cascades(self, client, session, workspace, owner_headers):
        n, c, t = await _create_chain(client, owner_headers)
        resp = await client.delete(f"/api/v1/narratives/{n['id']}", headers=owner_headers)
        assert resp.status_code == 200

        assert (await client.get(f"/api/v1/commitments/{c['id']}", headers=owner_headers)).status_code == 404
        assert (await client.get(f"/api/v1/tasks/{t['id']}", headers=owner_headers)).status_code == 404
        rows = (await session.execute(select(Task).where(Task.id == uuid.UUID(t["id"])))).all()
        assert rows == []

    async def test_delete_commitment_removes_tasks(self, client, session, workspace, owner_headers):
        _, c, _ = await _create_chain(client, owner_headers)
        await client.delete(f"/api/v1/commitments/{c['id']}", headers=owner_headers)
        result = await session.execute(select(Task).where(Task.commitment_id == uuid.UUID(c["id"])))
        assert result.all() == []
        result = await session.execute(select(Commitment).where(Commitment.id == uuid.UUID(c["id"])))
        assert result.all() == []


# ---------------------------------------------------------------------------
# Authorization
# ---------------------------------------------------------------------------

class TestAuthorization:
    async def test_viewer_cannot_create(self, client, workspace, viewer):
        resp = await client.post("/api/v1/narratives/", json={"title": "x"}, headers=bearer(viewer))
        assert resp.status_code == 403
        assert resp.json()["detail"] == "Viewers cannot modify content"

    async def test_viewer_can_read(self, client, workspace, viewer, owner_headers):
        n, _, _ = await _create_chain(client, owner_headers)
        resp = await client.get(f"/api/v1/narratives/{n['id']}", headers=bearer(viewer))
        assert resp.status_code == 200

    async def test_viewer_cannot_update_own_entity(self, client, session, workspace, viewer, owner_headers):
        n, _, _ = await _create_chain(client, owner_headers)
        resp = await client.put(f"/api/v1/narratives/{n['id']}", json={"title": "y"}, headers=bearer(viewer))
        assert resp.status_code == 403

    async def test_editor_modifies_only_own(self, client, workspace, editor, owner_headers):
        theirs, _, _ = await _create_chain(client, owner_headers)
        mine, _, _ = await _create_chain(client, bearer(editor))

        resp = await client.put(f"/api/v1/narratives/{theirs['id']}", json={"title": "y"}, headers=bearer(editor))
        assert resp.status_code == 403
        assert resp.json()["detail"] == "Forbidden"

        resp = await client.put(f"/api/v1/narratives/{mine['id']}", json={"title": "y"}, headers=bearer(editor))
        assert resp.status_code == 200

        resp = await client.delete(f"/api/v1/narratives/{theirs['id']}", headers=bearer(editor))
        assert resp.status_code == 403

    async def test_admin_modifies_anything(self, client, session, workspace, editor):
        admin = await add_user(session)
        await add_member(session, workspace, admin, "admin")
        n, c, t = await _create_chain(client, bearer(editor))

        assert (await client.put(f"/api/v1/tasks/{t['id']}", json={"title": "z"}, headers=bearer(admin))).status_code == 200
        assert (await client.delete(f"/api/v1/narratives/{n['id']}", headers=bearer(admin))).status_code == 200

    async def test_other_workspace_records_are_404(self, client, session, workspace, owner_headers):
        n, c, t = await _create_chain(client, owner_headers)
        stranger = await add_user(session)
        await add_workspace(session, stranger, "Elsewhere")
        headers = bearer(stranger)

        assert (await client.get(f"/api/v1/narratives/{n['id']}", headers=headers)).status_code == 404
        assert (await client.put(f"/api/v1/commitments/{c['id']}", json={"title": "x"}, headers=headers)).status_code == 404
        assert (await client.delete(f"/api/v1/tasks/{t['id']}", headers=headers)).status_code == 404


# ---------------------------------------------------------------------------
# Health report endpoint
# ---------------------------------------------------------------------------

class TestHealthEndpoint:
    async def test_empty_workspace(self, client, workspace, owner_headers):
        resp = await client.get("/api/v1/health", headers=owner_headers)
        assert resp.status_code == 200
        assert resp.json()["score"] == 100
        assert resp.json()["status"] == "healthy"
        assert resp.json()["issues"] == []

    async def test_uncommitted_narrative(self, client, workspace, owner_headers):
        await client.post("/api/v1/narratives/", json={"title": "Lonely"}, headers=owner_headers)
        data = (await client.get("/api/v1/health", headers=owner_headers)).json()
        assert data["score"] == 90
        assert data["issues"] == ["1 narrative without commitments"]
        assert data["stats"]["total_narratives"] == 1
