"""
Tests for workspace invites.

Covers:
- Issuing email and link invites (email delivery, admin-only roles)
- Seat limits per plan
- Public validation of codes
- Accepting: membership creation, email binding, single use,
  already-member, owner downgrade
- Revocation
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlmodel import select

from app.core.config import get_settings
from app.models.subscription import Subscription
from app.models.workspace_invite import WorkspaceInvite
from app.models.workspace_member import WorkspaceMember
from app.services.invites import invite_problem

from conftest import add_member, add_user, bearer


@pytest.fixture
async def business_plan(session, workspace):
    sub = Subscription(workspace_id=workspace.id, stripe_customer_id="cus_123", plan="business")
    session.add(sub)
    await session.commit()
    return sub


async def _invite(client, headers, **body):
    body.setdefault("type", "link")
    body.setdefault("role", "viewer")
    resp = await client.post("/api/v1/invites/", json=body, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


# ---------------------------------------------------------------------------
# Issuing
# ---------------------------------------------------------------------------

class TestCreateInvite:
    async def test_email_invite_is_sent(self, client, workspace, owner_headers, business_plan, email_mock):
        data = await _invite(client, owner_headers, type="email", email="New@Example.com", role="editor")
        assert data["email"] == "new@example.com"
        assert data["max_uses"] == 1
        assert data["use_count"] == 0
        assert data["invite_url"].endswith(f"/invite/{data['code']}")

        email_mock.send_workspace_invite.assert_awaited_once()
        args, kwargs = email_mock.send_workspace_invite.call_args
        assert args[0] == "new@example.com"
        assert kwargs["workspace_name"] == "Acme"
        assert kwargs["inviter_name"] == "Olive Owner"

    async def test_link_invite_has_no_use_cap(self, client, workspace, owner_headers, email_mock):
        data = await _invite(client, owner_headers)
        assert data["max_uses"] is None
        assert data["expires_at"] is None
        email_mock.send_workspace_invite.assert_not_awaited()

    async def test_expiry_window(self, client, workspace, owner_headers):
        data = await _invite(client, owner_headers, expires_in_days=7)
        assert data["expires_at"] is not None

    async def test_email_required_for_email_invites(self, client, workspace, owner_headers):
        resp = await client.post("/api/v1/invites/", json={"type": "email"}, headers=owner_headers)
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Email required for email invites"

    async def test_owner_role_is_rejected(self, client, workspace, owner_headers):
        resp = await client.post("/api/v1/invites/", json={"type": "link", "role": "owner"}, headers=owner_headers)
        assert resp.status_code == 400

    async def test_only_owner_invites_admins(self, client, session, workspace, business_plan):
        admin = await add_user(session)
        await add_member(session, workspace, admin, "admin")
        resp = await client.post("/api/v1/invites/", json={"type": "link", "role": "admin"}, headers=bearer(admin))
        assert resp.status_code == 403
        assert resp.json()["detail"] == "Only the owner can invite admins"

    async def test_editors_cannot_invite(self, client, session, workspace):
        editor = await add_user(session)
        await add_member(session, workspace, editor, "editor")
        resp = await client.post("/api/v1/invites/", json={"type": "link"}, headers=bearer(editor))
        assert resp.status_code == 403


class TestSeatLimits:
    async def test_free_plan_editor_seat_is_taken_by_owner(self, client, workspace, owner_headers):
        resp = await client.post("/api/v1/invites/", json={"type": "link", "role": "editor"}, headers=owner_headers)
        assert resp.status_code == 403
        assert resp.json()["detail"].startswith("Editor limit reached")

    async def test_free_plan_viewer_limit(self, client, session, workspace, owner_headers):
        for _ in range(3):
            await add_member(session, workspace, await add_user(session), "viewer")
        resp = await client.post("/api/v1/invites/", json={"type": "link", "role": "viewer"}, headers=owner_headers)
        assert resp.status_code == 403
        assert resp.json()["detail"].startswith("Viewer limit reached")

    async def test_business_plan_allows_more_editors(self, client, workspace, owner_headers, business_plan):
        await _invite(client, owner_headers, role="editor")

    async def test_legacy_team_plan_counts_as_business(self, client, session, workspace, owner_headers):
        session.add(Subscription(workspace_id=workspace.id, stripe_customer_id="cus_1", plan="team"))
        await session.commit()
        await _invite(client, owner_headers, role="editor")


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

class TestValidateInvite:
    async def test_valid_code(self, client, workspace, owner_headers):
        data = await _invite(client, owner_headers)
        resp = await client.get(f"/api/v1/invites/validate?code={data['code']}")
        assert resp.status_code == 200
        assert resp.json() == {
            "valid": True,
            "error": None,
            "workspace_name": "Acme",
            "inviter_name": "Olive Owner",
            "role": "viewer",
            "type": "link",
        }

    async def test_missing_code(self, client):
        resp = await client.get("/api/v1/invites/validate")
        assert resp.status_code == 400
        assert resp.json()["valid"] is False
        assert resp.json()["error"] == "Missing code"

    async def test_unknown_code(self, client):
        resp = await client.get("/api/v1/invites/validate?code=nope")
        assert resp.json() == {
            "valid": False,
            "error": "Invite not found",
            "workspace_name": None,
            "inviter_name": None,
            "role": None,
            "type": None,
        }

    async def test_revoked_code(self, client, workspace, owner_headers):
        data = await _invite(client, owner_headers)
        await client.delete(f"/api/v1/invites/{data['id']}", headers=owner_headers)
        resp = await client.get(f"/api/v1/invites/validate?code={data['code']}")
        assert resp.json()["error"] == "Invite has been revoked"


class TestInviteProblem:
    NOW = datetime(2026, 6, 1, tzinfo=timezone.utc)

    def _invite(self, **kw):
        return WorkspaceInvite(code="c", type="link", role="viewer", use_count=0, **kw)

    def test_usable(self):
        assert invite_problem(self._invite(), self.NOW) is None

    def test_expired(self):
        invite = self._invite(expires_at=self.NOW - timedelta(seconds=1))
        assert invite_problem(invite, self.NOW) == "Invite has expired"

    def test_used_up(self):
        invite = self._invite(max_uses=1)
        invite.use_count = 1
        assert invite_problem(invite, self.NOW) == "Invite has reached max uses"

    def test_revocation_wins(self):
        invite = self._invite(revoked_at=self.NOW, expires_at=self.NOW - timedelta(days=1))
        assert invite_problem(invite, self.NOW) == "Invite has been revoked"


# ---------------------------------------------------------------------------
# Accepting
# ---------------------------------------------------------------------------

class TestAcceptInvite:
    async def test_accept_link_invite(self, client, session, workspace, owner_headers):
        data = await _invite(client, owner_headers)
        guest = await add_user(session, email="guest@example.com")

        resp = await client.post("/api/v1/invites/accept", json={"code": data["code"]}, headers=bearer(guest))
        assert resp.status_code == 200
        assert resp.json() == {"workspace_id": str(workspace.id), "already_member": False}
        assert resp.cookies.get(get_settings().workspace_cookie) == str(workspace.id)

        result = await session.execute(
            select(WorkspaceMember).where(
                WorkspaceMember.workspace_id == workspace.id, WorkspaceMember.user_id == guest.id
            )
        )
        assert result.scalars().one().role == "viewer"

    async def test_requires_sign_in(self, client, workspace, owner_headers):
        data = await _invite(client, owner_headers)
        resp = await client.post("/api/v1/invites/accept", json={"code": data["code"]})
        assert resp.status_code == 401

    async def test_missing_code(self, client, session):
        guest = await add_user(session)
        resp = await client.post("/api/v1/invites/accept", json={}, headers=bearer(guest))
        assert resp.status_code == 400

    async def test_unknown_code(self, client, session):
        guest = await add_user(session)
        resp = await client.post("/api/v1/invites/accept", json={"code": "nope"}, headers=bearer(guest))
        assert resp.status_code == 404

    async def test_email_invite_is_bound_to_address(self, client, session, workspace, owner_headers, business_plan):
        data = await _invite(client, owner_headers, type="email", email="right@example.com", role="editor")
        wrong = await add_user(session, email="wrong@example.com")
        resp = await client.post("/api/v1/invites/accept", json={"code": data["code"]}, headers=bearer(wrong))
        assert resp.status_code == 403
        assert resp.json()["detail"] == "This invite was sent to a different email address"

    async def test_email_invite_is_single_use(self, client, session, workspace, owner_headers, business_plan):
        data = await _invite(client, owner_headers, type="email", email="right@example.com", role="editor")
        right = await add_user(session, email="RIGHT@example.com")

        first = await client.post("/api/v1/invites/accept", json={"code": data["code"]}, headers=bearer(right))
        assert first.status_code == 200

        other = await add_user(session, email="right2@example.com")
        second = await client.post("/api/v1/invites/accept", json={"code": data["code"]}, headers=bearer(other))
        assert second.status_code == 400
        assert second.json()["detail"] == "Invite has reached max uses"

    async def test_existing_member_is_not_duplicated(self, client, session, workspace, owner_headers):
        data = await _invite(client, owner_headers)
        resp = await client.post("/api/v1/invites/accept", json={"code": data["code"]}, headers=owner_headers)
        assert resp.json()["already_member"] is True

        invite = await session.get(WorkspaceInvite, uuid.UUID(data["id"]))
        await session.refresh(invite)
        assert invite.use_count == 0

    async def test_owner_role_is_downgraded_to_editor(self, client, session, workspace, owner):
        session.add(
            WorkspaceInvite(
                workspace_id=workspace.id, invited_by=owner.id, type="link",
                role="owner", code="legacy-owner", use_count=0,
            )
        )
        await session.commit()
        guest = await add_user(session)

        resp = await client.post("/api/v1/invites/accept", json={"code": "legacy-owner"}, headers=bearer(guest))
        assert resp.status_code == 200
        result = await session.execute(select(WorkspaceMember.role).where(WorkspaceMember.user_id == guest.id))
        assert result.scalars().one() == "editor"


class TestRevokeInvite:
    async def test_revoked_invites_are_hidden(self, client, workspace, owner_headers):
        data = await _invite(client, owner_headers)
        resp = await client.delete(f"/api/v1/invites/{data['id']}", headers=owner_headers)
        assert resp.status_code == 200
        assert resp.json()["revoked_at"] is not None

        listed = (await client.get("/api/v1/invites/", headers=owner_headers)).json()
        assert listed == []
