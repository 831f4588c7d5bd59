"""
Shared fixtures: an in-memory SQLite database, a fresh app with fake
Redis/Stripe/Resend collaborators on `app.state`, and helpers to seed users
and workspaces and to authenticate as them.
"""

from __future__ import annotations

import uuid
from typing import Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import StaticPool

from app.core.auth import create_jwt
from app.core.billing import BillingClient
from app.core.config import get_settings
from app.core.database import Database
from app.core.email import EmailClient
from app.main import create_app
from app.models.user import User
from app.models.workspace import Workspace
from app.models.workspace_member import WorkspaceMember


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------

@pytest.fixture
async def db():
    database = Database(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await database.init_db()
    yield database
    await database.dispose()


@pytest.fixture
async def session(db):
    async with db.session_factory() as s:
        yield s


@pytest.fixture
def redis_mock():
    client = AsyncMock()
    client.exists = AsyncMock(return_value=0)
    client.setex = AsyncMock(return_value=True)
    client.ping = AsyncMock(return_value=True)
    return client


@pytest.fixture
def billing_mock():
    billing = MagicMock(spec=BillingClient)
    billing.configured = True
    billing.webhook_configured = True
    billing.create_checkout_session = AsyncMock(return_value="https://checkout.stripe.test/s/1")
    billing.create_portal_session = AsyncMock(return_value="https://billing.stripe.test/p/1")
    billing.retrieve_subscription = AsyncMock(return_value={"metadata": {}, "cancel_at": None})
    return billing


@pytest.fixture
def email_mock():
    email = MagicMock(spec=EmailClient)
    email.enabled = False
    email.send_workspace_invite = AsyncMock(return_value=True)
    email.send_password_reset = AsyncMock(return_value=True)
    return email


@pytest.fixture
def app(db, redis_mock, billing_mock, email_mock):
    """A fresh app wired to the fakes (lifespan is not run by ASGITransport)."""
    application = create_app()
    application.state.db = db
    application.state.redis = redis_mock
    application.state.billing = billing_mock
    application.state.email = email_mock
    return application


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# ---------------------------------------------------------------------------
# Seeding helpers
# ---------------------------------------------------------------------------

async def add_user(session, email: Optional[str] = None, name: str = "Test User", password_hash: Optional[str] = None) -> User:
    user = User(
        email=email or f"{uuid.uuid4().hex[:8]}@example.com",
        name=name,
        password_hash=password_hash,
    )
    session.add(user)
    await session.commit()
    return user


async def add_workspace(session, owner: User, name: str = "Acme") -> Workspace:
    workspace = Workspace(name=name, planning_rhythm="quarters", created_by=owner.id)
    session.add(workspace)
    await session.flush()
    session.add(WorkspaceMember(workspace_id=workspace.id, user_id=owner.id, role="owner"))
    await session.commit()
    return workspace


async def add_member(session, workspace: Workspace, user: User, role: str) -> WorkspaceMember:
    member = WorkspaceMember(workspace_id=workspace.id, user_id=user.id, role=role)
    session.add(member)
    await session.commit()
    return member


def bearer(user: User) -> dict[str, str]:
    token, _jti = create_jwt(user)
    return {"Authorization": f"Bearer {token}"}


def use_workspace(client: AsyncClient, workspace: Workspace) -> None:
    client.cookies.set(get_settings().workspace_cookie, str(workspace.id))


@pytest.fixture
async def owner(session):
    return await add_user(session, email="owner@example.com", name="Olive Owner")


@pytest.fixture
async def workspace(session, owner):
    return await add_workspace(session, owner)


@pytest.fixture
def owner_headers(owner):
    return bearer(owner)
