"""
Authentication and authorization for the NCT API.

Supports:
- Email/password accounts (bcrypt)
- JWT sessions (cookie or Bearer header) with a Redis revocation list
- Workspace context resolution from the active-workspace cookie
- Role-based authorization dependencies
"""

from __future__ import annotations

import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
import redis.asyncio as redis
import structlog
from fastapi import Depends, HTTPException, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.database import get_session
from app.core.permissions import can_edit, is_admin_or_owner
from app.core.redis import get_redis
from app.core.workspace import Identity, SessionUser, WorkspaceContext, resolve_workspace
from app.models.user import User

log = structlog.get_logger()
settings = get_settings()

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------

def hash_password(password: str) -> str:
    """Hash a password using bcrypt with cost factor 12."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=12)).decode()


def verify_password(password: str, hashed: str) -> bool:
    """Verify a password against a bcrypt hash."""
    return bcrypt.checkpw(password.encode(), hashed.encode())


# ---------------------------------------------------------------------------
# JWT
# ---------------------------------------------------------------------------

def create_jwt(
    user: User,
    *,
    expires_delta: timedelta | None = None,
) -> tuple[str, str]:
    """Create a signed session JWT for `user`. Returns (token, jti)."""
    jti = str(uuid.uuid4())
    now = datetime.now(timezone.utc)
    exp = now + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    payload = {
        "sub": str(user.id),
        "email": user.email,
        "name": user.name,
        "iat": now,
        "exp": exp,
        "jti": jti,
    }
    token = jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)
    return token, jti


def decode_jwt(token: str) -> dict:
    """Decode and verify a JWT. Raises jwt.PyJWTError on failure."""
    return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])


def identity_from_claims(payload: dict) -> Identity:
    return Identity(
        user=SessionUser(
            id=uuid.UUID(payload["sub"]),
            email=payload.get("email", ""),
            name=payload.get("name", ""),
        ),
        jti=payload.get("jti"),
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    )


# ---------------------------------------------------------------------------
# JWT Revocation (Redis)
# ---------------------------------------------------------------------------

async def revoke_jwt(client: redis.Redis, jti: str, ttl_seconds: int | None = None) -> None:
    """Add a JWT ID to the revocation list in Redis."""
    ttl = ttl_seconds or settings.jwt_expire_minutes * 60
    await client.setex(f"jwt:revoked:{jti}", ttl, "1")


async def is_jwt_revoked(client: redis.Redis, jti: str) -> bool:
    """Check if a JWT ID has been revoked."""
    return await client.exists(f"jwt:revoked:{jti}") > 0


# ---------------------------------------------------------------------------
# CSRF token and cookies
# ---------------------------------------------------------------------------

def generate_csrf_token() -> str:
    """Generate a random CSRF token."""
    return secrets.token_urlsafe(32)


def set_session_cookies(response: Response, token: str, csrf: str) -> None:
    """Set the session JWT and CSRF cookies on a response."""
    max_age = settings.jwt_expire_minutes * 60
    response.set_cookie(
        key=settings.session_cookie,
        value=token,
        httponly=True,
        secure=not settings.debug,  # allow non-HTTPS in dev
        samesite="lax",
        path="/",
        max_age=max_age,
    )
    response.set_cookie(
        key=settings.csrf_cookie,
        value=csrf,
        httponly=False,  # JS must read this
        secure=not settings.debug,
        samesite="lax",
        path="/",
        max_age=max_age,
    )


def set_workspace_cookie(response: Response, workspace_id: uuid.UUID) -> None:
    """Persist the active workspace; the client may read it to render the switcher."""
    response.set_cookie(
        key=settings.workspace_cookie,
        value=str(workspace_id),
        httponly=False,
        samesite="lax",
        path="/",
        max_age=settings.workspace_cookie_max_age,
    )


def clear_auth_cookies(response: Response) -> None:
    for name in (settings.session_cookie, settings.csrf_cookie, settings.workspace_cookie):
        response.delete_cookie(name, path="/")


# ---------------------------------------------------------------------------
# Authentication dependencies
# ---------------------------------------------------------------------------

def _read_token(request: Request) -> Optional[str]:
    authorization = request.headers.get("Authorization")
    if authorization and authorization.startswith("Bearer "):
        return authorization[7:].strip() or None
    return request.cookies.get(settings.session_cookie)


async def get_identity(
    request: Request,
    redis_client: redis.Redis = Depends(get_redis),
) -> Optional[Identity]:
    """Return the caller's session, or None when there is no valid one."""
    token = _read_token(request)
    if not token:
        return None

    try:
        payload = decode_jwt(token)
        identity = identity_from_claims(payload)
    except (jwt.PyJWTError, KeyError, ValueError):
        log.info("auth.invalid_token")
        return None

    if identity.jti and await is_jwt_revoked(redis_client, identity.jti):
        log.info("auth.revoked_token", user_id=str(identity.user.id))
        return None

    request.state.identity = identity
    return identity


async def require_identity(
    identity: Optional[Identity] = Depends(get_identity),
) -> Identity:
    """Any signed-in user."""
    if identity is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return identity


async def get_workspace_context(
    request: Request,
    response: Response,
    identity: Identity = Depends(require_identity),
    session: AsyncSession = Depends(get_session),
) -> WorkspaceContext:
    """Resolve the active workspace and refresh the cookie when it changed."""
    preferred = request.cookies.get(settings.workspace_cookie)
    ctx = await resolve_workspace(session, identity, preferred)
    if ctx is None:
        raise HTTPException(status_code=401, detail="No workspace found")

    if preferred != str(ctx.workspace_id):
        set_workspace_cookie(response, ctx.workspace_id)
    request.state.workspace = ctx
    return ctx


# ---------------------------------------------------------------------------
# Authorization dependencies (role checks)
# ---------------------------------------------------------------------------

async def require_member(
    ctx: WorkspaceContext = Depends(get_workspace_context),
) -> WorkspaceContext:
    """Any workspace member can access this endpoint."""
    return ctx


async def require_editor(
    ctx: WorkspaceContext = Depends(get_workspace_context),
) -> WorkspaceContext:
    """Requires editor rank or above."""
    if not can_edit(ctx.role):
        raise HTTPException(status_code=403, detail="Viewers cannot modify content")
    return ctx


async def require_admin(
    ctx: WorkspaceContext = Depends(get_workspace_context),
) -> WorkspaceContext:
    """Requires admin or owner role."""
    if not is_admin_or_owner(ctx.role):
        raise HTTPException(status_code=403, detail="Forbidden")
    return ctx
