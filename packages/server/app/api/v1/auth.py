"""
Authentication endpoints.

- Email/password sign-up and login
- JWT session management (session, refresh, logout)
- Password reset by emailed single-use link
"""

from __future__ import annotations

from typing import Optional

import redis.asyncio as redis
import structlog
from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import (
    clear_auth_cookies,
    create_jwt,
    generate_csrf_token,
    get_identity,
    require_identity,
    revoke_jwt,
    set_session_cookies,
)
from app.core.database import get_session
from app.core.email import EmailClient, get_email
from app.core.redis import get_redis
from app.core.workspace import Identity
from app.models.user import User
from app.services import accounts
from nct_shared.schemas.auth import (
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    ResetPasswordRequest,
    SessionRead,
    SessionUser,
    SignupRequest,
)
from nct_shared.schemas.common import MessageResponse

log = structlog.get_logger()
router = APIRouter()


def _start_session(response: Response, user: User) -> None:
    token, _jti = create_jwt(user)
    set_session_cookies(response, token, generate_csrf_token())


# ---------------------------------------------------------------------------
# Email/Password
# ---------------------------------------------------------------------------

@router.post("/signup", response_model=AuthResponse, status_code=201)
async def signup(
    body: SignupRequest,
    response: Response,
    session: AsyncSession = Depends(get_session),
):
    """Create an account and sign it in. Workspaces come later, via onboarding."""
    user = await accounts.register_user(session, body.name, body.email, body.password)
    await session.commit()
    _start_session(response, user)
    return AuthResponse(user_id=user.id, email=user.email, message="Registration successful")


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest,
    response: Response,
    session: AsyncSession = Depends(get_session),
):
    user = await accounts.authenticate(session, body.email, body.password)
    _start_session(response, user)

    log.info("auth.login_success", user_id=str(user.id))
    return AuthResponse(user_id=user.id, email=user.email, message="Login successful")


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    body: ForgotPasswordRequest,
    session: AsyncSession = Depends(get_session),
    email_client: EmailClient = Depends(get_email),
):
    """Always succeeds, so the response never reveals whether an account exists."""
    await accounts.request_password_reset(session, body.email, email_client)
    await session.commit()
    return MessageResponse(message="If that email is registered, a reset link is on its way")


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    body: ResetPasswordRequest,
    session: AsyncSession = Depends(get_session),
):
    await accounts.reset_password(session, body.token, body.password)
    await session.commit()
    return MessageResponse(message="Password updated")


# ---------------------------------------------------------------------------
# Session Management
# ---------------------------------------------------------------------------

@router.get("/session", response_model=SessionRead)
async def current_session(identity: Identity = Depends(require_identity)):
    user = identity.user
    return SessionRead(
        user=SessionUser(id=user.id, email=user.email, name=user.name),
        expires_at=identity.expires_at,
    )


@router.post("/refresh", response_model=MessageResponse)
async def refresh_session(
    response: Response,
    identity: Identity = Depends(require_identity),
    session: AsyncSession = Depends(get_session),
    redis_client: redis.Redis = Depends(get_redis),
):
    """Issue a fresh JWT and revoke the one presented."""
    user = await session.get(User, identity.user.id)
    if user is None:
        raise HTTPException(status_code=401, detail="Authentication required")

    if identity.jti:
        await revoke_jwt(redis_client, identity.jti)
    _start_session(response, user)
    return MessageResponse(message="Session refreshed")


@router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    identity: Optional[Identity] = Depends(get_identity),
    redis_client: redis.Redis = Depends(get_redis),
):
    """Invalidate the current session. Clears cookies even without one."""
    if identity is not None and identity.jti:
        await revoke_jwt(redis_client, identity.jti)
        log.info("auth.logout", user_id=str(identity.user.id))
    clear_auth_cookies(response)
    return MessageResponse(message="Logged out")
