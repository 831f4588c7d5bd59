"""
Account service: sign-up, credential checks and password resets.

Reset tokens are random URL-safe strings; only their SHA-256 digest is
stored, and each can be used once.
"""

from __future__ import annotations

import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import structlog
from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.auth import hash_password, verify_password
from app.core.config import get_settings
from app.core.email import EmailClient
from app.models.base import as_utc
from app.models.password_reset import PasswordResetToken
from app.models.user import User

log = structlog.get_logger()

MIN_PASSWORD_LENGTH = 8


def _check_password(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=400, detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )


def hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


async def get_user_by_email(session: AsyncSession, email: str) -> Optional[User]:
    result = await session.execute(select(User).where(User.email == email.lower()))
    return result.scalars().first()


async def register_user(session: AsyncSession, name: str, email: str, password: str) -> User:
    if await get_user_by_email(session, email) is not None:
        raise HTTPException(status_code=409, detail="Email already registered")
    _check_password(password)

    user = User(name=name, email=email.lower(), password_hash=hash_password(password))
    session.add(user)
    await session.flush()

    log.info("user.registered", user_id=str(user.id), email=user.email)
    return user


async def authenticate(session: AsyncSession, email: str, password: str) -> User:
    user = await get_user_by_email(session, email)
    if user is None or not user.password_hash:
        log.warning("auth.login_failure", email=email, reason="unknown_user")
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if not verify_password(password, user.password_hash):
        log.warning("auth.login_failure", email=email, reason="bad_password")
        raise HTTPException(status_code=401, detail="Invalid email or password")
    return user


async def request_password_reset(
    session: AsyncSession,
    email: str,
    email_client: EmailClient,
    *,
    now: Optional[datetime] = None,
) -> None:
    """Issue and mail a reset link. Unknown addresses are ignored silently."""
    user = await get_user_by_email(session, email)
    if user is None:
        log.info("auth.reset_requested_unknown", email=email)
        return

    settings = get_settings()
    now = now or datetime.now(timezone.utc)
    token = secrets.token_urlsafe(32)
    session.add(
        PasswordResetToken(
            user_id=user.id,
            token_hash=hash_reset_token(token),
            expires_at=now + timedelta(minutes=settings.password_reset_expire_minutes),
        )
    )
    await session.flush()

    reset_url = f"{settings.app_url.rstrip('/')}/reset-password?token={token}"
    await email_client.send_password_reset(user.email, reset_url=reset_url, name=user.name)
    log.info("auth.reset_requested", user_id=str(user.id))


async def reset_password(
    session: AsyncSession, token: str, password: str, *, now: Optional[datetime] = None
) -> User:
    now = now or datetime.now(timezone.utc)
    result = await session.execute(
        select(PasswordResetToken).where(PasswordResetToken.token_hash == hash_reset_token(token))
    )
    record = result.scalars().first()
    if record is None or record.used_at is not None or as_utc(record.expires_at) < now:
        raise HTTPException(status_code=400, detail="Invalid or expired reset token")
    _check_password(password)

    user = await session.get(User, record.user_id)
    if user is None:
        raise HTTPException(status_code=400, detail="Invalid or expired reset token")

    user.password_hash = hash_password(password)
    record.used_at = now
    session.add_all([user, record])
    await session.flush()

    log.info("auth.password_reset", user_id=str(user.id))
    return user
