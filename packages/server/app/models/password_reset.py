"""Single-use password reset tokens (only the SHA-256 digest is stored)."""

from datetime import datetime
from typing import Optional
import uuid

from sqlmodel import Field

from .base import CreatedAtMixin, UUIDMixin, timestamp_field


class PasswordResetToken(UUIDMixin, CreatedAtMixin, table=True):
    __tablename__ = "password_reset_tokens"

    user_id: uuid.UUID = Field(foreign_key="users.id", index=True, nullable=False)
    token_hash: str = Field(unique=True, index=True, nullable=False)
    expires_at: datetime = timestamp_field(nullable=False)
    used_at: Optional[datetime] = timestamp_field(default=None, nullable=True)
