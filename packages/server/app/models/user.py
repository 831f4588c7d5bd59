"""User model (global; memberships carry the per-workspace role)."""

from typing import Optional

from sqlmodel import Field

from .base import TimestampMixin, UUIDMixin


class User(UUIDMixin, TimestampMixin, table=True):
    __tablename__ = "users"

    name: str = Field(nullable=False)
    email: str = Field(unique=True, index=True, nullable=False)
    email_verified: bool = Field(default=False, nullable=False)
    image: Optional[str] = None
    password_hash: Optional[str] = None
