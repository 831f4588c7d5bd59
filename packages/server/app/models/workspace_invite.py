"""Workspace invites (email or shareable link)."""

from datetime import datetime
from typing import Optional
import uuid

from sqlmodel import Field

from .base import CreatedAtMixin, UUIDMixin, timestamp_field


class WorkspaceInvite(UUIDMixin, CreatedAtMixin, table=True):
    __tablename__ = "workspace_invites"

    workspace_id: uuid.UUID = Field(foreign_key="workspaces.id", index=True, nullable=False)
    invited_by: uuid.UUID = Field(foreign_key="users.id", nullable=False)
    type: str = Field(nullable=False)  # email | link
    email: Optional[str] = None
    role: str = Field(nullable=False, default="editor")
    code: str = Field(unique=True, index=True, nullable=False)
    expires_at: Optional[datetime] = timestamp_field(default=None, nullable=True)
    accepted_at: Optional[datetime] = timestamp_field(default=None, nullable=True)
    accepted_by: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id")
    revoked_at: Optional[datetime] = timestamp_field(default=None, nullable=True)
    max_uses: Optional[int] = None
    use_count: int = Field(default=0, nullable=False)
