"""User-Workspace membership with its role."""

import uuid

import sqlalchemy as sa
from sqlmodel import Field

from .base import CreatedAtMixin, UUIDMixin


class WorkspaceMember(UUIDMixin, CreatedAtMixin, table=True):
    __tablename__ = "workspace_members"
    __table_args__ = (sa.UniqueConstraint("workspace_id", "user_id"),)

    workspace_id: uuid.UUID = Field(foreign_key="workspaces.id", index=True, nullable=False)
    user_id: uuid.UUID = Field(foreign_key="users.id", index=True, nullable=False)
    role: str = Field(nullable=False, default="editor")  # owner | admin | editor | viewer
