"""Workspace membership schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, UUID4

from .common import Role, UserSummary


class MemberRead(BaseModel):
    id: UUID4
    user_id: UUID4
    role: Role
    created_at: datetime
    user: UserSummary


class MemberRoleUpdate(BaseModel):
    role: Role


class RoleCounts(BaseModel):
    editors: int
    viewers: int
    total: int
