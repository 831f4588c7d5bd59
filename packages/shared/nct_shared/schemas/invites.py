"""Workspace invite schemas."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, UUID4

from .common import Role


class InviteType(str, Enum):
    EMAIL = "email"
    LINK = "link"


class InviteCreate(BaseModel):
    type: InviteType
    email: Optional[EmailStr] = None
    role: Role = Role.EDITOR
    expires_in_days: Optional[int] = Field(default=None, ge=1, le=365)


class InviteRead(BaseModel):
    model_config = {"from_attributes": True}

    id: UUID4
    workspace_id: UUID4
    invited_by: UUID4
    type: InviteType
    email: Optional[str] = None
    role: Role
    code: str
    expires_at: Optional[datetime] = None
    accepted_at: Optional[datetime] = None
    accepted_by: Optional[UUID4] = None
    revoked_at: Optional[datetime] = None
    max_uses: Optional[int] = None
    use_count: int
    created_at: datetime


class InviteCreated(InviteRead):
    invite_url: str


class InviteValidation(BaseModel):
    """Public view of an invite code, shown before the user accepts."""
    valid: bool
    error: Optional[str] = None
    workspace_name: Optional[str] = None
    inviter_name: Optional[str] = None
    role: Optional[Role] = None
    type: Optional[InviteType] = None


class InviteAccept(BaseModel):
    code: str = ""


class InviteAcceptResult(BaseModel):
    workspace_id: UUID4
    already_member: bool
