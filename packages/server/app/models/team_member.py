"""Team membership (join table)."""

import uuid

import sqlalchemy as sa
from sqlmodel import Field

from .base import CreatedAtMixin, UUIDMixin


class TeamMember(UUIDMixin, CreatedAtMixin, table=True):
    __tablename__ = "team_members"
    __table_args__ = (sa.UniqueConstraint("team_id", "user_id"),)

    team_id: uuid.UUID = Field(foreign_key="teams.id", index=True, nullable=False)
    user_id: uuid.UUID = Field(foreign_key="users.id", index=True, nullable=False)
