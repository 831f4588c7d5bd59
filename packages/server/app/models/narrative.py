"""Narrative: the top of the N -> C -> T hierarchy."""

from typing import Optional
import uuid

from sqlmodel import Field

from .base import TimestampMixin, UUIDMixin


class Narrative(UUIDMixin, TimestampMixin, table=True):
    __tablename__ = "narratives"

    workspace_id: uuid.UUID = Field(foreign_key="workspaces.id", index=True, nullable=False)
    owner_id: uuid.UUID = Field(foreign_key="users.id", index=True, nullable=False)
    title: str = Field(nullable=False)
    context: Optional[str] = None
    why_now: Optional[str] = None
    success_looks_like: Optional[str] = None
    status: str = Field(default="draft", nullable=False)  # draft | active | at_risk | completed | archived
    cycle_id: Optional[uuid.UUID] = Field(default=None, foreign_key="cycles.id", index=True)
    team_id: Optional[uuid.UUID] = Field(default=None, foreign_key="teams.id", index=True)
    pillar_id: Optional[uuid.UUID] = Field(default=None, foreign_key="strategic_pillars.id")
