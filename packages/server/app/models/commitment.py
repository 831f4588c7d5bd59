"""Commitment: a measurable promise under a narrative."""

from datetime import datetime
from typing import Optional
import uuid

from sqlmodel import Field

from .base import TimestampMixin, UUIDMixin, timestamp_field


class Commitment(UUIDMixin, TimestampMixin, table=True):
    __tablename__ = "commitments"

    workspace_id: uuid.UUID = Field(foreign_key="workspaces.id", index=True, nullable=False)
    narrative_id: uuid.UUID = Field(foreign_key="narratives.id", index=True, nullable=False)
    owner_id: uuid.UUID = Field(foreign_key="users.id", index=True, nullable=False)
    title: str = Field(nullable=False)
    outcome: Optional[str] = None
    key_results: Optional[str] = None
    status: str = Field(default="draft", nullable=False)
    due_date: Optional[datetime] = timestamp_field(default=None, nullable=True)
    team_id: Optional[uuid.UUID] = Field(default=None, foreign_key="teams.id")
