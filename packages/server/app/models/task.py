"""Task: a unit of execution under a commitment."""

from datetime import datetime
from typing import Optional
import uuid

from sqlmodel import Field

from .base import TimestampMixin, UUIDMixin, timestamp_field


class Task(UUIDMixin, TimestampMixin, table=True):
    __tablename__ = "tasks"

    workspace_id: uuid.UUID = Field(foreign_key="workspaces.id", index=True, nullable=False)
    commitment_id: uuid.UUID = Field(foreign_key="commitments.id", index=True, nullable=False)
    owner_id: uuid.UUID = Field(foreign_key="users.id", index=True, nullable=False)
    title: str = Field(nullable=False)
    description: Optional[str] = None
    acceptance_criteria: Optional[str] = None
    status: str = Field(default="todo", nullable=False)  # todo | in_progress | done | blocked
    due_date: Optional[datetime] = timestamp_field(default=None, nullable=True)
