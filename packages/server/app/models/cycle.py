"""Planning cycle within a year."""

from datetime import datetime
import uuid

from sqlmodel import Field

from .base import TimestampMixin, UUIDMixin, timestamp_field


class Cycle(UUIDMixin, TimestampMixin, table=True):
    __tablename__ = "cycles"

    workspace_id: uuid.UUID = Field(foreign_key="workspaces.id", index=True, nullable=False)
    year_id: uuid.UUID = Field(foreign_key="years.id", index=True, nullable=False)
    name: str = Field(nullable=False)
    start_date: datetime = timestamp_field(nullable=False)
    end_date: datetime = timestamp_field(nullable=False)
    status: str = Field(default="planning", nullable=False)  # planning | active | review | archived
