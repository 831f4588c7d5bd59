"""Strategic pillar for a planning year."""

from typing import Optional
import uuid

from sqlmodel import Field

from .base import TimestampMixin, UUIDMixin


class StrategicPillar(UUIDMixin, TimestampMixin, table=True):
    __tablename__ = "strategic_pillars"

    workspace_id: uuid.UUID = Field(foreign_key="workspaces.id", index=True, nullable=False)
    year_id: uuid.UUID = Field(foreign_key="years.id", nullable=False)
    title: str = Field(nullable=False)
    description: Optional[str] = None
    order: int = Field(default=0, nullable=False)
    status: str = Field(default="active", nullable=False)  # active | archived
