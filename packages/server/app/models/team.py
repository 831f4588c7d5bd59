"""Team model."""

import uuid

from sqlmodel import Field

from .base import TimestampMixin, UUIDMixin


class Team(UUIDMixin, TimestampMixin, table=True):
    __tablename__ = "teams"

    workspace_id: uuid.UUID = Field(foreign_key="workspaces.id", index=True, nullable=False)
    name: str = Field(nullable=False)
