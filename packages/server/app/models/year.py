"""Planning year."""

import uuid

from sqlmodel import Field

from .base import CreatedAtMixin, UUIDMixin


class Year(UUIDMixin, CreatedAtMixin, table=True):
    __tablename__ = "years"

    workspace_id: uuid.UUID = Field(foreign_key="workspaces.id", index=True, nullable=False)
    year: int = Field(nullable=False)
