"""Workspace model: the tenant boundary."""

from typing import Optional
import uuid

from sqlmodel import Field

from .base import TimestampMixin, UUIDMixin


class Workspace(UUIDMixin, TimestampMixin, table=True):
    __tablename__ = "workspaces"

    name: str = Field(nullable=False)
    vision: Optional[str] = None
    strategy_doc_url: Optional[str] = None
    planning_rhythm: str = Field(default="quarters", nullable=False)  # quarters | cycles | custom
    cycle_length_weeks: Optional[int] = None
    created_by: uuid.UUID = Field(foreign_key="users.id", nullable=False)
