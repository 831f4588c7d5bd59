"""KPI attached to a strategic pillar."""

from typing import Optional
import uuid

from sqlmodel import Field

from .base import TimestampMixin, UUIDMixin


class KPI(UUIDMixin, TimestampMixin, table=True):
    __tablename__ = "kpis"

    pillar_id: uuid.UUID = Field(foreign_key="strategic_pillars.id", index=True, nullable=False)
    name: str = Field(nullable=False)
    target_value: str = Field(nullable=False)
    current_value: Optional[str] = None
    unit: Optional[str] = None
