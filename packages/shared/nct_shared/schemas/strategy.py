"""Strategy layer schemas: years, cycles, pillars and KPIs."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, UUID4, model_validator

from .common import CycleStatus, PillarStatus


# ---------------------------------------------------------------------------
# Cycles
# ---------------------------------------------------------------------------

class CycleCreate(BaseModel):
    year_id: UUID4
    name: str = Field(min_length=1, max_length=255)
    start_date: datetime
    end_date: datetime

    @model_validator(mode="after")
    def _check_range(self) -> "CycleCreate":
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


class CycleUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: Optional[CycleStatus] = None


class CycleRead(BaseModel):
    model_config = {"from_attributes": True}

    id: UUID4
    workspace_id: UUID4
    year_id: UUID4
    name: str
    start_date: datetime
    end_date: datetime
    status: CycleStatus
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# KPIs
# ---------------------------------------------------------------------------

class KpiCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    target_value: str = Field(min_length=1)
    current_value: Optional[str] = None
    unit: Optional[str] = None


class KpiUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    target_value: Optional[str] = Field(default=None, min_length=1)
    current_value: Optional[str] = None
    unit: Optional[str] = None


class KpiRead(BaseModel):
    model_config = {"from_attributes": True}

    id: UUID4
    pillar_id: UUID4
    name: str
    target_value: str
    current_value: Optional[str] = None
    unit: Optional[str] = None
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# Pillars
# ---------------------------------------------------------------------------

class PillarCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    year_id: Optional[UUID4] = None
    kpi: Optional[KpiCreate] = None


class PillarUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    order: Optional[int] = None
    status: Optional[PillarStatus] = None


class PillarRead(BaseModel):
    model_config = {"from_attributes": True}

    id: UUID4
    workspace_id: UUID4
    year_id: UUID4
    title: str
    description: Optional[str] = None
    order: int
    status: PillarStatus
    created_at: datetime
    updated_at: datetime


class PillarDetail(PillarRead):
    kpis: List[KpiRead] = Field(default_factory=list)
    narrative_count: int = 0


# ---------------------------------------------------------------------------
# Strategy overview
# ---------------------------------------------------------------------------

class StrategyRead(BaseModel):
    vision: Optional[str] = None
    strategy_doc_url: Optional[str] = None
    pillars: List[PillarDetail] = Field(default_factory=list)


class StrategyUpdate(BaseModel):
    vision: Optional[str] = None
    strategy_doc_url: Optional[str] = None
