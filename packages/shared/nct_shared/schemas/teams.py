"""Team schemas, including the per-team dashboard."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, UUID4

from .common import NctStatus, UserSummary


class TeamCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)


class TeamRead(BaseModel):
    model_config = {"from_attributes": True}

    id: UUID4
    workspace_id: UUID4
    name: str
    created_at: datetime
    updated_at: datetime


class TeamMemberAdd(BaseModel):
    user_id: UUID4


class TeamMemberRead(BaseModel):
    id: UUID4
    user_id: UUID4
    created_at: datetime
    user: UserSummary


class TeamStats(BaseModel):
    total_narratives: int = 0
    active_narratives: int = 0
    draft_narratives: int = 0
    at_risk_narratives: int = 0
    completed_narratives: int = 0
    total_commitments: int = 0
    active_commitments: int = 0
    at_risk_commitments: int = 0
    completed_commitments: int = 0
    total_tasks: int = 0
    completed_tasks: int = 0
    in_progress_tasks: int = 0
    overdue_tasks: int = 0
    blocked_tasks: int = 0


class TeamNarrativeSummary(BaseModel):
    id: UUID4
    title: str
    status: NctStatus
    cycle_id: Optional[UUID4] = None
    commitment_count: int
    task_count: int
    tasks_done: int


class TeamRef(BaseModel):
    id: UUID4
    name: str


class TeamDashboard(BaseModel):
    team: TeamRef
    stats: TeamStats
    narratives: List[TeamNarrativeSummary]
    members: List[TeamMemberRead]
