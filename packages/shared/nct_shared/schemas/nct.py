"""Narrative, Commitment and Task schemas (the N -> C -> T hierarchy)."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, UUID4

from .common import NctStatus, TaskStatus


# ---------------------------------------------------------------------------
# Narratives
# ---------------------------------------------------------------------------

class NarrativeCreate(BaseModel):
    title: str = Field(min_length=1, max_length=500)
    context: Optional[str] = None
    why_now: Optional[str] = None
    success_looks_like: Optional[str] = None
    cycle_id: Optional[UUID4] = None
    team_id: Optional[UUID4] = None
    pillar_id: Optional[UUID4] = None


class NarrativeUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=500)
    context: Optional[str] = None
    why_now: Optional[str] = None
    success_looks_like: Optional[str] = None
    status: Optional[NctStatus] = None
    cycle_id: Optional[UUID4] = None
    team_id: Optional[UUID4] = None
    pillar_id: Optional[UUID4] = None


class NarrativeRead(BaseModel):
    model_config = {"from_attributes": True}

    id: UUID4
    workspace_id: UUID4
    owner_id: UUID4
    title: str
    context: Optional[str] = None
    why_now: Optional[str] = None
    success_looks_like: Optional[str] = None
    status: NctStatus
    cycle_id: Optional[UUID4] = None
    team_id: Optional[UUID4] = None
    pillar_id: Optional[UUID4] = None
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# Commitments
# ---------------------------------------------------------------------------

class CommitmentCreate(BaseModel):
    narrative_id: UUID4
    title: str = Field(min_length=1, max_length=500)
    outcome: Optional[str] = None
    key_results: Optional[str] = None
    status: NctStatus = NctStatus.ACTIVE
    due_date: Optional[datetime] = None
    team_id: Optional[UUID4] = None


class CommitmentUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=500)
    outcome: Optional[str] = None
    key_results: Optional[str] = None
    status: Optional[NctStatus] = None
    due_date: Optional[datetime] = None
    team_id: Optional[UUID4] = None


class CommitmentRead(BaseModel):
    model_config = {"from_attributes": True}

    id: UUID4
    workspace_id: UUID4
    narrative_id: UUID4
    owner_id: UUID4
    title: str
    outcome: Optional[str] = None
    key_results: Optional[str] = None
    status: NctStatus
    due_date: Optional[datetime] = None
    team_id: Optional[UUID4] = None
    created_at: datetime
    updated_at: datetime


class CommitmentDetail(CommitmentRead):
    tasks_count: int = 0


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------

class TaskCreate(BaseModel):
    commitment_id: UUID4
    title: str = Field(min_length=1, max_length=500)
    description: Optional[str] = None
    acceptance_criteria: Optional[str] = None
    status: TaskStatus = TaskStatus.TODO
    due_date: Optional[datetime] = None


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=500)
    description: Optional[str] = None
    acceptance_criteria: Optional[str] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[datetime] = None


class TaskRead(BaseModel):
    model_config = {"from_attributes": True}

    id: UUID4
    workspace_id: UUID4
    commitment_id: UUID4
    owner_id: UUID4
    title: str
    description: Optional[str] = None
    acceptance_criteria: Optional[str] = None
    status: TaskStatus
    due_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
