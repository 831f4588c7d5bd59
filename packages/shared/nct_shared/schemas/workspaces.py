"""Workspace and onboarding schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, UUID4

from .common import PlanningRhythm, Role


class WorkspaceRead(BaseModel):
    model_config = {"from_attributes": True}

    id: UUID4
    name: str
    vision: Optional[str] = None
    strategy_doc_url: Optional[str] = None
    planning_rhythm: PlanningRhythm
    cycle_length_weeks: Optional[int] = None
    created_by: UUID4
    created_at: datetime
    updated_at: datetime


class WorkspaceWithRole(BaseModel):
    id: UUID4
    name: str
    role: Role
    joined_at: datetime


class WorkspaceDetail(WorkspaceRead):
    role: Role


class WorkspaceUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    vision: Optional[str] = None
    strategy_doc_url: Optional[str] = None
    planning_rhythm: Optional[PlanningRhythm] = None
    cycle_length_weeks: Optional[int] = Field(default=None, ge=1, le=52)


# ---------------------------------------------------------------------------
# Onboarding
# ---------------------------------------------------------------------------

class OnboardingRequest(BaseModel):
    """Body for POST /onboarding: creates the caller's first workspace."""
    name: str = Field(min_length=1, max_length=255)
    vision: Optional[str] = None
    strategy_doc_url: Optional[str] = None
    planning_rhythm: PlanningRhythm = PlanningRhythm.QUARTERS
    cycle_length_weeks: Optional[int] = Field(default=None, ge=1, le=52)
    teams: List[str] = Field(default_factory=list)


class OnboardingResult(BaseModel):
    workspace_id: UUID4
    year_id: UUID4
    cycle_id: UUID4
    team_ids: List[UUID4]


class OnboardingStatus(BaseModel):
    needs_onboarding: bool
    workspace_id: Optional[UUID4] = None
