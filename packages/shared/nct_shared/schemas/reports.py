"""Read-only workspace reports: health, alignment, search and the NCT tree."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, UUID4

from .common import CycleStatus, HealthStatus, NctStatus, TaskStatus
from .nct import CommitmentRead, NarrativeRead, TaskRead


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

class HealthStats(BaseModel):
    active_narratives: int = 0
    total_narratives: int = 0
    at_risk_commitments: int = 0
    total_commitments: int = 0
    completed_tasks: int = 0
    total_tasks: int = 0
    orphan_tasks: int = 0
    blocked_tasks: int = 0
    overdue_tasks: int = 0
    on_track_commitments: int = 0
    stale_narratives: int = 0


class HealthReport(BaseModel):
    score: int = Field(ge=0, le=100)
    status: HealthStatus
    issues: List[str] = Field(default_factory=list)
    stats: HealthStats = Field(default_factory=HealthStats)


# ---------------------------------------------------------------------------
# Alignment
# ---------------------------------------------------------------------------

class GapSeverity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


class GapType(str, Enum):
    PILLAR_NO_NARRATIVES = "pillar_no_narratives"
    TEAM_NO_NARRATIVES = "team_no_narratives"
    NARRATIVE_NO_COMMITMENTS = "narrative_no_commitments"
    COMMITMENT_NO_TASKS = "commitment_no_tasks"
    NARRATIVE_NO_PILLAR = "narrative_no_pillar"


class GapAction(BaseModel):
    label: str
    href: str


class AlignmentGap(BaseModel):
    severity: GapSeverity
    type: GapType
    message: str
    action: GapAction
    entity_id: UUID4


class AlignmentReport(BaseModel):
    gaps: List[AlignmentGap] = Field(default_factory=list)
    score: int = Field(ge=0, le=100)


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------

class SearchResults(BaseModel):
    narratives: List[NarrativeRead] = Field(default_factory=list)
    commitments: List[CommitmentRead] = Field(default_factory=list)
    tasks: List[TaskRead] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# NCT tree
# ---------------------------------------------------------------------------

class TaskNode(BaseModel):
    id: UUID4
    title: str
    status: TaskStatus


class CommitmentNode(BaseModel):
    id: UUID4
    title: str
    status: NctStatus
    tasks: List[TaskNode] = Field(default_factory=list)


class NarrativeNode(BaseModel):
    id: UUID4
    title: str
    status: NctStatus
    commitments: List[CommitmentNode] = Field(default_factory=list)


class TeamNode(BaseModel):
    id: UUID4
    name: str
    narratives: List[NarrativeNode] = Field(default_factory=list)


class CycleNode(BaseModel):
    id: UUID4
    name: str
    status: CycleStatus
    start_date: datetime
    end_date: datetime
    teams: List[TeamNode] = Field(default_factory=list)


class YearNode(BaseModel):
    id: UUID4
    year: int
    cycles: List[CycleNode] = Field(default_factory=list)


class WorkspaceRef(BaseModel):
    id: UUID4
    name: str


class NctTree(BaseModel):
    workspace: WorkspaceRef
    strategy: Optional[str] = None
    years: List[YearNode] = Field(default_factory=list)
    uncategorized: Optional[List[NarrativeNode]] = None
