from enum import Enum
from typing import Optional

from pydantic import BaseModel, UUID4


class Role(str, Enum):
    OWNER = "owner"
    ADMIN = "admin"
    EDITOR = "editor"
    VIEWER = "viewer"


class NctStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    AT_RISK = "at_risk"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    BLOCKED = "blocked"


class PlanningRhythm(str, Enum):
    QUARTERS = "quarters"
    CYCLES = "cycles"
    CUSTOM = "custom"


class CycleStatus(str, Enum):
    PLANNING = "planning"
    ACTIVE = "active"
    REVIEW = "review"
    ARCHIVED = "archived"


class PillarStatus(str, Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    NEEDS_ATTENTION = "needs_attention"
    AT_RISK = "at_risk"


# Display order used by dashboards: live work first, finished work last
NCT_STATUS_ORDER: list["NctStatus"] = [
    NctStatus.ACTIVE,
    NctStatus.AT_RISK,
    NctStatus.DRAFT,
    NctStatus.COMPLETED,
    NctStatus.ARCHIVED,
]


class UserSummary(BaseModel):
    id: UUID4
    name: str
    email: str
    image: Optional[str] = None


class MessageResponse(BaseModel):
    message: str
