"""Billing subscription (one per workspace)."""

from datetime import datetime
from typing import Optional
import uuid

from sqlmodel import Field

from .base import TimestampMixin, UUIDMixin, timestamp_field


class Subscription(UUIDMixin, TimestampMixin, table=True):
    __tablename__ = "subscriptions"

    workspace_id: uuid.UUID = Field(foreign_key="workspaces.id", unique=True, index=True, nullable=False)
    stripe_customer_id: str = Field(nullable=False)
    stripe_subscription_id: Optional[str] = None
    plan: str = Field(default="free", nullable=False)  # free | business | pro
    billing_interval: str = Field(default="monthly", nullable=False)  # monthly | annual
    status: str = Field(default="active", nullable=False)
    current_period_end: Optional[datetime] = timestamp_field(default=None, nullable=True)
    cancel_at_period_end: bool = Field(default=False, nullable=False)
