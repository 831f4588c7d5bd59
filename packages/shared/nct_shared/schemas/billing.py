"""Plan, subscription and checkout schemas."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class PlanId(str, Enum):
    FREE = "free"
    BUSINESS = "business"
    PRO = "pro"


class BillingInterval(str, Enum):
    MONTHLY = "monthly"
    ANNUAL = "annual"


class SubscriptionStatus(str, Enum):
    ACTIVE = "active"
    CANCELED = "canceled"
    PAST_DUE = "past_due"
    TRIALING = "trialing"
    INCOMPLETE = "incomplete"


class PlanUsage(BaseModel):
    editors: int
    viewers: int
    editor_limit: int
    viewer_limit: int


class SubscriptionRead(BaseModel):
    plan: PlanId
    billing_interval: BillingInterval
    status: SubscriptionStatus
    current_period_end: Optional[datetime] = None
    cancel_at_period_end: bool = False
    has_stripe_subscription: bool = False
    usage: PlanUsage


class CheckoutRequest(BaseModel):
    plan_id: str
    interval: BillingInterval = BillingInterval.MONTHLY


class RedirectUrl(BaseModel):
    url: str


class WebhookAck(BaseModel):
    received: bool = True
