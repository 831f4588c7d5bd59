"""
Subscription plans and their seat limits.

A limit of -1 means unlimited. Stripe price ids come from settings so each
environment can point at its own Stripe products.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from app.core.config import get_settings
from nct_shared.schemas.billing import BillingInterval, PlanId

UNLIMITED = -1


@dataclass(frozen=True)
class PlanLimits:
    editors: int  # included editor seats (owners and admins count as editors)
    viewers: int
    ai_coach: bool = False
    integrations: bool = False


@dataclass(frozen=True)
class PlanPricing:
    price: int  # EUR per month
    per_editor_price: int = 0


@dataclass(frozen=True)
class PlanConfig:
    id: PlanId
    name: str
    description: str
    limits: PlanLimits
    pricing: dict[BillingInterval, PlanPricing]
    features: list[str] = field(default_factory=list)
    coming_soon: bool = False


PLANS: dict[PlanId, PlanConfig] = {
    PlanId.FREE: PlanConfig(
        id=PlanId.FREE,
        name="Cloud Free",
        description="Everything you need to align your team. Free forever.",
        limits=PlanLimits(editors=1, viewers=3),
        pricing={
            BillingInterval.MONTHLY: PlanPricing(price=0),
            BillingInterval.ANNUAL: PlanPricing(price=0),
        },
        features=[
            "Unlimited narratives, commitments & tasks",
            "Web UI + dashboard",
            "Community support",
        ],
    ),
    PlanId.BUSINESS: PlanConfig(
        id=PlanId.BUSINESS,
        name="Business",
        description="For growing teams. Start with 3 editors.",
        limits=PlanLimits(editors=3, viewers=UNLIMITED),
        pricing={
            BillingInterval.MONTHLY: PlanPricing(price=25, per_editor_price=5),
            BillingInterval.ANNUAL: PlanPricing(price=20, per_editor_price=4),
        },
        features=[
            "Everything in Free",
            "3 Editors included",
            "Unlimited Viewers",
            "Priority support",
        ],
    ),
    PlanId.PRO: PlanConfig(
        id=PlanId.PRO,
        name="Pro",
        description="AI-powered alignment. Coming soon.",
        limits=PlanLimits(editors=UNLIMITED, viewers=UNLIMITED, ai_coach=True, integrations=True),
        pricing={
            BillingInterval.MONTHLY: PlanPricing(price=50),
            BillingInterval.ANNUAL: PlanPricing(price=40),
        },
        features=[
            "Everything in Business",
            "AI Coach",
            "Slack integration",
            "Linear integration",
        ],
        coming_soon=True,
    ),
}

# Plan ids that were renamed; stored subscriptions may still carry them.
LEGACY_PLAN_IDS = {"team": PlanId.BUSINESS}


def find_plan(plan_id: Optional[str]) -> Optional[PlanConfig]:
    """Strict lookup: None for unknown ids."""
    if plan_id is None:
        return None
    if plan_id in LEGACY_PLAN_IDS:
        return PLANS[LEGACY_PLAN_IDS[plan_id]]
    try:
        return PLANS[PlanId(plan_id)]
    except ValueError:
        return None


def get_plan(plan_id: Optional[str]) -> PlanConfig:
    """Lenient lookup used for limits: anything unknown is treated as free."""
    return find_plan(plan_id) or PLANS[PlanId.FREE]


def get_stripe_price_id(plan: PlanConfig, interval: BillingInterval | str) -> Optional[str]:
    if plan.id is not PlanId.BUSINESS:
        return None
    settings = get_settings()
    if BillingInterval(interval) is BillingInterval.ANNUAL:
        return settings.stripe_business_annual_price_id or None
    return settings.stripe_business_monthly_price_id or None


def within_limit(current: int, limit: int) -> bool:
    """True if one more seat fits under `limit`."""
    return limit == UNLIMITED or current < limit
