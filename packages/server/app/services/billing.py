"""
Billing service: subscription summary, Stripe checkout/portal sessions and
webhook reconciliation.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

import structlog
from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.billing import BillingClient
from app.core.config import get_settings
from app.core.plans import find_plan, get_plan, get_stripe_price_id
from app.core.workspace import WorkspaceContext, count_workspace_roles
from app.models.base import utcnow
from app.models.subscription import Subscription
from nct_shared.schemas.billing import (
    BillingInterval,
    CheckoutRequest,
    PlanId,
    PlanUsage,
    SubscriptionRead,
    SubscriptionStatus,
)

log = structlog.get_logger()

STRIPE_STATUS_MAP: dict[str, SubscriptionStatus] = {
    "active": SubscriptionStatus.ACTIVE,
    "canceled": SubscriptionStatus.CANCELED,
    "past_due": SubscriptionStatus.PAST_DUE,
    "trialing": SubscriptionStatus.TRIALING,
    "incomplete": SubscriptionStatus.INCOMPLETE,
    "incomplete_expired": SubscriptionStatus.INCOMPLETE,
}


def map_stripe_status(status: Optional[str]) -> SubscriptionStatus:
    """Collapse Stripe's subscription statuses onto ours; unknown ones count as active."""
    return STRIPE_STATUS_MAP.get(status or "", SubscriptionStatus.ACTIVE)


def period_end(stripe_subscription: Mapping[str, Any]) -> Optional[datetime]:
    """End of the paid period.

    Recent Stripe API versions no longer expose `current_period_end` on the
    subscription, so `cancel_at` is the only end date available; a renewing
    subscription has none.
    """
    cancel_at = stripe_subscription.get("cancel_at")
    if cancel_at:
        return datetime.fromtimestamp(cancel_at, tz=timezone.utc)
    return None


def billing_url() -> str:
    return f"{get_settings().app_url.rstrip('/')}/dashboard/settings?tab=billing"


async def get_subscription_row(session: AsyncSession, workspace_id: uuid.UUID) -> Optional[Subscription]:
    result = await session.execute(select(Subscription).where(Subscription.workspace_id == workspace_id))
    return result.scalars().first()


async def get_subscription_summary(session: AsyncSession, workspace_id: uuid.UUID) -> SubscriptionRead:
    sub = await get_subscription_row(session, workspace_id)
    plan = get_plan(sub.plan if sub else None)
    counts = await count_workspace_roles(session, workspace_id)
    usage = PlanUsage(
        editors=counts["editors"],
        viewers=counts["viewers"],
        editor_limit=plan.limits.editors,
        viewer_limit=plan.limits.viewers,
    )
    if sub is None:
        return SubscriptionRead(
            plan=PlanId.FREE,
            billing_interval=BillingInterval.MONTHLY,
            status=SubscriptionStatus.ACTIVE,
            usage=usage,
        )
    return SubscriptionRead(
        plan=plan.id,
        billing_interval=BillingInterval(sub.billing_interval),
        status=SubscriptionStatus(sub.status),
        current_period_end=sub.current_period_end,
        cancel_at_period_end=sub.cancel_at_period_end,
        has_stripe_subscription=bool(sub.stripe_subscription_id),
        usage=usage,
    )


async def start_checkout(
    session: AsyncSession,
    ctx: WorkspaceContext,
    req: CheckoutRequest,
    billing: BillingClient,
) -> str:
    plan = find_plan(req.plan_id)
    if plan is None or plan.coming_soon:
        raise HTTPException(status_code=400, detail="Invalid plan")

    price_id = get_stripe_price_id(plan, req.interval)
    if not price_id:
        raise HTTPException(status_code=400, detail="No price configured for this plan/interval")

    metadata = {
        "workspaceId": str(ctx.workspace_id),
        "planId": plan.id.value,
        "billingInterval": req.interval.value,
    }
    params: dict[str, Any] = {
        "mode": "subscription",
        "line_items": [{"price": price_id, "quantity": 1}],
        "success_url": f"{billing_url()}&success=true",
        "cancel_url": billing_url(),
        "metadata": metadata,
        "subscription_data": {"metadata": dict(metadata)},
    }

    existing = await get_subscription_row(session, ctx.workspace_id)
    if existing and existing.stripe_customer_id:
        params["customer"] = existing.stripe_customer_id
    else:
        params["customer_email"] = ctx.identity.user.email

    url = await billing.create_checkout_session(params)
    log.info("billing.checkout_started", workspace_id=str(ctx.workspace_id), plan=plan.id.value)
    return url


async def open_portal(session: AsyncSession, ctx: WorkspaceContext, billing: BillingClient) -> str:
    sub = await get_subscription_row(session, ctx.workspace_id)
    if sub is None or not sub.stripe_customer_id:
        raise HTTPException(status_code=404, detail="No subscription found")
    return await billing.create_portal_session(sub.stripe_customer_id, billing_url())


# ---------------------------------------------------------------------------
# Webhook reconciliation
# ---------------------------------------------------------------------------

def _workspace_id(metadata: Optional[Mapping[str, Any]]) -> Optional[uuid.UUID]:
    raw = (metadata or {}).get("workspaceId")
    if not raw:
        return None
    try:
        return uuid.UUID(str(raw))
    except ValueError:
        return None


async def _on_checkout_completed(session: AsyncSession, obj: Mapping[str, Any], billing: BillingClient) -> None:
    metadata = obj.get("metadata") or {}
    workspace_id = _workspace_id(metadata)
    plan_id = metadata.get("planId")
    if workspace_id is None or not plan_id:
        return

    interval = metadata.get("billingInterval") or BillingInterval.MONTHLY.value
    customer_id = obj.get("customer")
    subscription_id = obj.get("subscription")
    stripe_sub = await billing.retrieve_subscription(subscription_id)

    sub = await get_subscription_row(session, workspace_id)
    if sub is None:
        sub = Subscription(workspace_id=workspace_id, stripe_customer_id=customer_id)
    sub.stripe_customer_id = customer_id
    sub.stripe_subscription_id = subscription_id
    sub.plan = plan_id
    sub.billing_interval = interval
    sub.status = SubscriptionStatus.ACTIVE.value
    sub.current_period_end = period_end(stripe_sub)
    sub.cancel_at_period_end = bool(stripe_sub.get("cancel_at_period_end"))
    sub.updated_at = utcnow()
    session.add(sub)
    await session.flush()

    log.info("billing.subscription_activated", workspace_id=str(workspace_id), plan=plan_id, interval=interval)


async def _on_subscription_updated(session: AsyncSession, obj: Mapping[str, Any]) -> None:
    metadata = obj.get("metadata") or {}
    workspace_id = _workspace_id(metadata)
    if workspace_id is None:
        return
    sub = await get_subscription_row(session, workspace_id)
    if sub is None:
        return

    sub.plan = metadata.get("planId") or PlanId.FREE.value
    sub.status = map_stripe_status(obj.get("status")).value
    sub.current_period_end = period_end(obj)
    sub.cancel_at_period_end = bool(obj.get("cancel_at_period_end"))
    sub.updated_at = utcnow()
    session.add(sub)
    await session.flush()

    log.info("billing.subscription_updated", workspace_id=str(workspace_id), plan=sub.plan, status=sub.status)


async def _on_subscription_deleted(session: AsyncSession, obj: Mapping[str, Any]) -> None:
    workspace_id = _workspace_id(obj.get("metadata"))
    if workspace_id is None:
        return
    sub = await get_subscription_row(session, workspace_id)
    if sub is None:
        return

    sub.plan = PlanId.FREE.value
    sub.status = SubscriptionStatus.CANCELED.value
    sub.cancel_at_period_end = False
    sub.updated_at = utcnow()
    session.add(sub)
    await session.flush()

    log.info("billing.subscription_canceled", workspace_id=str(workspace_id))


async def handle_webhook_event(session: AsyncSession, event: Mapping[str, Any], billing: BillingClient) -> None:
    """Apply one verified Stripe event to our subscription records."""
    event_type = event["type"]
    obj = event["data"]["object"]

    if event_type == "checkout.session.completed":
        await _on_checkout_completed(session, obj, billing)
    elif event_type == "customer.subscription.updated":
        await _on_subscription_updated(session, obj)
    elif event_type == "customer.subscription.deleted":
        await _on_subscription_deleted(session, obj)
    else:
        log.debug("billing.webhook_ignored", event_type=event_type)
