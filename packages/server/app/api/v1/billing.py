"""
Subscription and billing endpoints.

Checkout and the customer portal are Stripe-hosted; the webhook keeps the
local `subscriptions` row in sync with Stripe.
"""

from __future__ import annotations

import stripe
import structlog
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import require_admin, require_member
from app.core.billing import BillingClient, get_billing
from app.core.database import get_session
from app.core.workspace import WorkspaceContext
from app.services import billing as svc
from nct_shared.schemas.billing import CheckoutRequest, RedirectUrl, SubscriptionRead, WebhookAck

log = structlog.get_logger()

router = APIRouter()


@router.get("/subscription", response_model=SubscriptionRead)
async def get_subscription(
    ctx: WorkspaceContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    return await svc.get_subscription_summary(session, ctx.workspace_id)


@router.post("/billing/checkout", response_model=RedirectUrl)
async def checkout(
    body: CheckoutRequest,
    ctx: WorkspaceContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
    billing: BillingClient = Depends(get_billing),
):
    url = await svc.start_checkout(session, ctx, body, billing)
    return RedirectUrl(url=url)


@router.post("/billing/portal", response_model=RedirectUrl)
async def portal(
    ctx: WorkspaceContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
    billing: BillingClient = Depends(get_billing),
):
    url = await svc.open_portal(session, ctx, billing)
    return RedirectUrl(url=url)


@router.post("/billing/webhook", response_model=WebhookAck)
async def webhook(
    request: Request,
    session: AsyncSession = Depends(get_session),
    billing: BillingClient = Depends(get_billing),
):
    """Stripe webhook receiver (signature-verified, no session auth)."""
    if not billing.webhook_configured:
        raise HTTPException(status_code=500, detail="Webhook secret not configured")

    signature = request.headers.get("stripe-signature")
    if not signature:
        raise HTTPException(status_code=400, detail="Missing signature")

    payload = await request.body()
    try:
        event = billing.construct_event(payload, signature)
    except (ValueError, stripe.SignatureVerificationError) as e:
        log.warning("billing.webhook_rejected", error=str(e))
        raise HTTPException(status_code=400, detail="Invalid signature")

    log.info("billing.webhook_received", event_type=event["type"], event_id=event.get("id"))
    await svc.handle_webhook_event(session, event, billing)
    await session.commit()
    return WebhookAck()
