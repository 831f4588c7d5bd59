"""
Stripe billing client.

One `BillingClient` is built in the app lifespan and handed to routes through
`get_billing`. It exposes only the four Stripe calls the API needs.
"""

from __future__ import annotations

from typing import Any, Optional

import stripe
import structlog
from fastapi import HTTPException, Request

log = structlog.get_logger()


class BillingClient:
    """Thin async wrapper around `stripe.StripeClient`."""

    def __init__(self, secret_key: str, webhook_secret: str = ""):
        self._webhook_secret = webhook_secret
        self._client: Optional[stripe.StripeClient] = None
        if secret_key:
            self._client = stripe.StripeClient(secret_key, http_client=stripe.HTTPXClient())

    @property
    def configured(self) -> bool:
        return self._client is not None

    @property
    def webhook_configured(self) -> bool:
        return bool(self._webhook_secret)

    def _require_client(self) -> stripe.StripeClient:
        if self._client is None:
            raise HTTPException(status_code=503, detail="Billing is not configured")
        return self._client

    async def create_checkout_session(self, params: dict[str, Any]) -> str:
        """Create a Checkout session and return its hosted URL."""
        session = await self._require_client().checkout.sessions.create_async(params=params)
        return session.url

    async def create_portal_session(self, customer_id: str, return_url: str) -> str:
        session = await self._require_client().billing_portal.sessions.create_async(
            params={"customer": customer_id, "return_url": return_url}
        )
        return session.url

    async def retrieve_subscription(self, subscription_id: str) -> Any:
        return await self._require_client().subscriptions.retrieve_async(subscription_id)

    def construct_event(self, payload: bytes, signature: str) -> Any:
        """Verify a webhook signature and parse the event.

        Raises ValueError for a malformed payload and
        stripe.SignatureVerificationError for a bad signature.
        """
        return stripe.Webhook.construct_event(payload, signature, self._webhook_secret)


def get_billing(request: Request) -> BillingClient:
    """FastAPI dependency returning the process-wide billing client."""
    return request.app.state.billing
