"""
Transactional email via the Resend HTTP API.

Without an API key every send is skipped with a warning, so local
environments work without email delivery. Delivery failures are logged and
never raised to the caller.
"""

from __future__ import annotations

import html
from typing import Optional

import httpx
import structlog
from fastapi import Request

log = structlog.get_logger()

RESEND_API_URL = "https://api.resend.com/emails"

_LAYOUT = """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"></head>
<body style="margin:0;padding:0;background:#fefdfb;font-family:-apple-system,BlinkMacSystemFont,'Segoe UI',Roboto,sans-serif;">
  <div style="max-width:480px;margin:40px auto;padding:32px;background:#ffffff;border-radius:12px;border:1px solid #e8eaed;">
    <div style="margin-bottom:24px;font-size:18px;font-weight:700;color:#0a0f1c;">ncts.app</div>
    <h1 style="margin:0 0 8px;font-size:20px;font-weight:600;color:#0a0f1c;">{title}</h1>
    <p style="margin:0 0 24px;font-size:14px;color:#6b7280;line-height:1.6;">{body}</p>
    <a href="{url}" style="display:inline-block;padding:10px 24px;background:#0a0f1c;color:#ffffff;text-decoration:none;border-radius:8px;font-size:14px;font-weight:500;">{cta}</a>
    <p style="margin:24px 0 0;font-size:12px;color:#9ca3af;line-height:1.5;">{footer}</p>
  </div>
</body>
</html>"""


class EmailClient:
    def __init__(self, api_key: str, sender: str, *, timeout: float = 10.0):
        self._api_key = api_key
        self._sender = sender
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None

    @property
    def enabled(self) -> bool:
        return bool(self._api_key)

    async def open(self) -> None:
        if self.enabled and self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                headers={"Authorization": f"Bearer {self._api_key}"},
            )

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def send(self, to: str, subject: str, html_body: str) -> bool:
        """Send one email. Returns True when Resend accepted it."""
        if not self.enabled:
            log.warning("email.skipped", reason="resend_api_key_not_set", to=to, subject=subject)
            return False
        await self.open()
        try:
            resp = await self._client.post(
                RESEND_API_URL,
                json={"from": self._sender, "to": [to], "subject": subject, "html": html_body},
            )
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            log.error("email.send_failed", to=to, subject=subject, error=str(exc))
            return False
        log.info("email.sent", to=to, subject=subject)
        return True

    async def send_workspace_invite(
        self,
        to: str,
        *,
        inviter_name: str,
        workspace_name: str,
        role: str,
        invite_url: str,
    ) -> bool:
        body = (
            f"<strong>{html.escape(inviter_name)}</strong> invited you to join "
            f"<strong>{html.escape(workspace_name)}</strong> as a <strong>{html.escape(role)}</strong>."
        )
        return await self.send(
            to,
            f"{inviter_name} invited you to {workspace_name} on ncts.app",
            _LAYOUT.format(
                title="You've been invited",
                body=body,
                url=html.escape(invite_url, quote=True),
                cta="Accept Invite",
                footer="If you weren't expecting this invite, you can safely ignore this email.",
            ),
        )

    async def send_password_reset(self, to: str, *, reset_url: str, name: Optional[str] = None) -> bool:
        greeting = f"Hi {html.escape(name)}, c" if name else "C"
        return await self.send(
            to,
            "Reset your ncts.app password",
            _LAYOUT.format(
                title="Reset your password",
                body=f"{greeting}lick the button below to choose a new password. The link expires soon.",
                url=html.escape(reset_url, quote=True),
                cta="Reset Password",
                footer="If you didn't request a password reset, you can safely ignore this email.",
            ),
        )


def get_email(request: Request) -> EmailClient:
    """FastAPI dependency returning the process-wide email client."""
    return request.app.state.email
