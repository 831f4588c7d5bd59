"""
Security middleware: CSRF protection for cookie sessions and response
security headers.
"""

from __future__ import annotations

import secrets
from typing import Iterable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.core.config import get_settings

log = structlog.get_logger()

SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})
CSRF_HEADER = "X-CSRF-Token"

# ---------------------------------------------------------------------------
# Security Headers
# ---------------------------------------------------------------------------

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "0",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=(), payment=()",
    "Content-Security-Policy": (
        "default-src 'self'; "
        "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
        "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
        "img-src 'self' data: https://fastapi.tiangolo.com; "
        "connect-src 'self' https://api.stripe.com; "
        "form-action 'self' https://checkout.stripe.com https://billing.stripe.com; "
        "frame-ancestors 'none';"
    ),
}

HSTS_HEADER = ("Strict-Transport-Security", "max-age=63072000; includeSubDomains; preload")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Attach security headers to every response.

    HSTS is only sent when `hsts` is set; local HTTP development turns it off.
    """

    def __init__(self, app, hsts: bool = True):
        super().__init__(app)
        self.headers = dict(SECURITY_HEADERS)
        if hsts:
            self.headers[HSTS_HEADER[0]] = HSTS_HEADER[1]

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        for header, value in self.headers.items():
            response.headers.setdefault(header, value)
        return response


# ---------------------------------------------------------------------------
# CSRF Protection (Double-Submit Cookie)
# ---------------------------------------------------------------------------

def csrf_rejection() -> JSONResponse:
    return JSONResponse(
        status_code=403,
        content={
            "error": {
                "code": "CSRF_VALIDATION_FAILED",
                "message": "Invalid or missing CSRF token.",
                "status": 403,
            }
        },
    )


class CSRFMiddleware(BaseHTTPMiddleware):
    """
    Double-submit cookie CSRF protection for browser sessions.

    A state-changing request carrying the session cookie must echo the CSRF
    cookie in the X-CSRF-Token header. Not checked for:
    - Safe HTTP methods (GET, HEAD, OPTIONS)
    - Requests with an Authorization header (bearer clients don't use cookies)
    - Requests without a session cookie (signup, login)
    - `exempt_paths` (signature-verified webhooks)
    """

    def __init__(
        self,
        app,
        session_cookie: str | None = None,
        csrf_cookie: str | None = None,
        exempt_paths: Iterable[str] = (),
    ):
        super().__init__(app)
        settings = get_settings()
        self.session_cookie = session_cookie or settings.session_cookie
        self.csrf_cookie = csrf_cookie or settings.csrf_cookie
        self.exempt_paths = frozenset(exempt_paths)

    def _needs_check(self, request: Request) -> bool:
        if request.method in SAFE_METHODS or request.url.path in self.exempt_paths:
            return False
        if request.headers.get("Authorization"):
            return False
        return self.session_cookie in request.cookies

    async def dispatch(self, request: Request, call_next) -> Response:
        if not self._needs_check(request):
            return await call_next(request)

        cookie_token = request.cookies.get(self.csrf_cookie) or ""
        header_token = request.headers.get(CSRF_HEADER) or ""
        if not cookie_token or not secrets.compare_digest(cookie_token, header_token):
            log.warning("csrf.rejected", path=request.url.path, method=request.method)
            return csrf_rejection()

        return await call_next(request)
