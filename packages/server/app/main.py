"""
NCT Framework API Server

Entry point for the FastAPI application.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import redis.asyncio as redis

from app.core.billing import BillingClient
from app.core.config import get_settings
from app.core.database import Database, get_database
from app.core.email import EmailClient
from app.core.logging import configure_logging
from app.core.middleware import CSRFMiddleware, SecurityHeadersMiddleware
from app.core.redis import close_redis, create_redis, get_redis
from app.api.v1 import router as api_v1_router
from app.api.v1.auth import router as auth_router

settings = get_settings()
log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the process-wide collaborators and tear them down on exit."""
    app.state.db = Database(settings.database_url, echo=settings.database_echo)
    app.state.redis = create_redis(settings.redis_url)
    app.state.billing = BillingClient(settings.stripe_secret_key, settings.stripe_webhook_secret)
    app.state.email = EmailClient(settings.resend_api_key, settings.email_from)
    await app.state.email.open()

    log.info(
        "nct.starting",
        billing=app.state.billing.configured,
        email=app.state.email.enabled,
    )
    try:
        yield
    finally:
        log.info("nct.shutting_down")
        await app.state.email.close()
        await close_redis(app.state.redis)
        await app.state.db.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging(settings.log_level, settings.log_format)

    app = FastAPI(
        title="NCT Framework",
        description="Narratives, Commitments and Tasks: strategy-to-execution workspaces.",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware (the last one added is outermost)
    app.add_middleware(SecurityHeadersMiddleware, hsts=not settings.debug)
    app.add_middleware(CSRFMiddleware, exempt_paths=("/api/v1/billing/webhook",))
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization", "X-CSRF-Token"],
    )

    # Auth routes (no workspace context)
    app.include_router(auth_router, prefix="/auth", tags=["Authentication"])

    # API routes
    app.include_router(api_v1_router, prefix="/api/v1")

    @app.get("/health", tags=["System"])
    async def health_check():
        """Health check endpoint for liveness probes."""
        return {"status": "ok"}

    @app.get("/ready", tags=["System"])
    async def readiness_check(
        db: Database = Depends(get_database),
        redis_client: redis.Redis = Depends(get_redis),
    ):
        """Readiness check: the database and Redis both answer."""
        try:
            await db.ping()
            await redis_client.ping()
        except Exception as e:
            log.warning("nct.not_ready", error=str(e))
            return JSONResponse(status_code=503, content={"status": "unavailable"})
        return {"status": "ready"}

    return app


app = create_app()
