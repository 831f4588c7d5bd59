"""
API v1 Router

Every resource router is scoped to the active workspace resolved from the
session and the `ncts-workspace-id` cookie, except workspaces, onboarding and
invite validation/acceptance, which work from the identity alone.
"""

from fastapi import APIRouter
from . import (
    billing,
    commitments,
    cycles,
    invites,
    kpis,
    members,
    narratives,
    onboarding,
    pillars,
    reports,
    strategy,
    tasks,
    teams,
    workspaces,
)

router = APIRouter()

router.include_router(workspaces.router, prefix="/workspaces", tags=["Workspaces"])
router.include_router(onboarding.router, prefix="/onboarding", tags=["Onboarding"])

# N -> C -> T
router.include_router(narratives.router, prefix="/narratives", tags=["Narratives"])
router.include_router(commitments.router, prefix="/commitments", tags=["Commitments"])
router.include_router(tasks.router, prefix="/tasks", tags=["Tasks"])

# Strategy layer
router.include_router(strategy.router, prefix="/strategy", tags=["Strategy"])
router.include_router(pillars.router, prefix="/pillars", tags=["Pillars"])
router.include_router(kpis.router, prefix="/kpis", tags=["KPIs"])
router.include_router(cycles.router, prefix="/cycles", tags=["Cycles"])
router.include_router(teams.router, prefix="/teams", tags=["Teams"])

# People and billing
router.include_router(members.router, prefix="/members", tags=["Members"])
router.include_router(invites.router, prefix="/invites", tags=["Invites"])
router.include_router(billing.router, tags=["Billing"])

# Reports: /health, /alignment, /nct-tree, /search
router.include_router(reports.router, tags=["Reports"])


@router.get("/", tags=["API"])
async def api_root():
    """API root: version and available endpoints."""
    return {
        "api": "v1",
        "version": "0.1.0",
        "endpoints": [
            "/workspaces",
            "/onboarding",
            "/narratives",
            "/commitments",
            "/tasks",
            "/strategy",
            "/pillars",
            "/kpis",
            "/cycles",
            "/teams",
            "/members",
            "/invites",
            "/subscription",
            "/billing",
            "/health",
            "/alignment",
            "/nct-tree",
            "/search",
        ],
    }
