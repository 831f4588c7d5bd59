"""
Read-only reports over the active workspace: health score, alignment gaps,
the NCT tree and title search.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import require_member
from app.core.database import get_session
from app.core.workspace import WorkspaceContext
from app.services import reports
from app.services.health import load_health_snapshot, score_workspace
from nct_shared.schemas.reports import AlignmentReport, HealthReport, NctTree, SearchResults

router = APIRouter()


@router.get("/health", response_model=HealthReport)
async def workspace_health(
    ctx: WorkspaceContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    narratives, commitments, tasks, pillars = await load_health_snapshot(session, ctx.workspace_id)
    return score_workspace(narratives, commitments, tasks, pillars)


@router.get("/alignment", response_model=AlignmentReport)
async def alignment(
    ctx: WorkspaceContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    return await reports.load_alignment(session, ctx.workspace_id)


@router.get("/nct-tree", response_model=NctTree, response_model_exclude_unset=True)
async def nct_tree(
    ctx: WorkspaceContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    return await reports.load_nct_tree(session, ctx.workspace)


@router.get("/search", response_model=SearchResults)
async def search(
    q: str = Query(""),
    ctx: WorkspaceContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    return await reports.search(session, ctx.workspace_id, q)
