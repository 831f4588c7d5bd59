"""Onboarding: creating a signed-in user's first workspace."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import require_identity, set_workspace_cookie
from app.core.database import get_session
from app.core.workspace import Identity
from app.services.workspaces import first_workspace_id, onboard_workspace
from nct_shared.schemas.workspaces import OnboardingRequest, OnboardingResult, OnboardingStatus

router = APIRouter()


@router.post("/", response_model=OnboardingResult, status_code=201)
async def onboard(
    body: OnboardingRequest,
    response: Response,
    identity: Identity = Depends(require_identity),
    session: AsyncSession = Depends(get_session),
):
    result = await onboard_workspace(session, identity.user.id, body)
    await session.commit()
    set_workspace_cookie(response, result.workspace_id)
    return result


@router.get("/status", response_model=OnboardingStatus)
async def onboarding_status(
    identity: Identity = Depends(require_identity),
    session: AsyncSession = Depends(get_session),
):
    workspace_id = await first_workspace_id(session, identity.user.id)
    return OnboardingStatus(needs_onboarding=workspace_id is None, workspace_id=workspace_id)
