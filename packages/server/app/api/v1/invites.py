"""
Invite endpoints.

Admins issue and revoke invites for the active workspace. Validation is
public so the invite landing page can render before sign-in; accepting
needs a signed-in user but no workspace (the invite supplies it).
"""

from __future__ import annotations

import uuid
from typing import List

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import require_admin, require_identity, set_workspace_cookie
from app.core.database import get_session
from app.core.email import EmailClient, get_email
from app.core.workspace import Identity, WorkspaceContext
from app.services import invites as svc
from nct_shared.schemas.invites import (
    InviteAccept,
    InviteAcceptResult,
    InviteCreate,
    InviteCreated,
    InviteRead,
    InviteValidation,
)

router = APIRouter()


@router.get("/", response_model=List[InviteRead])
async def list_invites(
    ctx: WorkspaceContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    return await svc.list_invites(session, ctx.workspace_id)


@router.post("/", response_model=InviteCreated, status_code=201)
async def create_invite(
    body: InviteCreate,
    ctx: WorkspaceContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
    email_client: EmailClient = Depends(get_email),
):
    created = await svc.create_invite(session, ctx, body, email_client)
    await session.commit()
    return created


@router.get("/validate", response_model=InviteValidation)
async def validate_invite(
    code: str = Query(""),
    session: AsyncSession = Depends(get_session),
):
    if not code:
        return JSONResponse(
            status_code=400,
            content=InviteValidation(valid=False, error="Missing code").model_dump(mode="json"),
        )
    return await svc.validate_invite(session, code)


@router.post("/accept", response_model=InviteAcceptResult)
async def accept_invite(
    body: InviteAccept,
    response: Response,
    identity: Identity = Depends(require_identity),
    session: AsyncSession = Depends(get_session),
):
    result = await svc.accept_invite(session, identity, body.code)
    await session.commit()
    set_workspace_cookie(response, result.workspace_id)
    return result


@router.delete("/{invite_id}", response_model=InviteRead)
async def revoke_invite(
    invite_id: uuid.UUID,
    ctx: WorkspaceContext = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    invite = await svc.revoke_invite(session, ctx, invite_id)
    await session.commit()
    return invite
