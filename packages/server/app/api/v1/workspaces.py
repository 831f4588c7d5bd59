"""
Workspace endpoints.

These take the signed-in identity rather than a resolved workspace context:
they list or address workspaces explicitly by id.
"""

from __future__ import annotations

import uuid
from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import require_identity, set_workspace_cookie
from app.core.database import get_session
from app.core.workspace import Identity
from app.services.workspaces import get_member_workspace, list_workspaces_with_role, update_workspace
from nct_shared.schemas.common import Role
from nct_shared.schemas.workspaces import (
    WorkspaceDetail,
    WorkspaceRead,
    WorkspaceUpdate,
    WorkspaceWithRole,
)

router = APIRouter()


def _detail(workspace, role: str) -> WorkspaceDetail:
    return WorkspaceDetail(**WorkspaceRead.model_validate(workspace).model_dump(), role=Role(role))


@router.get("/", response_model=List[WorkspaceWithRole])
async def list_workspaces(
    identity: Identity = Depends(require_identity),
    session: AsyncSession = Depends(get_session),
):
    """Every workspace the caller belongs to, with their role in it."""
    return await list_workspaces_with_role(session, identity.user.id)


@router.get("/{workspace_id}", response_model=WorkspaceDetail)
async def get_workspace(
    workspace_id: uuid.UUID,
    identity: Identity = Depends(require_identity),
    session: AsyncSession = Depends(get_session),
):
    workspace, membership = await get_member_workspace(session, identity.user.id, workspace_id)
    return _detail(workspace, membership.role)


@router.put("/{workspace_id}", response_model=WorkspaceDetail)
async def put_workspace(
    workspace_id: uuid.UUID,
    body: WorkspaceUpdate,
    identity: Identity = Depends(require_identity),
    session: AsyncSession = Depends(get_session),
):
    workspace, membership = await get_member_workspace(session, identity.user.id, workspace_id)
    workspace = await update_workspace(session, workspace, membership, body)
    await session.commit()
    return _detail(workspace, membership.role)


@router.post("/{workspace_id}/select", response_model=WorkspaceDetail)
async def select_workspace(
    workspace_id: uuid.UUID,
    response: Response,
    identity: Identity = Depends(require_identity),
    session: AsyncSession = Depends(get_session),
):
    """Make `workspace_id` the active workspace for subsequent requests."""
    workspace, membership = await get_member_workspace(session, identity.user.id, workspace_id)
    set_workspace_cookie(response, workspace.id)
    return _detail(workspace, membership.role)
