"""
Helpers shared by the resource services: workspace-scoped lookups and
partial updates.
"""

from __future__ import annotations

import uuid
from enum import Enum
from typing import Any, Iterable, Optional, Type, TypeVar

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from app.models.base import utcnow

M = TypeVar("M", bound=SQLModel)


async def get_scoped_or_404(
    session: AsyncSession,
    model: Type[M],
    entity_id: uuid.UUID,
    workspace_id: uuid.UUID,
    label: str,
) -> M:
    """Fetch `entity_id` if it belongs to `workspace_id`.

    Records of other workspaces are reported exactly like missing ones.
    """
    obj = await session.get(model, entity_id)
    if obj is None or obj.workspace_id != workspace_id:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return obj


async def ensure_in_workspace(
    session: AsyncSession,
    model: Type[M],
    entity_id: Optional[uuid.UUID],
    workspace_id: uuid.UUID,
    label: str,
) -> None:
    """Validate an optional foreign reference supplied by the client."""
    if entity_id is not None:
        await get_scoped_or_404(session, model, entity_id, workspace_id, label)


def apply_updates(obj: SQLModel, data: dict[str, Any], required: Iterable[str] = ()) -> list[str]:
    """Copy explicitly-sent fields onto `obj`.

    A null for a field in `required` means "leave unchanged"; for any other
    field it clears the value. Returns the names of the fields written.
    """
    required = set(required)
    changed = []
    for key, value in data.items():
        if value is None and key in required:
            continue
        if isinstance(value, Enum):
            value = value.value
        if hasattr(obj, key):
            setattr(obj, key, value)
            changed.append(key)
    if changed and hasattr(obj, "updated_at"):
        obj.updated_at = utcnow()
    return changed
