"""Free-preview flag endpoints backed by the ``preview_flags`` table.

The key is derived from the ``X-User-ID`` header when present.  Anonymous
callers are told apart by the client-generated ``X-Anonymous-ID`` header;
without either header nothing can be recorded, so reads report an unused
preview and writes are rejected.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from triage_db.repository import PreviewFlagRepository
from triage_rulesets.preview import anonymous_preview_key, preview_key

from triage_server.dependencies import (
    get_anonymous_id,
    get_db,
    get_optional_user_id,
    get_preview_repository,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/preview-flag", tags=["preview"])


def resolve_preview_key(
    user_id: str | None = Depends(get_optional_user_id),
    anonymous_id: str | None = Depends(get_anonymous_id),
) -> str | None:
    """Storage key for the caller, or None when the caller has no identity."""
    if user_id is not None:
        return preview_key(user_id)
    if anonymous_id is not None:
        return anonymous_preview_key(anonymous_id)
    return None


def _require_key(key: str | None) -> str:
    if key is None:
        raise HTTPException(
            status_code=400,
            detail="X-User-ID or X-Anonymous-ID header is required",
        )
    return key


@router.get("")
async def get_preview_flag(
    key: str | None = Depends(resolve_preview_key),
    db: AsyncSession = Depends(get_db),
    repo: PreviewFlagRepository = Depends(get_preview_repository),
) -> dict:
    if key is None:
        return {"key": preview_key(None), "used": False}
    return {"key": key, "used": await repo.get_flag(db, key)}


@router.put("")
async def mark_preview_used(
    key: str | None = Depends(resolve_preview_key),
    db: AsyncSession = Depends(get_db),
    repo: PreviewFlagRepository = Depends(get_preview_repository),
) -> dict:
    """Record that the free preview has been consumed."""
    key = _require_key(key)
    await repo.set_flag(db, key)
    logger.info("Preview flag set for %s", key)
    return {"key": key, "used": True}


@router.delete("")
async def clear_preview_flag(
    key: str | None = Depends(resolve_preview_key),
    db: AsyncSession = Depends(get_db),
    repo: PreviewFlagRepository = Depends(get_preview_repository),
) -> dict:
    """Remove the flag.  Clearing an unset flag is not an error."""
    key = _require_key(key)
    removed = await repo.clear_flag(db, key)
    if removed:
        logger.info("Preview flag cleared for %s", key)
    return {"key": key, "used": False}
