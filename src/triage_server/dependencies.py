"""FastAPI dependency injection — provides DB sessions, store, orchestrator and user identity.

Each request that touches the database gets a fresh ``AsyncSession`` via
``get_db()``.  The session is committed on success and rolled back on
error; the repository never commits itself.
"""

import hmac
from typing import AsyncGenerator

from fastapi import Header, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from triage_db.engine import get_session_factory
from triage_db.repository import PreviewFlagRepository
from triage_rulesets.orchestrator import GuidanceOrchestrator
from triage_rulesets.ruleset import TemplateStore

from triage_server.config import ServerSettings


# ------------------------------------------------------------------
# Database session: transaction boundary lives here
# ------------------------------------------------------------------

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async DB session; commit on success, rollback on error."""
    factory = get_session_factory()
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_preview_repository() -> PreviewFlagRepository:
    return PreviewFlagRepository()


# ------------------------------------------------------------------
# Shared singletons: stashed on app.state during lifespan
# ------------------------------------------------------------------

def get_settings(request: Request) -> ServerSettings:
    return request.app.state.settings


def get_store(request: Request) -> TemplateStore:
    """Return the TemplateStore singleton from ``app.state``."""
    return request.app.state.store


def get_orchestrator(request: Request) -> GuidanceOrchestrator:
    """Return the GuidanceOrchestrator singleton from ``app.state``."""
    return request.app.state.orchestrator


# ------------------------------------------------------------------
# User identity: optional X-User-ID header
# ------------------------------------------------------------------

async def get_optional_user_id(
    request: Request,
    x_user_id: str | None = Header(None, alias="X-User-ID"),
    x_proxy_secret: str | None = Header(None, alias="X-Proxy-Secret"),
) -> str | None:
    """Extract user identity from the ``X-User-ID`` header, if present.

    Anonymous callers get ``None``.  When ``TRUSTED_PROXY_SECRET`` is configured, a request
    carrying ``X-User-ID`` must also carry a matching ``X-Proxy-Secret``.
    """
    if not x_user_id:
        return None

    expected_secret: str | None = request.app.state.settings.trusted_proxy_secret
    if expected_secret:
        if not x_proxy_secret:
            raise HTTPException(
                status_code=403,
                detail="X-Proxy-Secret header is required",
            )
        # Constant-time comparison to prevent timing side-channels.
        if not hmac.compare_digest(x_proxy_secret, expected_secret):
            raise HTTPException(status_code=403, detail="Invalid proxy secret")

    return x_user_id


async def get_anonymous_id(
    x_anonymous_id: str | None = Header(None, alias="X-Anonymous-ID", max_length=128),
) -> str | None:
    """Client-generated id that scopes an anonymous caller's preview flag."""
    return x_anonymous_id or None
