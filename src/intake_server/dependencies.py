"""FastAPI dependency injection — DB sessions, repositories, catalog and caller identity.

Repositories ``flush()`` but never ``commit()``; ``get_db()`` is the single
place where a request's transaction is committed or rolled back.
"""

import hmac
from typing import AsyncGenerator

from fastapi import Header, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from intake_db.engine import get_session_factory
from intake_db.repository import DraftRepository, SubmissionRepository
from intake_engine.catalog import QuestionCatalog
from intake_engine.steps import StepPartitioner


# ------------------------------------------------------------------
# Database session (the transaction boundary)
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


# ------------------------------------------------------------------
# Singletons stashed on app.state during lifespan
# ------------------------------------------------------------------

def get_catalog(request: Request) -> QuestionCatalog:
    return request.app.state.catalog


def get_partition(request: Request) -> StepPartitioner:
    return request.app.state.partition


def get_draft_repository(request: Request) -> DraftRepository:
    return request.app.state.draft_repo


def get_submission_repository(request: Request) -> SubmissionRepository:
    return request.app.state.submission_repo


# ------------------------------------------------------------------
# Caller identity: X-User-ID scopes the draft storage
# ------------------------------------------------------------------

async def get_user_id(
    request: Request,
    x_user_id: str | None = Header(None, alias="X-User-ID"),
    x_proxy_secret: str | None = Header(None, alias="X-Proxy-Secret"),
) -> str:
    """Return the caller's client id; 401 when missing.

    When ``TRUSTED_PROXY_SECRET`` is configured the request must also
    carry a matching ``X-Proxy-Secret`` header (403 otherwise).
    """
    if not x_user_id:
        raise HTTPException(status_code=401, detail="X-User-ID header is required")

    expected_secret: str | None = request.app.state.settings.trusted_proxy_secret
    if expected_secret:
        if not x_proxy_secret:
            raise HTTPException(status_code=403, detail="X-Proxy-Secret header is required")
        if not hmac.compare_digest(x_proxy_secret, expected_secret):
            raise HTTPException(status_code=403, detail="Invalid proxy secret")

    return x_user_id
