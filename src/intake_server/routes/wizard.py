"""Wizard endpoints — one intake session per client.

Every request rebuilds a :class:`WizardController` over an in-memory
key-value store preloaded from ``intake_drafts``; whatever the controller
changed is written back before the response is built.  The controller
itself stays synchronous with respect to storage.

``POST /wizard/next`` on the last step and ``POST /wizard/submit`` both
score the case and store it through :class:`DatabaseSubmissionSink`; both
accept the signature in their body.  Requests for the same client are
serialised by the draft repository's lock, so a repeated submit restores
the state the first one left and is refused.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from intake_db.repository import DraftRepository, SubmissionRepository
from intake_db.sink import DatabaseSubmissionSink
from intake_engine.catalog import QuestionCatalog
from intake_engine.controller import WizardController
from intake_engine.drafts import DraftPersistence
from intake_engine.models.draft import FileMeta
from intake_engine.models.session import StepView, WizardStatus
from intake_engine.steps import StepPartitioner

from intake_server.dependencies import (
    get_catalog,
    get_db,
    get_draft_repository,
    get_partition,
    get_submission_repository,
    get_user_id,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/wizard", tags=["wizard"])


# ------------------------------------------------------------------
# Request models
# ------------------------------------------------------------------

class SetAnswerRequest(BaseModel):
    key: str
    value: str


class ConsentRequest(BaseModel):
    granted: bool


class SubmitRequest(BaseModel):
    """Body for POST /wizard/submit (optional on POST /wizard/next).

    ``signature`` is the opaque encoded image from the signature pad.
    Signatures are never drafted, so it must accompany every attempt.
    """
    signature: Optional[str] = None


# ------------------------------------------------------------------
# Per-request wizard
# ------------------------------------------------------------------

class _WizardDeps:
    """Bundles what it takes to rebuild a client's wizard."""

    def __init__(
        self,
        user_id: str = Depends(get_user_id),
        db: AsyncSession = Depends(get_db),
        draft_repo: DraftRepository = Depends(get_draft_repository),
        submission_repo: SubmissionRepository = Depends(get_submission_repository),
        catalog: QuestionCatalog = Depends(get_catalog),
        partition: StepPartitioner = Depends(get_partition),
    ) -> None:
        self.user_id = user_id
        self.db = db
        self.draft_repo = draft_repo
        self.submission_repo = submission_repo
        self.catalog = catalog
        self.partition = partition


@asynccontextmanager
async def open_wizard(deps: _WizardDeps) -> AsyncIterator[WizardController]:
    """Restore the client's wizard and write its draft changes back on exit.

    Nothing is written back if the body raises.
    """
    store = await deps.draft_repo.load_store(deps.db, deps.user_id)
    wizard = WizardController(
        DraftPersistence(store, deps.partition),
        DatabaseSubmissionSink(deps.db, deps.submission_repo),
        catalog=deps.catalog,
        partition=deps.partition,
    )
    yield wizard
    written = await deps.draft_repo.flush_store(deps.db, deps.user_id, store)
    if written:
        logger.debug("Flushed %d draft keys for client=%s", written, deps.user_id)


def _render(wizard: WizardController) -> StepView:
    """Return the view, or 502 when the sink rejected the case."""
    if wizard.status == WizardStatus.FAILED:
        raise HTTPException(status_code=502, detail=wizard.failure_reason)
    return wizard.view()


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.get("")
async def get_wizard(deps: _WizardDeps = Depends()) -> StepView:
    """Return the current step, restoring the saved draft if any."""
    async with open_wizard(deps) as wizard:
        return wizard.view()


@router.put("/answers")
async def set_answer(body: SetAnswerRequest, deps: _WizardDeps = Depends()) -> StepView:
    """Record one answer; the current step does not change."""
    async with open_wizard(deps) as wizard:
        wizard.set_answer(body.key, body.value)
    return wizard.view()


@router.put("/documents/{slot}")
async def attach_document(
    slot: str,
    meta: Optional[FileMeta] = Body(None),
    deps: _WizardDeps = Depends(),
) -> StepView:
    """Set the metadata of a document slot; an empty body clears it."""
    async with open_wizard(deps) as wizard:
        wizard.attach_document(slot, meta)
    return wizard.view()


@router.put("/consent")
async def set_consent(body: ConsentRequest, deps: _WizardDeps = Depends()) -> StepView:
    async with open_wizard(deps) as wizard:
        wizard.set_consent(body.granted)
    return wizard.view()


@router.post("/next")
async def next_step(
    body: Optional[SubmitRequest] = Body(None),
    deps: _WizardDeps = Depends(),
) -> StepView:
    """Validate the current step and advance.

    A validation failure is part of the returned view (200).  On the last
    step this submits the case, signed with ``body.signature`` when given;
    a rejected submission answers 502.
    """
    async with open_wizard(deps) as wizard:
        if body is not None and body.signature:
            wizard.set_signature(body.signature)
        await wizard.next()
    return _render(wizard)


@router.post("/back")
async def previous_step(deps: _WizardDeps = Depends()) -> StepView:
    async with open_wizard(deps) as wizard:
        wizard.back()
    return wizard.view()


@router.post("/submit")
async def submit(body: SubmitRequest, deps: _WizardDeps = Depends()) -> StepView:
    """Validate everything on the last step, score, and store the case.

    Responses:
      - 200 with the view carrying the analysis
      - 422 with the blocking validation error
      - 502 when the case could not be stored (draft kept for retry)
    """
    async with open_wizard(deps) as wizard:
        wizard.set_signature(body.signature)
        status = await wizard.submit()

    if status == WizardStatus.STEP and wizard.validation_error is not None:
        raise HTTPException(
            status_code=422,
            detail=wizard.validation_error.model_dump(),
        )
    return _render(wizard)


@router.delete("")
async def reset_wizard(deps: _WizardDeps = Depends()) -> StepView:
    """Discard the client's draft and start over."""
    async with open_wizard(deps) as wizard:
        wizard.reset()
    return wizard.view()
