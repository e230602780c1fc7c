"""Reference data endpoints — the page sequence and the question catalog.

Read-only and identity-free: the catalog is compiled into the engine.
"""

from fastapi import APIRouter, Depends

from intake_engine.catalog import QuestionCatalog
from intake_engine.steps import StepPartitioner

from intake_server.dependencies import get_catalog, get_partition

router = APIRouter(prefix="/reference", tags=["reference"])


@router.get("/steps")
def list_steps(
    partition: StepPartitioner = Depends(get_partition),
) -> list[dict]:
    """Return every page with its question-id range (``None`` for structural pages)."""
    return [
        {
            "ordinal": step.ordinal,
            "title": step.title,
            "subtitle": step.subtitle,
            "kind": step.kind,
            "id_range": list(step.id_range) if step.id_range else None,
        }
        for step in partition
    ]


@router.get("/questions")
def list_questions(
    catalog: QuestionCatalog = Depends(get_catalog),
) -> list[dict]:
    """Return the full question catalog, including visibility predicates."""
    return [q.model_dump(mode="json") for q in catalog]
