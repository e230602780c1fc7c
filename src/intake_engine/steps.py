"""StepPartitioner — groups the catalog into the wizard's page sequence.

Nine question-bearing steps partition the catalog by contiguous id
ranges; two trailing steps (document checklist, consent/signature) hold
no questions.  The partition is checked against the catalog at import
time: every question must belong to exactly one step.
"""

from __future__ import annotations

from typing import Iterator, Sequence

from intake_engine.catalog import CATALOG, CatalogError, QuestionCatalog
from intake_engine.models.step import Step


class StepPartitioner:
    """Ordered, 1-based sequence of :class:`Step` over a catalog."""

    def __init__(self, catalog: QuestionCatalog, steps: Sequence[Step]) -> None:
        self._catalog = catalog
        self._steps: tuple[Step, ...] = tuple(steps)
        self._check()

    def _check(self) -> None:
        owner: dict[int, int] = {}
        for expected, step in enumerate(self._steps, start=1):
            if step.ordinal != expected:
                raise CatalogError(
                    f"Step ordinals must be 1-based and contiguous: expected {expected}, "
                    f"got {step.ordinal}"
                )
            if step.id_range is None:
                continue
            for q in self._catalog.in_range(*step.id_range):
                if q.id in owner:
                    raise CatalogError(
                        f"Question {q.id} belongs to steps {owner[q.id]} and {step.ordinal}"
                    )
                owner[q.id] = step.ordinal
        orphans = [q.id for q in self._catalog if q.id not in owner]
        if orphans:
            raise CatalogError(f"Questions without a step: {orphans}")

    def __len__(self) -> int:
        return len(self._steps)

    def __iter__(self) -> Iterator[Step]:
        return iter(self._steps)

    @property
    def total(self) -> int:
        return len(self._steps)

    @property
    def first(self) -> Step:
        return self._steps[0]

    @property
    def last(self) -> Step:
        return self._steps[-1]

    def is_valid_ordinal(self, ordinal: object) -> bool:
        # bool is an int subclass; a stored `true` is not a step.
        return (
            isinstance(ordinal, int)
            and not isinstance(ordinal, bool)
            and 1 <= ordinal <= len(self._steps)
        )

    def get(self, ordinal: int) -> Step:
        """Return the step at ``ordinal``.  Raises ``KeyError`` if out of range."""
        if not self.is_valid_ordinal(ordinal):
            raise KeyError(f"Step not found: ordinal={ordinal}")
        return self._steps[ordinal - 1]

    def step_for_question(self, question_id: int) -> Step:
        """Return the step that owns ``question_id``.

        Hosts use this to land the client on the right page when an
        error about a question arrives from a later check.
        """
        for step in self._steps:
            if step.owns(question_id):
                return step
        raise KeyError(f"No step owns question {question_id}")

    def progress_percent(self, ordinal: int) -> int:
        """``round(ordinal / (total + 1) * 100)`` with halves rounded up."""
        return int(ordinal * 100 / (len(self._steps) + 1) + 0.5)


STEPS: list[Step] = [
    Step(ordinal=1, title="Identidad", subtitle="Datos legales y pasaporte", id_range=(1, 15)),
    Step(ordinal=2, title="Contacto", subtitle="Dirección y canales de comunicación",
         id_range=(16, 25)),
    Step(ordinal=3, title="Historial EE.UU.", subtitle="Entradas, visas y permanencia",
         id_range=(26, 45)),
    Step(ordinal=4, title="Remoción", subtitle="Deportación y entradas no autorizadas",
         id_range=(46, 65)),
    Step(ordinal=5, title="Historial penal", subtitle="Arrestos, condenas y casos pendientes",
         id_range=(66, 80)),
    Step(ordinal=6, title="Drogas", subtitle="Antecedentes y riesgos relacionados",
         id_range=(81, 90)),
    Step(ordinal=7, title="Laboral", subtitle="Experiencia y disponibilidad temporal",
         id_range=(91, 105)),
    Step(ordinal=8, title="Familia", subtitle="Vínculos familiares en Estados Unidos",
         id_range=(106, 115)),
    Step(ordinal=9, title="Seguridad", subtitle="Declaraciones y veracidad", id_range=(116, 120)),
    Step(ordinal=10, title="Documentos", subtitle="Archivos requeridos para revisión",
         kind="documents"),
    Step(ordinal=11, title="Firma digital", subtitle="Certificación y consentimiento",
         kind="consent"),
]

PARTITION = StepPartitioner(CATALOG, STEPS)

# Ordinal of the security/declarations page (last question-bearing step).
SECURITY_STEP = 9
