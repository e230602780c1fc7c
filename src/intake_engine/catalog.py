"""QuestionCatalog — the fixed, ordered registry of intake questions.

The catalog is assembled once at import time from the literals below and
is immutable afterwards.  Assembly validates the structural invariants
the rest of the engine relies on:

  - ids are dense and strictly increasing from 1
  - keys are unique
  - every visibility clause references an existing question with a
    strictly smaller id (no forward references, so no cycles)

A violation raises :class:`CatalogError` while the module is imported,
so a broken catalog can never reach a running wizard.

Usage::

    from intake_engine.catalog import CATALOG

    q = CATALOG.get("q46")
    CATALOG.in_range(46, 65)
"""

from __future__ import annotations

import logging
from typing import Iterator, Optional, Sequence

from intake_engine.constants import AFFIRMATIVE, YES_NO
from intake_engine.models.question import InputKind, Predicate, QuestionDescriptor

logger = logging.getLogger(__name__)


class CatalogError(ValueError):
    """The question catalog violates a structural invariant."""


# ---------------------------------------------------------------------------
# QuestionCatalog
# ---------------------------------------------------------------------------

class QuestionCatalog:
    """Immutable, id-ordered collection of :class:`QuestionDescriptor`.

    Raises:
        CatalogError: if the descriptors break an assembly invariant.
    """

    def __init__(self, questions: Sequence[QuestionDescriptor]) -> None:
        self._questions: tuple[QuestionDescriptor, ...] = tuple(questions)
        self._by_key: dict[str, QuestionDescriptor] = {}
        self._by_id: dict[int, QuestionDescriptor] = {}
        self._check()
        logger.debug("QuestionCatalog assembled: %d questions", len(self._questions))

    def _check(self) -> None:
        for expected_id, q in enumerate(self._questions, start=1):
            if q.id != expected_id:
                raise CatalogError(
                    f"Question ids must be dense and increasing: expected {expected_id}, got {q.id}"
                )
            if q.key in self._by_key:
                raise CatalogError(f"Duplicate question key: {q.key}")

            # Only keys already registered (smaller ids) may be referenced.
            for pred in q.show_if or []:
                target = self._by_key.get(pred.key)
                if target is None:
                    raise CatalogError(
                        f"{q.key} visibility references unknown or later question '{pred.key}'"
                    )
                if pred.op == "in" and not isinstance(pred.value, (list, tuple)):
                    raise CatalogError(f"{q.key}: 'in' clause on {pred.key} needs a list value")

            self._by_key[q.key] = q
            self._by_id[q.id] = q

    # ------------------------------------------------------------------
    # Lookup helpers
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._questions)

    def __iter__(self) -> Iterator[QuestionDescriptor]:
        return iter(self._questions)

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    @property
    def keys(self) -> list[str]:
        return [q.key for q in self._questions]

    def get(self, key: str) -> QuestionDescriptor:
        """Look up a question by key.  Raises ``KeyError`` if unknown."""
        return self._by_key[key]

    def by_id(self, question_id: int) -> QuestionDescriptor:
        """Look up a question by id.  Raises ``KeyError`` if unknown."""
        return self._by_id[question_id]

    def find(self, key: str) -> Optional[QuestionDescriptor]:
        return self._by_key.get(key)

    def in_range(self, lo: int, hi: int) -> list[QuestionDescriptor]:
        """Questions whose id lies in ``[lo, hi]``, in id order."""
        return [q for q in self._questions if lo <= q.id <= hi]

    def dependents_of(self, key: str) -> list[QuestionDescriptor]:
        """Questions whose visibility reads ``key``."""
        return [q for q in self._questions if key in q.depends_on]


# ---------------------------------------------------------------------------
# Catalog literals
# ---------------------------------------------------------------------------

def _q(
    qid: int,
    prompt: str,
    kind: InputKind = "text",
    required: bool = False,
    options: Optional[list[str]] = None,
    show_if: Optional[list[Predicate]] = None,
) -> QuestionDescriptor:
    return QuestionDescriptor(
        id=qid,
        key=f"q{qid}",
        prompt=prompt,
        input_kind=kind,
        required=required,
        options=options or [],
        show_if=show_if,
    )


def _yes(*keys: str) -> list[Predicate]:
    """Visible only when every key in ``keys`` was answered affirmatively."""
    return [Predicate(key=k, op="eq", value=AFFIRMATIVE) for k in keys]


_QUESTIONS: list[QuestionDescriptor] = [
    # --- Identidad (1-15) ---
    _q(1, "¿Cuál es su nombre legal completo?", "text", True),
    _q(2, "¿Tiene otros nombres usados anteriormente?", "yesno", True, YES_NO),
    _q(3, "¿Cuál es su apellido exactamente como aparece en su pasaporte?", "text", True),
    _q(4, "¿Cuál es su nombre exactamente como aparece en su pasaporte?", "text", True),
    _q(5, "¿Cuál es su fecha de nacimiento?", "date", True),
    _q(6, "¿Cuál es su país de nacimiento?", "text", True),
    _q(7, "¿Cuál es su país de ciudadanía actual?", "text", True),
    _q(8, "¿Tiene más de una ciudadanía?", "yesno", True, YES_NO),
    _q(9, "¿Cuál es su género?", "select", True,
       ["Masculino", "Femenino", "No binario", "Prefiero no responder"]),
    _q(10, "¿Cuál es su estado civil actual?", "select", True,
       ["Soltero/a", "Casado/a", "Divorciado/a", "Viudo/a"]),
    _q(11, "¿Tiene hijos?", "yesno", True, YES_NO),
    _q(12, "¿Cuántos hijos tiene?", "number", show_if=_yes("q11")),
    _q(13, "¿Su pasaporte es válido actualmente?", "yesno", True, YES_NO),
    _q(14, "¿Cuál es el número de su pasaporte?", "text", True, show_if=_yes("q13")),
    _q(15, "¿Cuál es la fecha de expiración de su pasaporte?", "date", True, show_if=_yes("q13")),

    # --- Contacto (16-25) ---
    _q(16, "¿Cuál es su dirección actual?", "text", True),
    _q(17, "¿En qué ciudad vive actualmente?", "text", True),
    _q(18, "¿En qué país vive actualmente?", "text", True),
    _q(19, "¿Cuál es su número de teléfono?", "tel", True),
    _q(20, "¿Cuál es su correo electrónico?", "email", True),
    _q(21, "¿Cuánto tiempo ha vivido en su dirección actual?", "text", True),
    _q(22, "¿Ha vivido en otra dirección en los últimos 5 años?", "yesno", True, YES_NO),
    _q(23, "¿Ha vivido en otro país en los últimos 5 años?", "yesno", True, YES_NO),
    _q(24, "¿Tiene una dirección postal diferente?", "yesno", True, YES_NO),
    _q(25, "¿Tiene acceso regular a su correo electrónico?", "yesno", True, YES_NO),

    # --- Historial EE.UU. (26-45) ---
    _q(26, "¿Ha estado alguna vez en Estados Unidos?", "yesno", True, YES_NO),
    _q(27, "¿Cuántas veces ha entrado a Estados Unidos?", "number", show_if=_yes("q26")),
    _q(28, "¿Cuál fue la fecha de su última entrada?", "date", show_if=_yes("q26")),
    _q(29, "¿Cuál fue el propósito de su última entrada?", "text", show_if=_yes("q26")),
    _q(30, "¿Entró con visa?", "yesno", False, YES_NO, _yes("q26")),
    _q(31, "¿Qué tipo de visa utilizó?", "text", show_if=_yes("q26", "q30")),
    _q(32, "¿Entró sin visa?", "yesno", False, YES_NO, _yes("q26")),
    _q(33, "¿Entró cruzando la frontera terrestre?", "yesno", False, YES_NO, _yes("q26")),
    _q(34, "¿Entró por aeropuerto?", "yesno", False, YES_NO, _yes("q26")),
    _q(35, "¿Entró con permiso temporal?", "yesno", False, YES_NO, _yes("q26")),
    _q(36, "¿Se quedó más tiempo del permitido?", "yesno", False, YES_NO, _yes("q26")),
    _q(37, "¿Cuánto tiempo permaneció en Estados Unidos en su última visita?", "text",
       show_if=_yes("q26")),
    _q(38, "¿Alguna vez trabajó en Estados Unidos?", "yesno", False, YES_NO, _yes("q26")),
    _q(39, "¿Trabajó con autorización legal?", "yesno", False, YES_NO, _yes("q26", "q38")),
    _q(40, "¿Trabajó sin autorización?", "yesno", False, YES_NO, _yes("q26", "q38")),
    _q(41, "¿Alguna vez solicitó una extensión de estadía?", "yesno", False, YES_NO, _yes("q26")),
    _q(42, "¿Alguna vez solicitó asilo?", "yesno", False, YES_NO, _yes("q26")),
    _q(43, "¿Alguna vez solicitó algún beneficio migratorio?", "yesno", False, YES_NO, _yes("q26")),
    _q(44, "¿Alguna vez le negaron una visa?", "yesno", False, YES_NO, _yes("q26")),
    _q(45, "¿En qué año le negaron una visa?", "number", show_if=_yes("q26", "q44")),

    # --- Remoción (46-65) ---
    _q(46, "¿Ha sido deportado alguna vez?", "yesno", True, YES_NO),
    _q(47, "¿En qué año fue deportado?", "number", show_if=_yes("q46")),
    _q(48, "¿Cuántas veces ha sido deportado?", "number", show_if=_yes("q46")),
    _q(49, "¿Fue deportado por un juez?", "yesno", False, YES_NO, _yes("q46")),
    _q(50, "¿Fue deportado en la frontera?", "yesno", False, YES_NO, _yes("q46")),
    _q(51, "¿Fue deportado desde el interior de Estados Unidos?", "yesno", False, YES_NO, _yes("q46")),
    _q(52, "¿Fue detenido por ICE?", "yesno", False, YES_NO, _yes("q46")),
    _q(53, "¿Fue detenido por CBP?", "yesno", False, YES_NO, _yes("q46")),
    _q(54, "¿Fue detenido por policía local?", "yesno", False, YES_NO, _yes("q46")),
    _q(55, "¿Firmó salida voluntaria?", "yesno", False, YES_NO, _yes("q46")),
    _q(56, "¿Recibió orden de deportación formal?", "yesno", False, YES_NO, _yes("q46")),
    _q(57, "¿Recibió documentos de deportación?", "yesno", False, YES_NO, _yes("q46")),
    _q(58, "¿Sabe el motivo de su deportación?", "yesno", False, YES_NO, _yes("q46")),
    _q(59, "¿Intentó regresar después de ser deportado?", "yesno", False, YES_NO, _yes("q46")),
    _q(60, "¿Ha cruzado la frontera ilegalmente?", "yesno", True, YES_NO),
    _q(61, "¿Cuántas veces cruzó la frontera ilegalmente?", "number", show_if=_yes("q60")),
    _q(62, "¿Cuándo fue su último intento de entrada ilegal?", "date", show_if=_yes("q60")),
    _q(63, "¿Fue detenido en la frontera?", "yesno", False, YES_NO, _yes("q60")),
    _q(64, "¿Usó un nombre falso para entrar?", "yesno", True, YES_NO),
    _q(65, "¿Usó documentos falsos?", "yesno", True, YES_NO),

    # --- Historial penal (66-80) ---
    _q(66, "¿Ha sido arrestado alguna vez?", "yesno", True, YES_NO),
    _q(67, "¿En qué país fue arrestado?", "text", show_if=_yes("q66")),
    _q(68, "¿En qué año fue arrestado?", "number", show_if=_yes("q66")),
    _q(69, "¿Cuál fue el motivo del arresto?", "multiline", show_if=_yes("q66")),
    _q(70, "¿Fue acusado formalmente?", "yesno", False, YES_NO, _yes("q66")),
    _q(71, "¿Fue condenado?", "yesno", False, YES_NO, _yes("q66")),
    _q(72, "¿Pagó una multa?", "yesno", False, YES_NO, _yes("q66")),
    _q(73, "¿Estuvo en prisión?", "yesno", False, YES_NO, _yes("q66")),
    _q(74, "¿Cuánto tiempo estuvo en prisión?", "text", show_if=_yes("q66", "q73")),
    _q(75, "¿Tiene casos pendientes?", "yesno", True, YES_NO),
    _q(76, "¿Tiene órdenes de arresto pendientes?", "yesno", True, YES_NO),
    _q(77, "¿Ha sido acusado de fraude?", "yesno", True, YES_NO),
    _q(78, "¿Ha sido acusado de violencia?", "yesno", True, YES_NO),
    _q(79, "¿Ha sido acusado de robo?", "yesno", True, YES_NO),
    _q(80, "¿Ha sido acusado de algún delito migratorio?", "yesno", True, YES_NO),

    # --- Drogas (81-90) ---
    _q(81, "¿Ha usado drogas ilegales alguna vez?", "yesno", True,
       [*YES_NO, "Prefiero no responder"]),
    _q(82, "¿Qué tipo de droga?", "text", show_if=_yes("q81")),
    _q(83, "¿Cuándo fue la última vez que usó drogas?", "date", show_if=_yes("q81")),
    _q(84, "¿Ha sido arrestado por drogas?", "yesno", True, YES_NO),
    _q(85, "¿Ha sido acusado de posesión de drogas?", "yesno", True, YES_NO),
    _q(86, "¿Ha sido acusado de tráfico de drogas?", "yesno", True, YES_NO),
    _q(87, "¿Ha vendido drogas?", "yesno", True, YES_NO),
    _q(88, "¿Ha transportado drogas?", "yesno", True, YES_NO),
    _q(89, "¿Ha sido investigado por delitos relacionados con drogas?", "yesno", True, YES_NO),
    _q(90, "¿Ha tenido problemas legales relacionados con drogas?", "yesno", True, YES_NO),

    # --- Laboral (91-105) ---
    _q(91, "¿Está actualmente empleado?", "yesno", True, YES_NO),
    _q(92, "¿Cuál es su ocupación actual?", "text", show_if=_yes("q91")),
    _q(93, "¿Cuál es el nombre de su empleador actual?", "text", show_if=_yes("q91")),
    _q(94, "¿En qué país trabaja actualmente?", "text", show_if=_yes("q91")),
    _q(95, "¿Cuánto tiempo ha trabajado allí?", "text", show_if=_yes("q91")),
    _q(96, "¿Ha trabajado anteriormente en otro empleo?", "yesno", True, YES_NO),
    _q(97, "¿Tiene experiencia en construcción?", "yesno", True, YES_NO),
    _q(98, "¿Tiene experiencia en agricultura?", "yesno", True, YES_NO),
    _q(99, "¿Tiene experiencia en limpieza?", "yesno", True, YES_NO),
    _q(100, "¿Tiene experiencia en hotelería?", "yesno", True, YES_NO),
    _q(101, "¿Tiene experiencia en fábricas?", "yesno", True, YES_NO),
    _q(102, "¿Ha trabajado en Estados Unidos antes?", "yesno", True, YES_NO),
    _q(103, "¿Tiene habilidades técnicas?", "yesno", True, YES_NO),
    _q(104, "¿Tiene certificaciones laborales?", "yesno", True, YES_NO),
    _q(105, "¿Está dispuesto a trabajar en Estados Unidos temporalmente?", "yesno", True, YES_NO),

    # --- Familia (106-115) ---
    _q(106, "¿Está casado?", "yesno", True, YES_NO),
    _q(107, "¿Su cónyuge es ciudadano estadounidense?", "yesno", False, YES_NO, _yes("q106")),
    _q(108, "¿Su cónyuge vive en Estados Unidos?", "yesno", False, YES_NO, _yes("q106")),
    _q(109, "¿Tiene familiares en Estados Unidos?", "yesno", True, YES_NO),
    _q(110, "¿Qué familiares tiene en Estados Unidos?", "multiline", show_if=_yes("q109")),
    _q(111, "¿Cuál es el estatus migratorio de sus familiares?", "multiline",
       show_if=_yes("q109")),
    _q(112, "¿Tiene hijos en Estados Unidos?", "yesno", True, YES_NO),
    _q(113, "¿Sus padres están en Estados Unidos?", "yesno", True, YES_NO),
    _q(114, "¿Tiene hermanos en Estados Unidos?", "yesno", True, YES_NO),
    _q(115, "¿Algún familiar le ha pedido migratoriamente?", "yesno", True, YES_NO),

    # --- Seguridad (116-120) ---
    _q(116, "¿Ha mentido alguna vez a un oficial migratorio?", "yesno", True, YES_NO),
    _q(117, "¿Ha usado documentos falsos?", "yesno", True, YES_NO),
    _q(118, "¿Ha cometido fraude migratorio?", "yesno", True, YES_NO),
    _q(119, "¿Toda la información proporcionada es verdadera?", "yesno", True, YES_NO),
    _q(120, "¿Acepta que esta información será revisada por un abogado de inmigración?",
       "yesno", True, YES_NO),
]

CATALOG = QuestionCatalog(_QUESTIONS)
