"""ScoringEngine — eligibility score and risk classification of a case.

:func:`score_case` is a pure, table-driven function of the answer map:

  1. Start at 100.
  2. Apply every penalty rule in declaration order.  All matching rules
     fire; each appends its flag, so ``risk_flags`` keeps table order.
  3. Apply every bonus rule in declaration order (no flags).
  4. Clamp to [0, 100].
  5. Band the score:  >= 90 excellent/low, >= 70 eligible/moderate,
     >= 50 moderate_risk/moderate, else high_risk/high.
  6. Build the profile from positive signals; never leave it empty.

The >= 90 band is applied last as an unconditional override, after the
ascending tentative assignment.  Keep that order if the thresholds move.
"""

from __future__ import annotations

from typing import Mapping

from intake_engine.constants import (
    AFFIRMATIVE,
    BASE_SCORE,
    ELIGIBLE_THRESHOLD,
    EXCELLENT_THRESHOLD,
    FALLBACK_PROFILE,
    MAX_SCORE,
    MIN_SCORE,
    MODERATE_THRESHOLD,
)
from intake_engine.models.analysis import (
    Analysis,
    EligibilityEstimate,
    ProfileSignal,
    RiskLevel,
    ScoringRule,
)


def _penalty(key: str, label: str, amount: int) -> ScoringRule:
    return ScoringRule(trigger_key=key, trigger_value=AFFIRMATIVE, delta=-amount, flag_label=label)


def _bonus(key: str, amount: int) -> ScoringRule:
    return ScoringRule(trigger_key=key, trigger_value=AFFIRMATIVE, delta=amount)


PENALTY_RULES: tuple[ScoringRule, ...] = (
    _penalty("q36", "Sobreestadía previa", 15),
    _penalty("q40", "Trabajo sin autorización", 15),
    _penalty("q44", "Negación de visa previa", 10),
    _penalty("q46", "Deportación/remoción", 30),
    _penalty("q60", "Cruces fronterizos no autorizados", 25),
    _penalty("q64", "Uso de nombre falso", 35),
    _penalty("q65", "Uso de documentos falsos", 35),
    _penalty("q71", "Condena penal", 25),
    _penalty("q75", "Casos penales pendientes", 20),
    _penalty("q76", "Órdenes de arresto pendientes", 25),
    _penalty("q77", "Acusación de fraude", 20),
    _penalty("q78", "Acusación de violencia", 20),
    _penalty("q80", "Delito migratorio", 25),
    _penalty("q81", "Uso de drogas ilegales", 20),
    _penalty("q86", "Acusación de tráfico de drogas", 40),
    _penalty("q87", "Venta de drogas", 40),
    _penalty("q88", "Transporte de drogas", 35),
    _penalty("q116", "Declaración de mentira ante oficial", 25),
    _penalty("q117", "Uso de documentos falsos (declaración)", 30),
    _penalty("q118", "Fraude migratorio", 35),
)

BONUS_RULES: tuple[ScoringRule, ...] = (
    _bonus("q91", 3),
    _bonus("q103", 2),
    _bonus("q104", 2),
)

PROFILE_SIGNALS: tuple[ProfileSignal, ...] = (
    ProfileSignal(
        label="Historial previo de entrada a EE.UU.",
        trigger_keys=["q26"],
        trigger_value=AFFIRMATIVE,
    ),
    ProfileSignal(
        label="Experiencia laboral relevante H-2B",
        trigger_keys=["q97", "q98", "q100"],
        trigger_value=AFFIRMATIVE,
    ),
    ProfileSignal(
        label="Disponibilidad para empleo temporal en EE.UU.",
        trigger_keys=["q105"],
        trigger_value=AFFIRMATIVE,
    ),
)


def classify(score: int) -> tuple[RiskLevel, EligibilityEstimate]:
    """Map a clamped score to ``(risk_level, eligibility_estimate)``."""
    risk_level: RiskLevel = "low"
    estimate: EligibilityEstimate = "excellent"

    if score < MODERATE_THRESHOLD:
        risk_level, estimate = "high", "high_risk"
    elif score < ELIGIBLE_THRESHOLD:
        risk_level, estimate = "moderate", "moderate_risk"
    elif score < EXCELLENT_THRESHOLD:
        risk_level, estimate = "moderate", "eligible"

    # Unconditional override; must stay after the tentative bands.
    if score >= EXCELLENT_THRESHOLD:
        risk_level, estimate = "low", "excellent"

    return risk_level, estimate


def score_case(answers: Mapping[str, str]) -> Analysis:
    """Score one answer set.  Same input, same :class:`Analysis`, every time."""
    score = BASE_SCORE
    risk_flags: list[str] = []

    for rule in PENALTY_RULES:
        if rule.matches(answers):
            score += rule.delta
            risk_flags.append(rule.flag_label)

    for rule in BONUS_RULES:
        if rule.matches(answers):
            score += rule.delta

    score = max(MIN_SCORE, min(MAX_SCORE, score))
    risk_level, estimate = classify(score)

    profile = [s.label for s in PROFILE_SIGNALS if s.matches(answers)]
    if not profile:
        profile.append(FALLBACK_PROFILE)

    return Analysis(
        score=score,
        risk_level=risk_level,
        eligibility_estimate=estimate,
        risk_flags=risk_flags,
        profile=profile,
    )
