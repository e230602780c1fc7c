"""Intake constants shared across the SDK.

These values are referenced by the catalog, validator, scoring engine and
controller.  The answer tokens and labels are the Spanish strings the
questionnaire presents to the client and must match the catalog options
exactly.

The draft storage key can be overridden via an environment variable so
that a deployment can invalidate every stored draft by bumping it.
"""

import os

# Answer tokens for yes/no questions.
AFFIRMATIVE = "Sí"
NEGATIVE = "No"
YES_NO: list[str] = [AFFIRMATIVE, NEGATIVE]

# Fixed storage key for the in-progress draft (one per client origin).
# Overridable via INTAKE_DRAFT_KEY env var.
DRAFT_KEY = os.getenv("INTAKE_DRAFT_KEY", "h2b-intake-draft-v1")

# Score-band thresholds.  Scores start at BASE_SCORE and are clamped to
# [MIN_SCORE, MAX_SCORE] before banding.
BASE_SCORE = 100
MIN_SCORE = 0
MAX_SCORE = 100
EXCELLENT_THRESHOLD = 90
ELIGIBLE_THRESHOLD = 70
MODERATE_THRESHOLD = 50

# Profile entry emitted when no positive signal fires.
FALLBACK_PROFILE = "Perfil inicial capturado para revisión legal"

# Declarations that must both be affirmative before a case can be signed.
DECLARATION_KEYS: tuple[str, str] = ("q119", "q120")

# Document slots.  The first two are mandatory uploads.
REQUIRED_DOCUMENTS: tuple[str, ...] = ("passport", "selfieWithPassport")
OPTIONAL_DOCUMENTS: tuple[str, ...] = ("visaPhoto", "cv", "certifications")
DOCUMENT_SLOTS: tuple[str, ...] = REQUIRED_DOCUMENTS + OPTIONAL_DOCUMENTS

# Answer keys that feed the contact fields of a submission.
CONTACT_NAME_KEY = "q1"
CONTACT_PHONE_KEY = "q19"
CONTACT_EMAIL_KEY = "q20"
UNNAMED_CONTACT = "Sin nombre"

# Client-facing messages (Spanish, as shown by the intake UI).
MSG_MISSING_QUESTION = "Complete la pregunta {id} para continuar."
MSG_DECLARATIONS = "Debe confirmar veracidad y autorización de revisión legal."
MSG_PASSPORT_REQUIRED = (
    "Passport is required to continue your immigration eligibility assessment."
)
MSG_SELFIE_REQUIRED = "Selfie with passport is required to continue."
MSG_CONSENT_REQUIRED = "Debe certificar bajo pena de perjurio antes de enviar."
MSG_SIGNATURE_REQUIRED = "La firma digital es obligatoria."
MSG_SUBMISSION_FAILED = (
    "No se pudo completar el envío. Intente nuevamente en unos minutos."
)
