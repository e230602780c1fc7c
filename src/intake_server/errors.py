"""Global exception handlers — map engine exceptions to HTTP status codes.

The engine raises ``ValueError`` subclasses (``WizardStateError``,
``CatalogError``) and ``KeyError`` for unknown question keys or document
slots.  The handlers pick a status code from the message and send the
client a generic description; the raw message stays in the server log.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

# Checked in order; first match wins.
_VALUE_ERROR_PATTERNS: list[tuple[str, int]] = [
    ("not found", 404),
    # Submit requested before the last step
    ("only valid during", 400),
    # Operation blocked by the wizard state (submitting / complete)
    ("cannot", 409),
]

_SAFE_MESSAGES: dict[int, str] = {
    404: "Resource not found",
    409: "Operation not allowed in the current wizard state",
    400: "Invalid request",
}


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    """Map ``ValueError`` to 404, 409 or 400 (the default)."""
    msg = str(exc)
    status = 400
    for pattern, code in _VALUE_ERROR_PATTERNS:
        if pattern in msg.lower():
            status = code
            break

    logger.warning("ValueError [%d] at %s: %s", status, request.url, msg)
    return JSONResponse(
        status_code=status,
        content={"detail": _SAFE_MESSAGES.get(status, "Invalid request")},
    )


async def key_error_handler(request: Request, exc: KeyError) -> JSONResponse:
    """Unknown question key or document slot."""
    logger.warning("KeyError at %s: %s", request.url, exc)
    return JSONResponse(status_code=404, content={"detail": "Resource not found"})


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception at %s", request.url)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})
