"""Database connection settings for the intake store.

The URL comes from ``INTAKE_DATABASE_URL`` (or the generic
``DATABASE_URL``) when set; otherwise it is assembled from the ``PG_*``
variables used by docker-compose.

Alembic migrates with a synchronous driver while the application runs on
asyncpg, so both spellings of the URL are derived from one source.
"""

import os

_ASYNC_PREFIX = "postgresql+asyncpg://"
_SYNC_PREFIX = "postgresql://"


def _configured_url() -> str | None:
    return os.getenv("INTAKE_DATABASE_URL") or os.getenv("DATABASE_URL") or None


def _url_from_parts() -> str:
    user = os.getenv("PG_USER", "intake")
    password = os.getenv("PG_PASSWORD", "intake")
    host = os.getenv("PG_HOST", "localhost")
    port = os.getenv("PG_PORT", "5432")
    database = os.getenv("PG_DATABASE", "intake")
    return f"{_SYNC_PREFIX}{user}:{password}@{host}:{port}/{database}"


def get_sync_url() -> str:
    """URL for synchronous clients (Alembic)."""
    url = _configured_url() or _url_from_parts()
    return url.replace(_ASYNC_PREFIX, _SYNC_PREFIX, 1)


def get_async_url() -> str:
    """URL for the asyncpg-backed runtime engine."""
    url = _configured_url() or _url_from_parts()
    if url.startswith(_SYNC_PREFIX):
        return _ASYNC_PREFIX + url[len(_SYNC_PREFIX):]
    return url
