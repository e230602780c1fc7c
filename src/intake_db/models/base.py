"""Declarative base for the intake tables."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Shared metadata for ``intake_submissions`` and ``intake_drafts``."""
