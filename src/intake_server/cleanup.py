"""Draft retention CLI — ``intake-cleanup``.

Deletes drafts that nobody has touched for a while.  Submitted cases are
never affected.  Intended for cron jobs.

Examples::

    # Purge drafts untouched for $DRAFT_TTL_DAYS (default 30) days
    intake-cleanup

    # Purge drafts older than a week
    intake-cleanup --days 7

    # Purge every draft
    intake-cleanup --days 0
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from intake_server.config import load_settings

logger = logging.getLogger(__name__)


async def run_cleanup(*, days: int | None = None) -> int:
    """Purge stale drafts in one transaction; return the deleted row count.

    ``days`` defaults to the configured ``draft_ttl_days``.
    """
    if days is None:
        days = load_settings().draft_ttl_days

    # Lazy imports keep ``--help`` free of DB machinery
    from intake_db.engine import dispose_engine, get_session_factory
    from intake_db.repository import DraftRepository

    repo = DraftRepository()
    factory = get_session_factory()

    try:
        async with factory() as db:
            affected = await repo.purge_older_than(db, older_than_days=days)
            await db.commit()
        logger.info("Cleanup complete: affected_rows=%d, days=%d", affected, days)
        return affected
    finally:
        await dispose_engine()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="intake-cleanup",
        description="Delete stale intake drafts from the database.",
    )
    parser.add_argument(
        "--days",
        type=int,
        default=load_settings().draft_ttl_days,
        help="Age threshold in days (default: $DRAFT_TTL_DAYS, or 30).  0 purges every draft.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: INFO)",
    )
    return parser


def cli() -> None:
    """Console-script entry point: ``intake-cleanup``."""
    args = build_parser().parse_args()
    if args.days < 0:
        print("--days must be >= 0", file=sys.stderr)
        sys.exit(2)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    affected = asyncio.run(run_cleanup(days=args.days))
    print(f"Deleted drafts: {affected}")
    sys.exit(0)
