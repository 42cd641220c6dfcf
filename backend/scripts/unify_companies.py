"""Unify near-duplicate company_profiles from the command line.

Same routine as POST /api/company/unify, for administrators with database
access. Dry run unless --apply is given.

Usage:
    cd backend && python -m scripts.unify_companies            # report only
    cd backend && python -m scripts.unify_companies --apply    # merge

The whole run is one transaction: committed after the last group merges,
rolled back if anything fails.
"""

import argparse
import asyncio
import logging
import sys

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from quest.core.config import settings
from quest.services.company_unification import UnificationResult, run_unification

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="unify_companies",
        description="Find and merge near-duplicate company records.",
    )
    parser.add_argument(
        "--apply",
        action="store_true",
        help="merge duplicate groups (default: dry run, no writes)",
    )
    return parser


def _log_groups(result: UnificationResult) -> None:
    for merge in result.merges:
        variants = ", ".join(
            f"{member.record.name!r} ({member.similarity:.2f})"
            for member in merge.members[1:]
        )
        logger.info(
            "%s %r <- %s",
            "Merged into" if merge.applied else "Would merge into",
            merge.canonical_name,
            variants,
        )


async def unify(*, apply: bool) -> UnificationResult:
    """Run unification against the configured database."""
    engine = create_async_engine(settings.database_url, echo=False)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    try:
        async with factory() as session, session.begin():
            result = await run_unification(session, dry_run=not apply)
    finally:
        await engine.dispose()

    return result


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns the process exit code."""
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    result = asyncio.run(unify(apply=args.apply))
    _log_groups(result)
    logger.info(
        "Final stats: %d groups found, %d merged, %d duplicates %s",
        result.duplicates_found,
        result.groups_merged,
        result.total_duplicates_resolved,
        "resolved" if args.apply else "proposed",
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
