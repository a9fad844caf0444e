"""Worker process for scheduled maintenance.

Runs an asyncio loop that creates the current year's leave balances and
purges history past the retention window.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date

from teamsched.config import get_settings
from teamsched.db import create_tables, get_session_factory

logger = logging.getLogger(__name__)


def purge_cutoff(today: date, retention_years: int) -> date:
    """January 1st of the oldest year still retained."""
    return date(today.year - retention_years, 1, 1)


async def run_maintenance_once(today: date) -> None:
    from teamsched.services.maintenance import run_purge, run_year_start_balances

    settings = get_settings()
    session_factory = get_session_factory()

    try:
        async with session_factory() as session:
            result = await run_year_start_balances(session, today.year)
        if result.created > 0 or result.errors > 0:
            logger.info(
                "Balance run for %d: processed=%d created=%d skipped=%d errors=%d",
                result.year,
                result.processed,
                result.created,
                result.skipped,
                result.errors,
            )
    except Exception:
        logger.exception("Balance run failed for %s", today)

    cutoff = purge_cutoff(today, settings.purge_retention_years)
    try:
        async with session_factory() as session:
            purge = await run_purge(session, cutoff)
        logger.info(
            "Purge run before %s: processed=%d purged=%d archived=%d errors=%d",
            cutoff,
            purge.processed,
            purge.purged,
            purge.archived,
            purge.errors,
        )
    except Exception:
        logger.exception("Purge run failed for %s", cutoff)


async def run_maintenance_loop() -> None:
    """Main worker loop; runs maintenance once per interval."""
    settings = get_settings()
    await create_tables()
    logger.info("%s %s maintenance worker started", settings.app_name, settings.app_version)

    while True:
        await run_maintenance_once(date.today())
        await asyncio.sleep(settings.maintenance_interval_seconds)


def main() -> None:
    """Entry point for the worker process."""
    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    asyncio.run(run_maintenance_loop())


if __name__ == "__main__":
    main()
