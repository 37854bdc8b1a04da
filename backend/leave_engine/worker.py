"""Worker process for scheduled accrual runs.

Runs an asyncio loop that accrues every organisation with an active accruing
leave type, then sleeps for ``ACCRUAL_INTERVAL_SECONDS``.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date

from leave_engine.config import get_settings
from leave_engine.db import get_session_factory
from leave_engine.main import configure_logging
from leave_engine.services.accrual import list_accruing_organisations, run_accruals

logger = logging.getLogger(__name__)


async def run_accrual_cycle(as_of: date | None = None) -> int:
    """Accrue every organisation once. Returns the number of organisations run.

    Each organisation gets its own session so one failing organisation does
    not stop the others.
    """
    as_of = as_of or date.today()
    session_factory = get_session_factory()

    async with session_factory() as session:
        organisation_ids = await list_accruing_organisations(session)

    completed = 0
    for organisation_id in organisation_ids:
        try:
            async with session_factory() as session:
                result = await run_accruals(session, organisation_id, as_of)
        except Exception:
            logger.exception("Accrual run failed for organisation=%s as_of=%s", organisation_id, as_of)
            continue
        completed += 1
        if result.failures:
            logger.warning(
                "Accrual run for organisation=%s finished with %d failed pairs",
                organisation_id,
                len(result.failures),
            )
    return completed


async def run_accrual_loop() -> None:
    """Main worker loop."""
    interval = get_settings().accrual_interval_seconds
    logger.info("Accrual worker started (interval=%ss)", interval)

    while True:
        today = date.today()
        logger.info("Running accruals for %s", today)
        try:
            count = await run_accrual_cycle(today)
            logger.info("Accrual cycle complete for %s: organisations=%d", today, count)
        except Exception:
            logger.exception("Accrual cycle failed for %s", today)

        await asyncio.sleep(interval)


def main() -> None:
    """Entry point for the worker process."""
    configure_logging(get_settings().log_level)
    asyncio.run(run_accrual_loop())


if __name__ == "__main__":
    main()
