"""
Background release sweeps.

Two independent asyncio loops run inside the API process: the publication
sweep (every few minutes) and the curriculum sweep (daily). Each tick uses its
own database session and commits on success.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime

from tutorgate.config import settings
from tutorgate.core.database import SessionLocal
from tutorgate.release.curriculum import CurriculumSweepResult, run_curriculum_sweep
from tutorgate.release.publication import PublicationSweepResult, run_publication_sweep
from tutorgate.release.repo_db import DBReleaseRepo

logger = logging.getLogger(__name__)


async def publication_sweep_once(now: datetime | None = None) -> PublicationSweepResult:
    """Run one publication sweep in a fresh session."""
    async with SessionLocal() as db:
        result = await run_publication_sweep(DBReleaseRepo(db), now or datetime.now(UTC))
        await db.commit()
    return result


async def curriculum_sweep_once(now: datetime | None = None) -> CurriculumSweepResult:
    """Run one curriculum sweep in a fresh session."""
    async with SessionLocal() as db:
        result = await run_curriculum_sweep(DBReleaseRepo(db), now or datetime.now(UTC))
        await db.commit()
    return result


async def run_periodically(
    name: str,
    job: Callable[[], Awaitable[object]],
    interval_seconds: float,
    run_immediately: bool = True,
) -> None:
    """Call `job` forever, sleeping `interval_seconds` between calls.

    Errors are logged and the loop continues. Cancellation stops it.
    """
    logger.info(f"{name} started (every {interval_seconds:.0f}s)")
    if not run_immediately:
        await asyncio.sleep(interval_seconds)

    while True:
        try:
            await job()
        except asyncio.CancelledError:
            logger.info(f"{name} cancelled")
            raise
        except Exception as e:
            logger.exception(f"{name} error: {e}, retrying in {interval_seconds:.0f}s")
        await asyncio.sleep(interval_seconds)


def start_release_sweeps() -> list[asyncio.Task[None]]:
    """Schedule both sweep loops on the running event loop."""
    return [
        asyncio.create_task(
            run_periodically(
                "Publication sweep",
                publication_sweep_once,
                settings.PUBLICATION_SWEEP_INTERVAL_SECONDS,
            )
        ),
        asyncio.create_task(
            run_periodically(
                "Curriculum sweep",
                curriculum_sweep_once,
                settings.CURRICULUM_SWEEP_INTERVAL_SECONDS,
                run_immediately=settings.CURRICULUM_SWEEP_ON_STARTUP,
            )
        ),
    ]


async def stop_release_sweeps(tasks: list[asyncio.Task[None]]) -> None:
    """Cancel the sweep loops and wait for them to finish."""
    for task in tasks:
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)
