#!/usr/bin/env python3
"""
Release Sweep Runner

Runs the publication and/or curriculum sweep once, outside the API process.
Useful from cron or when the in-process scheduler is disabled.

Usage:
    python scripts/run_sweeps.py                    # Run both sweeps
    python scripts/run_sweeps.py --publication      # Scheduled publications only
    python scripts/run_sweeps.py --curriculum       # Weekly curriculum only
    python scripts/run_sweeps.py --now=2026-03-02T00:01:00+00:00
"""

import argparse
import asyncio
import sys
from datetime import UTC, datetime
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tutorgate.config import settings
from tutorgate.core.database import close_db
from tutorgate.jobs.scheduler import curriculum_sweep_once, publication_sweep_once


def parse_now(value: str) -> datetime:
    """ISO timestamp; naive values are taken as UTC."""
    moment = datetime.fromisoformat(value)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment


async def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Run TutorGate release sweeps once")
    parser.add_argument(
        "--publication",
        action="store_true",
        help="Run the scheduled-publication sweep",
    )
    parser.add_argument(
        "--curriculum",
        action="store_true",
        help="Run the weekly curriculum sweep",
    )
    parser.add_argument(
        "--now",
        type=parse_now,
        help="Evaluate the sweeps at this ISO timestamp instead of the current time",
    )
    args = parser.parse_args()

    run_all = not (args.publication or args.curriculum)
    now = args.now or datetime.now(UTC)
    db_url = settings.DATABASE_URL

    print("TutorGate release sweeps")
    print(f"Database: {db_url.split('@')[1] if '@' in db_url else db_url}")
    print(f"Now: {now.isoformat()}\n")

    try:
        if run_all or args.publication:
            result = await publication_sweep_once(now)
            print(f"Publication sweep: {result.count} item(s) published")
            for item in result.released:
                print(f"  - {item.title} ({item.item_id})")

        if run_all or args.curriculum:
            result = await curriculum_sweep_once(now)
            print(
                f"Curriculum sweep: {len(result.promoted)} assignment(s) created "
                f"across {result.classes_checked} class(es)"
            )
            for assignment in result.promoted:
                print(
                    f"  - week {assignment.week_number}: "
                    f"{assignment.content_id} -> class {assignment.class_id}"
                )
            if result.failed_class_ids:
                print(f"  Failed classes: {', '.join(str(c) for c in result.failed_class_ids)}")

    except Exception as e:
        print(f"\nError: {e}")
        raise
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
