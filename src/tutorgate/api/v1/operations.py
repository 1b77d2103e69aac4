"""
Operations API Endpoints

Manual, out-of-schedule triggers for the release sweeps.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from datetime import UTC, datetime

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tutorgate.api.deps import require_admin
from tutorgate.core.database import get_db
from tutorgate.core.schemas import CurriculumSweepSchema, PublicationSweepSchema
from tutorgate.release import Caller, run_curriculum_sweep, run_publication_sweep
from tutorgate.release.repo_db import DBReleaseRepo

router = APIRouter()


@router.post("/sweeps/publication", response_model=PublicationSweepSchema)
async def trigger_publication_sweep(
    caller: Caller = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> PublicationSweepSchema:
    """Publish every scheduled item whose release time has passed."""
    result = await run_publication_sweep(DBReleaseRepo(db), datetime.now(UTC))
    await db.commit()

    return PublicationSweepSchema(
        ran_at=result.ran_at,
        released=[{"item_id": r.item_id, "title": r.title} for r in result.released],
    )


@router.post("/sweeps/curriculum", response_model=CurriculumSweepSchema)
async def trigger_curriculum_sweep(
    caller: Caller = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> CurriculumSweepSchema:
    """Release the current week's curriculum items of every scheduled class."""
    result = await run_curriculum_sweep(DBReleaseRepo(db), datetime.now(UTC))
    await db.commit()

    return CurriculumSweepSchema(
        ran_at=result.ran_at,
        classes_checked=result.classes_checked,
        promoted=[
            {"class_id": a.class_id, "content_id": a.content_id, "week_number": a.week_number}
            for a in result.promoted
        ],
        failed_class_ids=result.failed_class_ids,
    )
