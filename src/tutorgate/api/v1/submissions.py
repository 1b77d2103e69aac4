"""
Submission API Endpoints

Students submit answers to exercises; the automatic scorer grades them when it
can, instructors grade the rest.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

import logging
from datetime import UTC, datetime
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tutorgate.api.deps import require_role, require_staff
from tutorgate.core.database import get_db
from tutorgate.core.models import Submission
from tutorgate.core.schemas import (
    SubmissionCreate,
    SubmissionGrade,
    SubmissionReviewSchema,
    SubmissionSchema,
)
from tutorgate.release import (
    AttemptPolicy,
    AudienceResolver,
    Caller,
    SubmissionRejected,
    UnknownContentItem,
    grade_submission,
)
from tutorgate.release.repo_db import DBReleaseRepo, audience_of
from tutorgate.release.scoring import (
    MultipleChoiceError,
    description_adherence,
    validate_choice_answer,
)

logger = logging.getLogger(__name__)

router = APIRouter()

require_student = require_role("student")


@router.post(
    "/content/{content_id}/submissions",
    response_model=SubmissionSchema,
    status_code=status.HTTP_201_CREATED,
)
async def create_submission(
    content_id: UUID,
    submission_data: SubmissionCreate,
    caller: Caller = Depends(require_student),
    db: AsyncSession = Depends(get_db),
) -> Submission:
    """Submit an answer to an exercise the student is entitled to."""
    now = datetime.now(UTC)
    repo = DBReleaseRepo(db)

    try:
        exercise = await repo.get_content(content_id)
    except UnknownContentItem:
        exercise = None

    resolver = AudienceResolver(await repo.load_enrollment_directory())
    if (
        exercise is None
        or exercise.kind != "exercise"
        or not resolver.can_read(caller, audience_of(exercise), now)
    ):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Exercise not found with ID: {content_id}",
        )

    answer = submission_data.answer or ""
    if not answer.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="An answer is required")

    policy = AttemptPolicy.from_content(exercise)
    previous_attempts, last_submitted_at = await repo.attempt_stats(content_id, caller.subject_id)
    try:
        policy.check(previous_attempts, last_submitted_at, now)
        if exercise.choice_rules:
            validate_choice_answer(answer, exercise.choice_rules)
    except (SubmissionRejected, MultipleChoiceError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    outcome = grade_submission(
        answer,
        submission_data.answer_kind,
        exercise_type=exercise.exercise_type,
        reference_answer=exercise.reference_answer,
        choice_rules=exercise.choice_rules,
        penalty_percent=policy.penalty_percent,
        previous_attempts=previous_attempts,
    )

    submission = Submission(
        content_id=content_id,
        student_id=caller.subject_id,
        answer=answer,
        answer_kind=submission_data.answer_kind,
        language=submission_data.language,
        attempt_number=previous_attempts + 1,
        is_late=policy.is_late(now),
        score=outcome.score,
        graded=outcome.graded,
    )
    db.add(submission)
    await db.commit()
    await db.refresh(submission)

    logger.info(
        f"Submission {submission.id} for exercise {content_id}: "
        f"score={outcome.score} graded={outcome.graded}"
    )
    return submission


@router.get("/submissions/mine", response_model=list[SubmissionSchema])
async def list_my_submissions(
    caller: Caller = Depends(require_student),
    db: AsyncSession = Depends(get_db),
) -> list[Submission]:
    """The caller's submissions, newest first, whatever their current entitlements."""
    result = await db.execute(
        select(Submission)
        .where(Submission.student_id == caller.subject_id)
        .order_by(Submission.created_at.desc())
    )
    return list(result.scalars().all())


@router.get("/content/{content_id}/submissions", response_model=list[SubmissionReviewSchema])
async def list_exercise_submissions(
    content_id: UUID,
    caller: Caller = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> list[SubmissionReviewSchema]:
    """All submissions to an exercise with the description-adherence hint."""
    repo = DBReleaseRepo(db)
    try:
        exercise = await repo.get_content(content_id)
    except UnknownContentItem:
        exercise = None

    if exercise is None or exercise.kind != "exercise":
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Exercise not found with ID: {content_id}",
        )

    result = await db.execute(
        select(Submission)
        .where(Submission.content_id == content_id)
        .order_by(Submission.created_at.desc())
    )

    reviews = []
    for submission in result.scalars().all():
        review = SubmissionReviewSchema.model_validate(submission)
        review.description_adherence = description_adherence(
            submission.answer,
            submission.answer_kind,
            exercise.description,
            exercise.reference_answer,
        )
        reviews.append(review)
    return reviews


@router.put("/submissions/{submission_id}/grade", response_model=SubmissionSchema)
async def grade_submission_manually(
    submission_id: UUID,
    grade: SubmissionGrade,
    caller: Caller = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> Submission:
    """Set the score and feedback of a submission and mark it graded."""
    submission = await db.get(Submission, submission_id)
    if submission is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Submission not found with ID: {submission_id}",
        )

    submission.score = grade.score
    submission.instructor_feedback = grade.feedback
    submission.graded = True

    await db.commit()
    await db.refresh(submission)

    return submission
