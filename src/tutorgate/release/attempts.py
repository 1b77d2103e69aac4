"""
Attempt policy for exercise submissions.

Checked before a submission is stored: due date, repetition, attempt limit and
the minimum wait between attempts.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


class SubmissionRejected(Exception):
    """Raised when a submission is not allowed right now."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


@dataclass(frozen=True)
class AttemptPolicy:
    """Submission rules of one exercise."""

    due_at: datetime | None = None
    allow_repetition: bool = False
    max_attempts: int | None = None
    resubmit_interval_minutes: int | None = None
    penalty_percent: int = 0

    @classmethod
    def from_content(cls, item: Any) -> AttemptPolicy:
        """Read the policy columns of a content item."""
        return cls(
            due_at=item.due_at,
            allow_repetition=bool(item.allow_repetition),
            max_attempts=item.max_attempts,
            resubmit_interval_minutes=item.resubmit_interval_minutes,
            penalty_percent=item.attempt_penalty_percent or 0,
        )

    def is_late(self, now: datetime) -> bool:
        return self.due_at is not None and now > self.due_at

    def check(
        self, previous_attempts: int, last_submitted_at: datetime | None, now: datetime
    ) -> None:
        """Validate a new attempt.

        Args:
            previous_attempts: Submissions the student already made for this exercise
            last_submitted_at: Time of the latest of them
            now: Current time

        Raises:
            SubmissionRejected: With a user-facing reason
        """
        if self.due_at is not None and now >= self.due_at:
            raise SubmissionRejected("The deadline for this exercise has passed.")

        if previous_attempts == 0:
            return

        if not self.allow_repetition:
            raise SubmissionRejected("You have already submitted an answer for this exercise.")

        if self.max_attempts is not None and previous_attempts >= self.max_attempts:
            raise SubmissionRejected("Attempt limit reached for this exercise.")

        if self.resubmit_interval_minutes is not None and last_submitted_at is not None:
            waited = int((now - last_submitted_at).total_seconds() // 60)
            if waited < self.resubmit_interval_minutes:
                remaining = self.resubmit_interval_minutes - waited
                raise SubmissionRejected(
                    f"Wait {remaining} minute(s) before submitting another answer."
                )
