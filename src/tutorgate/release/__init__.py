"""
Release Module

Content entitlement, scheduled publication, weekly curriculum release and
automatic submission scoring.
"""

from .assignments import (
    InvalidAssignmentInput,
    UnknownContentItem,
    set_class_assignments,
    set_direct_assignments,
)
from .attempts import AttemptPolicy, SubmissionRejected
from .audience import AudienceResolver, Caller, ContentAudience
from .curriculum import CurriculumScheduler, run_curriculum_sweep
from .publication import initial_publication, is_visible, run_publication_sweep
from .scoring import grade_submission, score_submission

__all__ = [
    "AttemptPolicy",
    "AudienceResolver",
    "Caller",
    "ContentAudience",
    "CurriculumScheduler",
    "InvalidAssignmentInput",
    "SubmissionRejected",
    "UnknownContentItem",
    "grade_submission",
    "initial_publication",
    "is_visible",
    "run_curriculum_sweep",
    "run_publication_sweep",
    "score_submission",
    "set_class_assignments",
    "set_direct_assignments",
]
