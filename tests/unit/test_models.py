"""
Unit Tests for Database Models

Mapper configuration and the publication variant on content rows. No database
connection is needed.
"""

from datetime import UTC, datetime

from tutorgate.core.models import Base, ClassGroup, ContentItem, Submission, User
from tutorgate.release.publication import Draft, Published, Scheduled
from tutorgate.release.repo_db import audience_of, schedule_of


def test_all_tables_registered():
    assert {
        "users",
        "class_groups",
        "enrollments",
        "content_items",
        "content_student_assignments",
        "content_class_assignments",
        "curriculum_entries",
        "submissions",
    } <= set(Base.metadata.tables)


def test_new_rows_get_ids_and_timestamps():
    user = User(full_name="Ana", email="ana@example.com", role="student")

    assert user.id is not None
    assert user.created_at.tzinfo is not None
    assert user.is_student is True


class TestContentPublication:
    def test_publication_setter_writes_both_columns(self):
        release_at = datetime(2026, 4, 1, 9, 0, tzinfo=UTC)
        item = ContentItem(kind="material", title="Reading list")

        item.publication = Scheduled(release_at=release_at)

        assert item.publication_status == "scheduled"
        assert item.release_at == release_at
        assert item.publication == Scheduled(release_at=release_at)

    def test_draft_clears_release_time(self):
        item = ContentItem(kind="exercise", title="Loops")
        item.publication = Scheduled(release_at=datetime(2026, 4, 1, tzinfo=UTC))

        item.publication = Draft()

        assert (item.publication_status, item.release_at) == ("draft", None)

    def test_published_row(self):
        item = ContentItem(kind="video_lesson", title="Intro", publication_status="published")

        assert item.publication == Published()


def test_audience_of_reads_assignment_collections():
    item = ContentItem(kind="exercise", title="E", publication_status="published", is_template=False)

    audience = audience_of(item)

    assert audience.item_id == item.id
    assert audience.direct_student_ids == frozenset()
    assert audience.class_ids == frozenset()


def test_schedule_of_class_group():
    group = ClassGroup(
        name="Evening", schedule_active=True, is_active=True, duration_weeks=8, start_date=None
    )

    schedule = schedule_of(group)

    assert schedule.class_id == group.id
    assert schedule.duration_weeks == 8
    assert schedule.start_date is None


def test_submission_defaults_are_ungraded():
    submission = Submission(answer="x", answer_kind="text", graded=False)

    assert submission.score is None
    assert submission.graded is False
