"""
Tests for Submission API Endpoints
"""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from tutorgate.core.models import ContentClassAssignment, ContentItem, Submission


@pytest.fixture
async def code_exercise(db_session, people) -> ContentItem:
    item = ContentItem(
        kind="exercise",
        title="Print one",
        reference_answer="print(1)",
        answer_kind="code",
        allow_repetition=True,
        max_attempts=2,
        attempt_penalty_percent=20,
        publication_status="published",
    )
    db_session.add(item)
    await db_session.commit()
    return item


class TestCreateSubmission:
    async def test_text_answer_is_scored(self, client, people, exercise, auth_headers):
        response = await client.post(
            f"/api/v1/content/{exercise.id}/submissions",
            json={"answer": exercise.reference_answer.upper(), "answer_kind": "text"},
            headers=auth_headers(people["ana"]),
        )

        assert response.status_code == 201
        body = response.json()
        assert body["score"] == 100
        assert body["graded"] is True
        assert body["attempt_number"] == 1
        assert body["is_late"] is False

    async def test_second_attempt_is_penalised(self, client, people, code_exercise, auth_headers):
        url = f"/api/v1/content/{code_exercise.id}/submissions"
        payload = {"answer": "print(1)", "answer_kind": "code"}
        headers = auth_headers(people["bruno"])

        first = await client.post(url, json=payload, headers=headers)
        second = await client.post(url, json=payload, headers=headers)
        third = await client.post(url, json=payload, headers=headers)

        assert first.json()["score"] == 100
        assert second.json()["score"] == 80
        assert second.json()["attempt_number"] == 2
        assert third.status_code == 400
        assert "Attempt limit" in third.json()["detail"]

    async def test_repetition_disabled(self, client, people, exercise, auth_headers):
        url = f"/api/v1/content/{exercise.id}/submissions"
        headers = auth_headers(people["ana"])

        await client.post(url, json={"answer": "one", "answer_kind": "text"}, headers=headers)
        again = await client.post(url, json={"answer": "two", "answer_kind": "text"}, headers=headers)

        assert again.status_code == 400

    async def test_past_deadline_rejected(self, client, db_session, people, exercise, auth_headers):
        exercise.due_at = datetime.now(UTC) - timedelta(minutes=1)
        await db_session.commit()

        response = await client.post(
            f"/api/v1/content/{exercise.id}/submissions",
            json={"answer": "late", "answer_kind": "text"},
            headers=auth_headers(people["ana"]),
        )

        assert response.status_code == 400
        assert "deadline" in response.json()["detail"]

    async def test_empty_answer_rejected(self, client, people, exercise, auth_headers):
        response = await client.post(
            f"/api/v1/content/{exercise.id}/submissions",
            json={"answer": "   ", "answer_kind": "text"},
            headers=auth_headers(people["ana"]),
        )

        assert response.status_code == 400

    async def test_not_entitled_student_gets_404(
        self, client, db_session, people, class_a, exercise, auth_headers
    ):
        db_session.add(ContentClassAssignment(content_id=exercise.id, class_id=class_a.id))
        await db_session.commit()

        response = await client.post(
            f"/api/v1/content/{exercise.id}/submissions",
            json={"answer": "hello", "answer_kind": "text"},
            headers=auth_headers(people["carla"]),
        )

        assert response.status_code == 404

    async def test_staff_cannot_submit(self, client, people, exercise, auth_headers):
        response = await client.post(
            f"/api/v1/content/{exercise.id}/submissions",
            json={"answer": "hello", "answer_kind": "text"},
            headers=auth_headers(people["instructor"]),
        )

        assert response.status_code == 403

    async def test_incomplete_multiple_choice(self, client, db_session, people, auth_headers):
        quiz = ContentItem(
            kind="exercise",
            title="Quiz",
            exercise_type="multiple_choice",
            choice_rules={"questions": [{"correct": "a"}, {"correct": "b"}]},
            publication_status="published",
        )
        db_session.add(quiz)
        await db_session.commit()
        url = f"/api/v1/content/{quiz.id}/submissions"
        headers = auth_headers(people["ana"])

        partial = await client.post(
            url, json={"answer": '{"q0": "a"}', "answer_kind": "text"}, headers=headers
        )
        complete = await client.post(
            url, json={"answer": '{"q0": "a", "q1": "c"}', "answer_kind": "text"}, headers=headers
        )

        assert partial.status_code == 400
        assert complete.status_code == 201
        assert complete.json()["score"] == 50

    async def test_stored_rules_without_question_objects(
        self, client, db_session, people, auth_headers
    ):
        quiz = ContentItem(
            kind="exercise",
            title="Broken quiz",
            exercise_type="multiple_choice",
            choice_rules={"questions": ["a"]},
            publication_status="published",
        )
        db_session.add(quiz)
        await db_session.commit()

        response = await client.post(
            f"/api/v1/content/{quiz.id}/submissions",
            json={"answer": '{"q0": "a"}', "answer_kind": "text"},
            headers=auth_headers(people["ana"]),
        )

        assert response.status_code == 400
        assert "Invalid multiple-choice rules" in response.json()["detail"]


class TestSubmissionHistory:
    async def test_mine_survives_losing_entitlement(
        self, client, db_session, people, class_a, exercise, auth_headers
    ):
        headers = auth_headers(people["carla"])
        await client.post(
            f"/api/v1/content/{exercise.id}/submissions",
            json={"answer": "my answer", "answer_kind": "text"},
            headers=headers,
        )

        db_session.add(ContentClassAssignment(content_id=exercise.id, class_id=class_a.id))
        await db_session.commit()

        mine = await client.get("/api/v1/submissions/mine", headers=headers)

        assert [s["content_id"] for s in mine.json()] == [str(exercise.id)]

    async def test_staff_review_includes_adherence(self, client, people, exercise, auth_headers):
        await client.post(
            f"/api/v1/content/{exercise.id}/submissions",
            json={"answer": exercise.reference_answer, "answer_kind": "text"},
            headers=auth_headers(people["ana"]),
        )

        response = await client.get(
            f"/api/v1/content/{exercise.id}/submissions",
            headers=auth_headers(people["instructor"]),
        )

        assert response.status_code == 200
        assert response.json()[0]["description_adherence"] == 100

    async def test_review_of_material_is_not_found(self, client, db_session, people, auth_headers):
        notes = ContentItem(kind="material", title="Notes", publication_status="published")
        db_session.add(notes)
        await db_session.commit()

        response = await client.get(
            f"/api/v1/content/{notes.id}/submissions",
            headers=auth_headers(people["instructor"]),
        )

        assert response.status_code == 404


class TestManualGrade:
    async def test_instructor_grades_submission(
        self, client, db_session, people, exercise, auth_headers
    ):
        submission = Submission(
            content_id=exercise.id,
            student_id=people["ana"].id,
            answer="essay",
            answer_kind="text",
        )
        db_session.add(submission)
        await db_session.commit()

        response = await client.put(
            f"/api/v1/submissions/{submission.id}/grade",
            json={"score": 87.5, "feedback": "Good structure"},
            headers=auth_headers(people["instructor"]),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["score"] == 87.5
        assert body["graded"] is True
        assert body["instructor_feedback"] == "Good structure"

    async def test_unknown_submission(self, client, people, auth_headers):
        response = await client.put(
            f"/api/v1/submissions/{uuid4()}/grade",
            json={"score": 50},
            headers=auth_headers(people["admin"]),
        )

        assert response.status_code == 404

    async def test_score_out_of_range(self, client, people, auth_headers):
        response = await client.put(
            f"/api/v1/submissions/{uuid4()}/grade",
            json={"score": 120},
            headers=auth_headers(people["admin"]),
        )

        assert response.status_code == 422
