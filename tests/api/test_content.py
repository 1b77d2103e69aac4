"""
Tests for Content API Endpoints

Visibility per caller, creation with an initial publication state and
assignment replacement.
"""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

from tutorgate.core.models import ContentItem, Enrollment, User


class TestIdentity:
    async def test_missing_headers(self, client):
        response = await client.get("/api/v1/content")

        assert response.status_code == 401

    async def test_unknown_role(self, client):
        response = await client.get(
            "/api/v1/content", headers={"X-Subject-Id": str(uuid4()), "X-Subject-Role": "guest"}
        )

        assert response.status_code == 403

    async def test_malformed_subject(self, client):
        response = await client.get(
            "/api/v1/content", headers={"X-Subject-Id": "42", "X-Subject-Role": "student"}
        )

        assert response.status_code == 401


class TestListContent:
    async def test_unassigned_exercise_visible_to_every_student(
        self, client, people, exercise, auth_headers
    ):
        for name in ("ana", "bruno", "carla"):
            response = await client.get("/api/v1/content", headers=auth_headers(people[name]))

            assert response.status_code == 200
            assert [item["id"] for item in response.json()] == [str(exercise.id)]

    async def test_student_view_hides_reference_answer(
        self, client, people, exercise, auth_headers
    ):
        response = await client.get("/api/v1/content", headers=auth_headers(people["ana"]))

        assert "reference_answer" not in response.json()[0]

    async def test_staff_view_includes_publication(self, client, people, exercise, auth_headers):
        response = await client.get("/api/v1/content", headers=auth_headers(people["instructor"]))

        body = response.json()[0]
        assert body["publication_status"] == "published"
        assert body["reference_answer"] == exercise.reference_answer

    async def test_kind_filter(self, client, db_session, people, exercise, auth_headers):
        db_session.add(ContentItem(kind="video_lesson", title="Intro video", video_url="https://v"))
        await db_session.commit()

        response = await client.get(
            "/api/v1/content", params={"kind": "video_lesson"}, headers=auth_headers(people["ana"])
        )

        assert [item["title"] for item in response.json()] == ["Intro video"]

    async def test_drafts_and_templates_hidden_from_students(
        self, client, db_session, people, auth_headers
    ):
        db_session.add_all(
            [
                ContentItem(kind="material", title="Draft notes", publication_status="draft"),
                ContentItem(kind="exercise", title="Template", is_template=True),
            ]
        )
        await db_session.commit()

        student = await client.get("/api/v1/content", headers=auth_headers(people["ana"]))
        admin = await client.get("/api/v1/content", headers=auth_headers(people["admin"]))

        assert student.json() == []
        assert len(admin.json()) == 2


class TestCreateContent:
    async def test_release_time_schedules_item(self, client, people, auth_headers):
        release_at = (datetime.now(UTC) + timedelta(days=1)).isoformat()

        response = await client.post(
            "/api/v1/content",
            json={
                "kind": "material",
                "title": "Week 2 reading",
                "published": True,
                "release_at": release_at,
            },
            headers=auth_headers(people["instructor"]),
        )

        assert response.status_code == 201
        body = response.json()
        assert body["publication_status"] == "scheduled"
        assert body["author_id"] == str(people["instructor"].id)

        listing = await client.get("/api/v1/content", headers=auth_headers(people["ana"]))
        assert listing.json() == []

    async def test_unpublished_is_draft(self, client, people, auth_headers):
        response = await client.post(
            "/api/v1/content",
            json={"kind": "exercise", "title": "Work in progress", "published": False},
            headers=auth_headers(people["admin"]),
        )

        assert response.json()["publication_status"] == "draft"

    async def test_choice_rules_need_question_objects(self, client, people, auth_headers):
        response = await client.post(
            "/api/v1/content",
            json={
                "kind": "exercise",
                "title": "Quiz",
                "exercise_type": "multiple_choice",
                "choice_rules": {"questions": ["a"]},
            },
            headers=auth_headers(people["admin"]),
        )

        assert response.status_code == 422

    async def test_students_cannot_create(self, client, people, auth_headers):
        response = await client.post(
            "/api/v1/content",
            json={"kind": "material", "title": "Mine"},
            headers=auth_headers(people["ana"]),
        )

        assert response.status_code == 403

    async def test_only_exercises_can_be_templates(self, client, people, auth_headers):
        response = await client.post(
            "/api/v1/content",
            json={"kind": "material", "title": "Bad template", "is_template": True},
            headers=auth_headers(people["admin"]),
        )

        assert response.status_code == 422


class TestAssignments:
    async def test_class_assignment_restricts_audience(
        self, client, people, class_a, exercise, auth_headers
    ):
        response = await client.put(
            f"/api/v1/content/{exercise.id}/classes",
            json={"ids": [str(class_a.id)]},
            headers=auth_headers(people["instructor"]),
        )
        assert response.status_code == 200
        assert response.json()["ids"] == [str(class_a.id)]

        ana = await client.get(f"/api/v1/content/{exercise.id}", headers=auth_headers(people["ana"]))
        carla = await client.get(
            f"/api/v1/content/{exercise.id}", headers=auth_headers(people["carla"])
        )

        assert ana.status_code == 200
        assert carla.status_code == 404

    async def test_direct_assignment_overrides_class(
        self, client, people, class_a, exercise, auth_headers
    ):
        staff = auth_headers(people["instructor"])
        await client.put(
            f"/api/v1/content/{exercise.id}/classes", json={"ids": [str(class_a.id)]}, headers=staff
        )
        await client.put(
            f"/api/v1/content/{exercise.id}/students",
            json={"ids": [str(people["carla"].id)]},
            headers=staff,
        )

        audience = await client.get(f"/api/v1/content/{exercise.id}/audience", headers=staff)

        body = audience.json()
        assert body["rule"] == "direct"
        assert body["entitled_student_ids"] == [str(people["carla"].id)]
        assert body["class_ids"] == [str(class_a.id)]

    async def test_invalid_id_is_bad_request(self, client, people, exercise, auth_headers):
        response = await client.put(
            f"/api/v1/content/{exercise.id}/students",
            json={"ids": ["not-an-id"]},
            headers=auth_headers(people["admin"]),
        )

        assert response.status_code == 400

    async def test_unknown_student_is_bad_request(self, client, people, exercise, auth_headers):
        response = await client.put(
            f"/api/v1/content/{exercise.id}/students",
            json={"ids": [str(uuid4())]},
            headers=auth_headers(people["admin"]),
        )

        assert response.status_code == 400

    async def test_staff_id_is_not_a_student(self, client, people, exercise, auth_headers):
        response = await client.put(
            f"/api/v1/content/{exercise.id}/students",
            json={"ids": [str(people["instructor"].id)]},
            headers=auth_headers(people["admin"]),
        )

        assert response.status_code == 400

    async def test_unknown_item(self, client, people, auth_headers):
        response = await client.put(
            f"/api/v1/content/{uuid4()}/classes",
            json={"ids": []},
            headers=auth_headers(people["admin"]),
        )

        assert response.status_code == 404

    async def test_audience_defaults_to_everyone(self, client, people, exercise, auth_headers):
        response = await client.get(
            f"/api/v1/content/{exercise.id}/audience", headers=auth_headers(people["admin"])
        )

        body = response.json()
        assert body["rule"] == "everyone"
        assert body["visible_now"] is True
        assert len(body["entitled_student_ids"]) == 3

    async def test_inactive_enrolled_student_left_out(
        self, client, db_session, people, class_a, exercise, auth_headers
    ):
        former = User(
            full_name="Former", email="former@example.com", role="student", is_active=False
        )
        db_session.add(former)
        await db_session.flush()
        db_session.add(Enrollment(student_id=former.id, class_id=class_a.id))
        await db_session.commit()
        url = f"/api/v1/content/{exercise.id}/audience"
        staff = auth_headers(people["admin"])

        everyone = await client.get(url, headers=staff)
        await client.put(
            f"/api/v1/content/{exercise.id}/classes", json={"ids": [str(class_a.id)]}, headers=staff
        )
        by_class = await client.get(url, headers=staff)

        assert str(former.id) not in everyone.json()["entitled_student_ids"]
        assert len(everyone.json()["entitled_student_ids"]) == 3
        assert sorted(by_class.json()["entitled_student_ids"]) == sorted(
            [str(people["ana"].id), str(people["bruno"].id)]
        )
