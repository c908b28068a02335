"""
Test API Flow
Blueprint authoring and the attempt round trip through the DRF endpoints.
"""
from datetime import timedelta

import pytest
from django.utils import timezone

from exams.models import Attempt, Blueprint

pytestmark = pytest.mark.django_db


def _flat_payload(questions, **extra):
    return {
        "title": "API Mock",
        "duration_minutes": 45,
        "questions": [{"question": str(q.pk), "marks": "1"} for q in questions],
        **extra,
    }


@pytest.fixture
def blueprint(api_client, teacher, questions):
    api_client.force_authenticate(teacher)
    res = api_client.post("/api/blueprints/", _flat_payload(questions[:3]), format="json")
    assert res.status_code == 201, res.data
    api_client.force_authenticate(None)
    return Blueprint.objects.get(pk=res.data["id"])


class TestBlueprintEndpoints:
    def test_anonymous_is_rejected(self, api_client):
        res = api_client.get("/api/blueprints/")
        assert res.status_code == 401

    def test_teacher_creates_blueprint(self, api_client, teacher, questions):
        api_client.force_authenticate(teacher)
        res = api_client.post("/api/blueprints/", _flat_payload(questions[:2]), format="json")
        assert res.status_code == 201
        assert res.data["title"] == "API Mock"
        assert len(res.data["questions"]) == 2
        assert res.data["sections"] == []

    def test_too_few_questions_is_blueprint_invalid(self, api_client, teacher, questions):
        api_client.force_authenticate(teacher)
        res = api_client.post("/api/blueprints/", _flat_payload(questions[:1]), format="json")
        assert res.status_code == 400
        assert res.data["code"] == "blueprint_invalid"
        assert not Blueprint.objects.exists()

    def test_student_cannot_author(self, api_client, student, questions):
        api_client.force_authenticate(student)
        res = api_client.post("/api/blueprints/", _flat_payload(questions[:2]), format="json")
        assert res.status_code == 403

    def test_student_can_list_and_filter(self, api_client, student, blueprint):
        api_client.force_authenticate(student)
        res = api_client.get("/api/blueprints/", {"mode": "practice"})
        assert res.status_code == 200
        assert [row["id"] for row in res.data["results"]] == [str(blueprint.pk)]
        res = api_client.get("/api/blueprints/", {"mode": "live"})
        assert res.data["results"] == []

    def test_delete_is_not_allowed(self, api_client, teacher, blueprint):
        api_client.force_authenticate(teacher)
        res = api_client.delete(f"/api/blueprints/{blueprint.pk}/")
        assert res.status_code == 405

    def test_patch_updates_scalars(self, api_client, teacher, blueprint):
        api_client.force_authenticate(teacher)
        res = api_client.patch(f"/api/blueprints/{blueprint.pk}/", {"max_attempts": 2}, format="json")
        assert res.status_code == 200
        assert res.data["max_attempts"] == 2
        assert len(res.data["questions"]) == 3

    def test_clone(self, api_client, teacher, blueprint):
        api_client.force_authenticate(teacher)
        res = api_client.post(f"/api/blueprints/{blueprint.pk}/clone/")
        assert res.status_code == 201
        assert res.data["title"] == "API Mock (Clone)"
        assert len(res.data["questions"]) == 3

    def test_random(self, api_client, teacher, questions):
        api_client.force_authenticate(teacher)
        res = api_client.post("/api/blueprints/random/", {"count": 5, "title": "Drill"}, format="json")
        assert res.status_code == 201
        assert len(res.data["questions"]) == 5

    def test_preview_is_reproducible(self, api_client, teacher, blueprint):
        api_client.force_authenticate(teacher)
        url = f"/api/blueprints/{blueprint.pk}/preview/"
        first = api_client.get(url, {"seed": "7"})
        second = api_client.get(url, {"seed": "7"})
        assert first.status_code == 200
        assert first.data["items"] == second.data["items"]
        assert first.data["max_score"] == 3.0
        assert Attempt.objects.count() == 0


class TestAttemptFlow:
    def test_full_round_trip(self, api_client, student, blueprint, questions):
        api_client.force_authenticate(student)
        res = api_client.post("/api/attempts/start/", {"blueprint_id": str(blueprint.pk)}, format="json")
        assert res.status_code == 201, res.data
        attempt_id = res.data["attempt_id"]
        assert len(res.data["items"]) == 3
        assert all("is_correct" not in opt for it in res.data["items"] for opt in it["options"])

        paper = api_client.get(f"/api/attempts/{attempt_id}/paper/")
        assert [it["question_id"] for it in paper.data["items"]] == [str(q.pk) for q in questions[:3]]

        early_review = api_client.get(f"/api/attempts/{attempt_id}/review/")
        assert early_review.status_code == 400
        assert early_review.data["code"] == "invalid_input"

        responses = [
            {"question_id": str(questions[0].pk), "selected_option_indices": [0]},
            {"question_id": str(questions[1].pk), "selected_option_indices": [1]},
            {"question_id": str(questions[2].pk), "selected_option_indices": [0]},
        ]
        res = api_client.post(f"/api/attempts/{attempt_id}/submit/", {"responses": responses}, format="json")
        assert res.status_code == 200
        assert (res.data["score"], res.data["max_score"], res.data["percentage"]) == (2.0, 3.0, 67)

        again = api_client.post(f"/api/attempts/{attempt_id}/submit/", {"responses": responses}, format="json")
        assert again.status_code == 409
        assert again.data["code"] == "already_submitted"

        review = api_client.get(f"/api/attempts/{attempt_id}/review/")
        assert review.status_code == 200
        assert [r["is_correct"] for r in review.data["responses"]] == [True, True, False]

        mine = api_client.get("/api/attempts/mine/")
        assert [a["id"] for a in mine.data] == [attempt_id]

    def test_not_yet_open_has_its_own_code(self, api_client, student, blueprint):
        blueprint.start_at = timezone.now() + timedelta(days=1)
        blueprint.save()
        api_client.force_authenticate(student)
        res = api_client.post("/api/attempts/start/", {"blueprint_id": str(blueprint.pk)}, format="json")
        assert res.status_code == 403
        assert res.data["code"] == "not_yet_open"

    def test_closed_has_its_own_code(self, api_client, student, blueprint):
        blueprint.end_at = timezone.now() - timedelta(days=1)
        blueprint.save()
        api_client.force_authenticate(student)
        res = api_client.post("/api/attempts/start/", {"blueprint_id": str(blueprint.pk)}, format="json")
        assert res.data["code"] == "closed"

    def test_attempt_limit(self, api_client, student, blueprint):
        api_client.force_authenticate(student)
        url = "/api/attempts/start/"
        assert api_client.post(url, {"blueprint_id": str(blueprint.pk)}, format="json").status_code == 201
        res = api_client.post(url, {"blueprint_id": str(blueprint.pk)}, format="json")
        assert res.status_code == 429
        assert res.data["code"] == "attempt_limit_reached"

    def test_unknown_blueprint(self, api_client, student):
        api_client.force_authenticate(student)
        res = api_client.post("/api/attempts/start/",
                              {"blueprint_id": "00000000-0000-0000-0000-000000000000"}, format="json")
        assert res.status_code == 404
        assert res.data["code"] == "not_found"

    def test_malformed_submit(self, api_client, student, blueprint):
        api_client.force_authenticate(student)
        start = api_client.post("/api/attempts/start/", {"blueprint_id": str(blueprint.pk)}, format="json")
        res = api_client.post(f"/api/attempts/{start.data['attempt_id']}/submit/",
                              {"responses": "nope"}, format="json")
        assert res.status_code == 400
        assert res.data["code"] == "invalid_input"

    def test_only_the_owner_sees_an_attempt(self, api_client, student, other_student, blueprint):
        api_client.force_authenticate(student)
        start = api_client.post("/api/attempts/start/", {"blueprint_id": str(blueprint.pk)}, format="json")
        api_client.force_authenticate(other_student)
        res = api_client.get(f"/api/attempts/{start.data['attempt_id']}/paper/")
        assert res.status_code == 404

    def test_teacher_cannot_start(self, api_client, teacher, blueprint):
        api_client.force_authenticate(teacher)
        res = api_client.post("/api/attempts/start/", {"blueprint_id": str(blueprint.pk)}, format="json")
        assert res.status_code == 403
