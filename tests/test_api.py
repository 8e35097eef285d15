from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from main import app
from skillcheck.infrastructure.db.models import Question
from skillcheck.presentation.dependencies import get_clock, get_db, get_random_source

from conftest import WINDOW_END, WINDOW_START

ADMIN = {"X-Admin-Token": "test-admin-token"}


def bearer(session):
    return {"Authorization": f"Bearer {session.token}"}


@pytest.fixture
def client(db, clock, rand):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_random_source] = lambda: rand
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def assessment_id(client):
    for i in range(3):
        response = client.post(
            "/admin/questions",
            json={
                "description": f"Pick option {i}",
                "type": "mcq",
                "choices": ["A", "B", "C", "D"],
                "answer_index": i,
            },
            headers=ADMIN,
        )
        assert response.status_code == 201
    response = client.post(
        "/admin/questions",
        json={"description": "Implement binary search", "type": "coding"},
        headers=ADMIN,
    )
    assert response.status_code == 201

    response = client.post(
        "/admin/assessments",
        json={
            "name": "Backend screening",
            "start_date": WINDOW_START.isoformat(),
            "end_date": WINDOW_END.isoformat(),
            "total_questions": 4,
            "question_distribution": {"mcq": 3, "coding": 1},
        },
        headers=ADMIN,
    )
    assert response.status_code == 201
    return response.json()["id"]


def test_admin_routes_require_token(client):
    response = client.post(
        "/admin/questions",
        json={"description": "x", "type": "mcq", "choices": ["a", "b", "c", "d"], "answer_index": 0},
    )

    assert response.status_code == 403


def test_candidate_routes_require_bearer(client):
    assert client.get("/assessments").status_code == 401
    assert client.get("/attempts/active", headers={"Authorization": "Bearer nope"}).status_code == 401


def test_full_attempt_flow(client, db, clock, assessment_id, make_candidate_session):
    session = make_candidate_session()
    auth = bearer(session)

    listed = client.get("/assessments", headers=auth)
    assert [a["id"] for a in listed.json()] == [assessment_id]

    started = client.post(f"/assessments/{assessment_id}/start", headers=auth)
    assert started.status_code == 201
    attempt = started.json()
    assert attempt["status"] == "InProgress"
    assert [d["order"] for d in attempt["details"]] == [1, 2, 3, 4]
    assert [d["question"]["type"] for d in attempt["details"]] == ["mcq", "mcq", "mcq", "coding"]
    assert all("answer_id" not in d["question"] for d in attempt["details"])

    first = attempt["details"][0]
    answer_id = db.get(Question, first["question"]["id"]).answer_id
    saved = client.put(f"/attempts/details/{first['id']}/answer", json={"choice_id": answer_id}, headers=auth)
    assert saved.json() == {"id": first["id"], "attempted": True}

    bad = client.put(f"/attempts/details/{first['id']}/answer", json={"choice_id": "bogus"}, headers=auth)
    assert bad.status_code == 400
    assert bad.json()["detail"] == "Invalid option"

    proctoring = client.put(
        f"/attempts/{attempt['id']}/proctoring",
        json={"is_assessment_consent_provided": True, "is_full_screen_access_provided": True},
        headers=auth,
    )
    assert proctoring.status_code == 200
    assert proctoring.json()["integrity"] == "good"

    event = client.post(
        f"/attempts/{attempt['id']}/proctoring/events", json={"event": "fullscreen-exit"}, headers=auth
    )
    assert event.json()["proctoring"]["full_screen_exits"] == 1

    clock.advance(minutes=15)
    completed = client.post(f"/attempts/{attempt['id']}/complete", headers=auth)
    assert completed.status_code == 201
    submission = completed.json()
    assert submission["total_score"] == 2
    assert submission["attempted_questions"] == 1
    assert submission["correct_answers"] == 1
    assert submission["duration"] == 15 * 60 * 1000

    fetched = client.get(f"/attempts/{attempt['id']}/submission", headers=auth)
    assert fetched.json()["id"] == submission["id"]

    again = client.post(f"/attempts/{attempt['id']}/complete", headers=auth)
    assert again.status_code == 409


def test_double_start_conflicts(client, assessment_id, make_candidate_session):
    auth = bearer(make_candidate_session())

    assert client.post(f"/assessments/{assessment_id}/start", headers=auth).status_code == 201
    second = client.post(f"/assessments/{assessment_id}/start", headers=auth)

    assert second.status_code == 409
    assert client.get("/attempts/active", headers=auth).status_code == 200


def test_start_outside_window_is_unprocessable(client, clock, assessment_id, make_candidate_session):
    auth = bearer(make_candidate_session(expires_at=WINDOW_END + timedelta(days=1)))
    clock.current = WINDOW_END + timedelta(minutes=1)

    response = client.post(f"/assessments/{assessment_id}/start", headers=auth)

    assert response.status_code == 422
    assert response.json()["detail"] == "Assessment has expired"


def test_attempts_are_private_to_their_candidate(client, assessment_id, make_candidate_session):
    owner = bearer(make_candidate_session())
    stranger = bearer(make_candidate_session())
    attempt_id = client.post(f"/assessments/{assessment_id}/start", headers=owner).json()["id"]

    assert client.get(f"/attempts/{attempt_id}", headers=owner).status_code == 200
    assert client.get(f"/attempts/{attempt_id}", headers=stranger).status_code == 404
    assert client.post(f"/attempts/{attempt_id}/complete", headers=stranger).status_code == 404
