"""
Tests for combined workout validation, ownership and session deletion.
"""
import pytest

from fitcoach.extensions import db
from fitcoach.models.combined_workout import CombinedWorkout
from fitcoach.models.session import TrainingSession
from fitcoach.models.workout import Workout
from fitcoach.services.composition import delete_session


def create_workout(client, headers, actor, name="Push", **extra):
    payload = {"name": name, "exercises": [{"exercise": {"name": "Bench"}, "sets": 3, "duration": 40}]}
    payload.update(extra)
    response = client.post("/api/workouts", json=payload, headers=headers(actor))
    assert response.status_code == 201, response.get_json()
    return response.get_json()["workout"]


class TestCombinedWorkoutValidation:
    def test_create(self, client, headers, coach):
        a = create_workout(client, headers, coach, "A")
        b = create_workout(client, headers, coach, "B")
        response = client.post("/api/combined-workouts", json={
            "name": "  Full body  ", "workout_ids": [b["id"], a["id"]],
        }, headers=headers(coach))
        assert response.status_code == 201
        data = response.get_json()["combined_workout"]
        assert data["name"] == "Full body"
        assert data["workout_count"] == 2
        assert [w["name"] for w in data["workouts"]] == ["B", "A"]

    def test_unknown_workout_fails_whole_create(self, client, headers, coach):
        a = create_workout(client, headers, coach, "A")
        response = client.post("/api/combined-workouts", json={
            "name": "Broken", "workout_ids": [a["id"], 9999],
        }, headers=headers(coach))
        assert response.status_code == 400
        errors = response.get_json()["errors"]
        assert any("9999" in e["message"] for e in errors)
        assert CombinedWorkout.query.count() == 0

    @pytest.mark.parametrize("payload", [
        {"name": "   ", "workout_ids": [1]},
        {"workout_ids": [1]},
        {"name": "Empty", "workout_ids": []},
        {"name": "Missing"},
    ])
    def test_name_and_workouts_required(self, client, headers, coach, payload):
        create_workout(client, headers, coach)
        response = client.post("/api/combined-workouts", json=payload, headers=headers(coach))
        assert response.status_code == 400
        assert CombinedWorkout.query.count() == 0

    def test_partial_update_keeps_omitted_fields(self, client, headers, coach):
        a = create_workout(client, headers, coach, "A")
        created = client.post("/api/combined-workouts", json={
            "name": "Bundle", "description": "Keep me", "workout_ids": [a["id"]],
        }, headers=headers(coach)).get_json()["combined_workout"]

        response = client.patch(f"/api/combined-workouts/{created['id']}", json={"name": "Renamed"},
                                headers=headers(coach))
        assert response.status_code == 200
        data = response.get_json()["combined_workout"]
        assert data["name"] == "Renamed"
        assert data["description"] == "Keep me"
        assert data["workout_ids"] == [a["id"]]

    def test_failed_update_changes_nothing(self, client, headers, coach):
        a = create_workout(client, headers, coach, "A")
        created = client.post("/api/combined-workouts", json={
            "name": "Bundle", "workout_ids": [a["id"]],
        }, headers=headers(coach)).get_json()["combined_workout"]

        response = client.put(f"/api/combined-workouts/{created['id']}", json={
            "name": "New name", "workout_ids": [a["id"], 4242],
        }, headers=headers(coach))
        assert response.status_code == 400
        combined = db.session.get(CombinedWorkout, created["id"])
        assert combined.name == "Bundle"
        assert combined.workout_ids == [a["id"]]

    def test_deleted_workout_reported_missing(self, client, headers, coach):
        a = create_workout(client, headers, coach, "A")
        b = create_workout(client, headers, coach, "B")
        created = client.post("/api/combined-workouts", json={
            "name": "Bundle", "workout_ids": [a["id"], b["id"]],
        }, headers=headers(coach)).get_json()["combined_workout"]

        assert client.delete(f"/api/workouts/{a['id']}", headers=headers(coach)).status_code == 200
        data = client.get(f"/api/combined-workouts/{created['id']}", headers=headers(coach)).get_json()
        data = data["combined_workout"]
        assert data["workout_count"] == 2
        assert [w["id"] for w in data["workouts"]] == [b["id"]]
        assert data["missing_workout_ids"] == [a["id"]]


class TestOwnership:
    def test_owner_may_update(self, client, headers, user):
        workout = create_workout(client, headers, user, "Mine")
        response = client.patch(f"/api/workouts/{workout['id']}", json={"notes": "ok"}, headers=headers(user))
        assert response.status_code == 200

    def test_other_user_rejected(self, client, headers, user, other_user):
        workout = create_workout(client, headers, user, "Mine", is_public=True)
        response = client.patch(f"/api/workouts/{workout['id']}", json={"name": "Stolen"},
                                headers=headers(other_user))
        assert response.status_code == 403
        assert db.session.get(Workout, workout["id"]).name == "Mine"

    def test_any_coach_may_mutate(self, client, headers, user, other_coach):
        workout = create_workout(client, headers, user, "Mine")
        response = client.delete(f"/api/workouts/{workout['id']}", headers=headers(other_coach))
        assert response.status_code == 200

    def test_admin_is_not_an_owner(self, client, headers, user, admin):
        session = client.post("/api/sessions", json={"name": "Mine"}, headers=headers(user)).get_json()["session"]
        response = client.delete(f"/api/sessions/{session['id']}", headers=headers(admin))
        assert response.status_code == 403

    def test_invisible_workout_is_not_found(self, client, headers, user, other_user):
        workout = create_workout(client, headers, user, "Private")
        response = client.get(f"/api/workouts/{workout['id']}", headers=headers(other_user))
        assert response.status_code == 404


class TestSessionDelete:
    @pytest.fixture
    def populated(self, coach):
        session = TrainingSession(name="Day", created_by=coach.id)
        db.session.add(session)
        db.session.commit()
        workout = Workout(name="W", created_by=coach.id, exercises=[], session_id=session.id, order=1)
        db.session.add(workout)
        db.session.commit()
        combined = CombinedWorkout(name="C", created_by=coach.id, workout_ids=[workout.id],
                                   session_id=session.id, order=1)
        db.session.add(combined)
        db.session.commit()
        return session.id, workout.id, combined.id

    def test_cascade_all(self, populated):
        session_id, workout_id, combined_id = populated
        delete_session(db.session.get(TrainingSession, session_id), "cascade-all")
        db.session.commit()
        assert db.session.get(Workout, workout_id) is None
        assert db.session.get(CombinedWorkout, combined_id) is None

    def test_cascade_workouts(self, populated):
        session_id, workout_id, combined_id = populated
        delete_session(db.session.get(TrainingSession, session_id), "cascade-workouts")
        db.session.commit()
        assert db.session.get(Workout, workout_id) is None
        combined = db.session.get(CombinedWorkout, combined_id)
        assert combined.session_id is None and combined.order is None

    def test_none_detaches(self, populated):
        session_id, workout_id, combined_id = populated
        delete_session(db.session.get(TrainingSession, session_id), "none")
        db.session.commit()
        assert db.session.get(TrainingSession, session_id) is None
        assert db.session.get(Workout, workout_id).session_id is None
        assert db.session.get(CombinedWorkout, combined_id).session_id is None

    def test_endpoint_uses_configured_policy(self, app, client, headers, coach, populated):
        app.config["SESSION_CASCADE_POLICY"] = "none"
        session_id, workout_id, _ = populated
        response = client.delete(f"/api/sessions/{session_id}", headers=headers(coach))
        assert response.status_code == 200
        assert response.get_json()["policy"] == "none"
        assert db.session.get(Workout, workout_id) is not None
