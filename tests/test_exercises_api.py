"""
Tests for the exercise library endpoints.
"""
from fitcoach.extensions import db
from fitcoach.models import workout as workout_models
from fitcoach.models.exercise import Exercise, DIFFICULTY_LEVELS
from fitcoach.schemas import training as training_schemas


def create_exercise(client, headers, actor, **extra):
    payload = {"name": "Squat", "category": "strength", "default_sets": 4}
    payload.update(extra)
    response = client.post("/api/exercises", json=payload, headers=headers(actor))
    assert response.status_code == 201, response.get_json()
    return response.get_json()["exercise"]


class TestExerciseUpdate:
    def test_partial_update(self, client, headers, coach):
        exercise = create_exercise(client, headers, coach)
        response = client.put(f"/api/exercises/{exercise['id']}", json={"default_reps": 12},
                              headers=headers(coach))
        assert response.status_code == 200
        data = response.get_json()["exercise"]
        assert data["default_reps"] == 12
        assert data["name"] == "Squat"
        assert data["default_sets"] == 4

    def test_update_validated(self, client, headers, coach):
        exercise = create_exercise(client, headers, coach)
        response = client.put(f"/api/exercises/{exercise['id']}", json={"category": "juggling"},
                              headers=headers(coach))
        assert response.status_code == 400
        assert db.session.get(Exercise, exercise["id"]).category == "strength"

    def test_users_cannot_update(self, client, headers, coach, user):
        exercise = create_exercise(client, headers, coach)
        response = client.put(f"/api/exercises/{exercise['id']}", json={"name": "Mine"}, headers=headers(user))
        assert response.status_code == 403

    def test_unknown_exercise(self, client, headers, coach):
        response = client.put("/api/exercises/999", json={"name": "Ghost"}, headers=headers(coach))
        assert response.status_code == 404


class TestExerciseStats:
    def test_stats(self, client, headers, coach):
        create_exercise(client, headers, coach)
        create_exercise(client, headers, coach, name="Run", category="cardio", difficulty_level="advanced")
        retired = create_exercise(client, headers, coach, name="Crunch")
        client.delete(f"/api/exercises/{retired['id']}", headers=headers(coach))

        response = client.get("/api/exercises/stats", headers=headers(coach))
        assert response.status_code == 200
        stats = response.get_json()
        assert stats["total"] == 3
        assert stats["active"] == 2
        assert stats["inactive"] == 1
        assert stats["recent"] == 3
        assert stats["by_category"] == {"strength": 1, "cardio": 1}
        assert stats["by_difficulty"] == {"beginner": 1, "advanced": 1}

    def test_coaches_only(self, client, headers, user):
        assert client.get("/api/exercises/stats", headers=headers(user)).status_code == 403


class TestDifficultyLevels:
    def test_one_shared_scale(self):
        assert workout_models.DIFFICULTY_LEVELS is DIFFICULTY_LEVELS
        assert training_schemas.DIFFICULTY_LEVELS is DIFFICULTY_LEVELS
