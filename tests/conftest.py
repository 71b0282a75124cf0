"""
Pytest fixtures for the fitcoach tests.
"""
import pytest
from flask_jwt_extended import create_access_token

from fitcoach import create_app
from fitcoach.extensions import db, outbox
from fitcoach.models.user import User, ROLE_ADMIN, ROLE_COACH, ROLE_USER


@pytest.fixture
def app():
    """Create an app bound to a fresh in-memory database."""
    app = create_app("testing")
    with app.app_context():
        db.create_all()
        outbox.clear()
        yield app
        outbox.clear()
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def make_user(email, role=ROLE_USER, first_name="Test", last_name="User", coach=None):
    user = User(
        email=email,
        first_name=first_name,
        last_name=last_name,
        role=role,
        status="active",
        assigned_coach_id=coach.id if coach else None,
    )
    user.set_password("Passw0rd!")
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def admin(app):
    return make_user("admin@example.com", ROLE_ADMIN, "Ada", "Admin")


@pytest.fixture
def coach(app):
    return make_user("coach@example.com", ROLE_COACH, "Carl", "Coach")


@pytest.fixture
def other_coach(app):
    return make_user("coach2@example.com", ROLE_COACH, "Cora", "Coach")


@pytest.fixture
def user(app, coach):
    """A regular user assigned to ``coach``."""
    return make_user("user@example.com", ROLE_USER, "Uma", "User", coach=coach)


@pytest.fixture
def other_user(app):
    return make_user("other@example.com", ROLE_USER, "Otto", "Other")


def auth_headers(user):
    token = create_access_token(identity=str(user.id))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers():
    """Build bearer headers for a user: ``headers(coach)``."""
    return auth_headers


@pytest.fixture
def complete_questionnaire():
    """Payload with every required field filled in and no risk flags."""
    return {
        "blood_pressure": {"systolic": 118, "diastolic": 76},
        "resting_heart_rate": 64,
        "body_weight": 72.5,
        "cardio_test": 12,
        "pushups_per_minute": 30,
        "situps_per_minute": 35,
        "stretching": 20,
        "body_fat_percentage": 18,
        "heart_problems": "no",
        "chest_pain_during_exercise": "no",
        "chest_pain_last_month": "no",
        "dizziness_or_fainting": "no",
        "joint_problems": "no",
        "blood_pressure_or_heart_medication": "no",
        "type1_diabetes": "no",
        "other_exercise_restrictions": "no",
        "has_allergies": "no",
    }
