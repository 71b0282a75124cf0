"""
Tests for registration, login and coach assignment.
"""
from fitcoach.extensions import outbox
from fitcoach.models.notification import Notification
from fitcoach.models.user import User, ROLE_ADMIN


class TestAuth:
    def test_register_and_login(self, client):
        response = client.post("/api/auth/register", json={
            "email": "New@Example.com", "password": "Secret123", "first_name": "New", "last_name": "Person",
        })
        assert response.status_code == 201
        assert response.get_json()["user"]["role"] == "user"

        response = client.post("/api/auth/login", json={"email": "new@example.com", "password": "Secret123"})
        assert response.status_code == 200
        token = response.get_json()["access_token"]

        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.get_json()["user"]["email"] == "new@example.com"

    def test_weak_password(self, client):
        response = client.post("/api/auth/register", json={
            "email": "weak@example.com", "password": "short", "first_name": "W", "last_name": "P",
        })
        assert response.status_code == 400

    def test_duplicate_email(self, client, user):
        response = client.post("/api/auth/register", json={
            "email": user.email, "password": "Secret123", "first_name": "A", "last_name": "B",
        })
        assert response.status_code == 400

    def test_wrong_password(self, client, user):
        response = client.post("/api/auth/login", json={"email": user.email, "password": "nope"})
        assert response.status_code == 401

    def test_requires_token(self, client):
        assert client.get("/api/auth/me").status_code == 401


class TestCoachAssignment:
    def test_admin_assigns_coach(self, client, headers, admin, other_user, coach):
        response = client.put(f"/api/users/{other_user.id}/coach", json={"coach_id": coach.id}, headers=headers(admin))
        assert response.status_code == 200
        assert response.get_json()["user"]["assigned_coach_id"] == coach.id

        outbox.drain()
        notification = Notification.query.filter_by(recipient_id=other_user.id).one()
        assert notification.type == "assigned_coach"

    def test_only_coaches_assignable(self, client, headers, admin, other_user, user):
        response = client.put(f"/api/users/{other_user.id}/coach", json={"coach_id": user.id}, headers=headers(admin))
        assert response.status_code == 400

    def test_only_admin_assigns(self, client, headers, coach, other_user):
        response = client.put(f"/api/users/{other_user.id}/coach", json={"coach_id": coach.id}, headers=headers(coach))
        assert response.status_code == 403

    def test_coach_lists_clients(self, client, headers, coach, user, other_user):
        data = client.get("/api/users/clients", headers=headers(coach)).get_json()
        assert [c["id"] for c in data["clients"]] == [user.id]
        assert client.get("/api/users/clients", headers=headers(user)).status_code == 403


class TestCreateAdminCommand:
    def test_creates_admin(self, app):
        result = app.test_cli_runner().invoke(args=[
            "create-admin", "--email", " Root@Example.com ", "--password", "Secret123",
        ])
        assert result.exit_code == 0
        assert "created" in result.output

        admin = User.query.filter_by(email="root@example.com").one()
        assert admin.role == ROLE_ADMIN
        assert admin.check_password("Secret123")

    def test_existing_email_left_alone(self, app, admin):
        result = app.test_cli_runner().invoke(args=[
            "create-admin", "--email", admin.email, "--password", "Other123",
        ])
        assert result.exit_code == 0
        assert "already exists" in result.output
        assert User.query.filter_by(email=admin.email).count() == 1
