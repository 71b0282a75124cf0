"""
Tests for the notification outbox and endpoints.
"""
from fitcoach.extensions import outbox
from fitcoach.models.notification import Notification
from fitcoach.models.workout import Workout
from fitcoach.services.notifications import notify
from fitcoach.services.outbox import NotificationIntent, NotificationOutbox


class TestOutbox:
    def test_drain_hands_batch_to_sink(self):
        delivered = []
        box = NotificationOutbox()
        box.set_sink(delivered.extend)
        box.emit_many([NotificationIntent(1, "a", "b"), NotificationIntent(2, "c", "d")])
        assert box.pending() == 2
        assert box.drain() == 2
        assert [i.recipient_id for i in delivered] == [1, 2]
        assert box.pending() == 0

    def test_sink_failure_is_swallowed(self):
        def broken(intents):
            raise RuntimeError("store is down")

        box = NotificationOutbox()
        box.set_sink(broken)
        box.emit(NotificationIntent(1, "a", "b"))
        assert box.drain() == 0
        assert box.pending() == 0

    def test_no_sink_drops(self):
        box = NotificationOutbox()
        box.emit(NotificationIntent(1, "a", "b"))
        assert box.drain() == 0

    def test_entity_id_stored_as_text(self):
        assert NotificationIntent(1, "a", "b", entity_id=12).entity_id == "12"


class TestNotify:
    def test_skips_missing_recipients(self, app):
        assert notify([1, None, 2], "t", "m") == 2
        assert outbox.pending() == 2

    def test_drain_persists(self, user, coach):
        notify([user.id], "Hello", "World", type="message", sender_id=coach.id, entity_type="user", entity_id=coach.id)
        assert outbox.drain() == 1
        notification = Notification.query.one()
        assert notification.recipient_id == user.id
        assert notification.to_dict()["sender"]["id"] == coach.id
        assert notification.to_dict()["entity"]["entity_id"] == str(coach.id)

    def test_bad_intent_does_not_sink_batch(self, user, other_user):
        outbox.emit_many([
            NotificationIntent(user.id, "Broken", "Unknown type", type="bogus"),
            NotificationIntent(other_user.id, "Fine", "Still arrives", type="message"),
        ])
        assert outbox.drain() == 1
        notification = Notification.query.one()
        assert notification.recipient_id == other_user.id
        assert notification.title == "Fine"


class TestNotificationEndpoints:
    def _seed(self, user, count=3):
        notify([user.id] * count, "Hi", "There")
        outbox.drain()

    def test_list_and_unread_count(self, client, headers, user, other_user):
        self._seed(user)
        self._seed(other_user, 1)
        data = client.get("/api/notifications", headers=headers(user)).get_json()
        assert data["pagination"]["total"] == 3
        count = client.get("/api/notifications/unread-count", headers=headers(user)).get_json()
        assert count["unread_count"] == 3

    def test_mark_read(self, client, headers, user):
        self._seed(user, 2)
        first = Notification.query.filter_by(recipient_id=user.id).first()
        response = client.post(f"/api/notifications/{first.id}/read", headers=headers(user))
        assert response.status_code == 200
        assert response.get_json()["notification"]["read_at"] is not None

        data = client.get("/api/notifications?is_read=false", headers=headers(user)).get_json()
        assert data["pagination"]["total"] == 1

    def test_cannot_read_others(self, client, headers, user, other_user):
        self._seed(user, 1)
        first = Notification.query.first()
        assert client.post(f"/api/notifications/{first.id}/read", headers=headers(other_user)).status_code == 404

    def test_mark_all_read(self, client, headers, user):
        self._seed(user, 4)
        response = client.post("/api/notifications/mark-all-read", headers=headers(user))
        assert response.get_json()["updated"] == 4
        count = client.get("/api/notifications/unread-count", headers=headers(user)).get_json()
        assert count["unread_count"] == 0


def create_workout(client, headers, actor, name="Push", **extra):
    payload = {"name": name, "exercises": [{"exercise": {"name": "Bench"}, "sets": 3, "duration": 40}]}
    payload.update(extra)
    response = client.post("/api/workouts", json=payload, headers=headers(actor))
    assert response.status_code == 201, response.get_json()
    return response.get_json()["workout"]


def delivered_actions(user):
    outbox.drain()
    rows = Notification.query.filter_by(recipient_id=user.id).order_by(Notification.id).all()
    assert all(row.type == "workout_action" for row in rows)
    return [row.extra_data["action"] for row in rows]


class TestRouteNotifications:
    def test_queue_failure_does_not_fail_request(self, client, headers, coach, user, monkeypatch):
        def broken(intents):
            raise RuntimeError("queue is gone")

        monkeypatch.setattr(outbox, "emit_many", broken)
        response = client.post("/api/workouts", json={"name": "Pull", "assigned_to": [user.id]},
                               headers=headers(coach))
        assert response.status_code == 201
        assert Workout.query.count() == 1
        assert Workout.query.one().assigned_to == [user.id]

    def test_workout_update_and_delete(self, client, headers, coach, user):
        workout = create_workout(client, headers, coach, assigned_to=[user.id])
        client.put(f"/api/workouts/{workout['id']}", json={"name": "Push v2"}, headers=headers(coach))
        client.delete(f"/api/workouts/{workout['id']}", headers=headers(coach))

        assert delivered_actions(user) == ["created", "updated", "deleted"]
        last = Notification.query.filter_by(recipient_id=user.id).order_by(Notification.id.desc()).first()
        assert last.entity_type == "workout"
        assert last.entity_id == str(workout["id"])

    def test_combined_update_and_delete(self, client, headers, coach, user):
        a = create_workout(client, headers, coach, "A")
        response = client.post("/api/combined-workouts", json={
            "name": "Bundle", "workout_ids": [a["id"]], "assigned_to": [user.id],
        }, headers=headers(coach))
        combined_id = response.get_json()["combined_workout"]["id"]
        client.put(f"/api/combined-workouts/{combined_id}", json={"description": "Harder"}, headers=headers(coach))
        client.delete(f"/api/combined-workouts/{combined_id}", headers=headers(coach))

        assert delivered_actions(user) == ["created", "updated", "deleted"]
        kinds = {row.entity_type for row in Notification.query.filter_by(recipient_id=user.id)}
        assert kinds == {"combined workout"}
