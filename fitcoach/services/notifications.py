import logging

from sqlalchemy.exc import SQLAlchemyError

from fitcoach.extensions import db, outbox, socketio
from fitcoach.models.notification import Notification
from fitcoach.services.outbox import NotificationIntent

logger = logging.getLogger(__name__)


def user_room(user_id):
    return f"user_{user_id}"


def notify(recipient_ids, title, message, type="info", sender_id=None,
           entity_type=None, entity_id=None, extra=None):
    """
    Queue one notification per recipient. Call after the primary commit;
    never raises.
    """
    try:
        intents = [
            NotificationIntent(
                recipient_id=rid,
                sender_id=sender_id,
                type=type,
                title=title,
                message=message,
                entity_type=entity_type,
                entity_id=entity_id,
                extra=extra,
            )
            for rid in recipient_ids
            if rid is not None
        ]
        outbox.emit_many(intents)
        return len(intents)
    except Exception as e:
        logger.warning(f"Notification ({type}) not queued: {e}")
        return 0


def notify_assignees(entity, entity_type, action, sender_id, notification_type="workout_action", recipients=None):
    if recipients is None:
        recipients = entity.assigned_to
    if not recipients:
        return 0
    titles = {
        "created": f"New {entity_type} assigned",
        "updated": f"{entity_type.capitalize()} updated",
        "deleted": f"{entity_type.capitalize()} removed",
    }
    return notify(
        recipients,
        title=titles[action],
        message=f"Your coach {action} a {entity_type}: {entity.name}",
        type=notification_type,
        sender_id=sender_id,
        entity_type=entity_type,
        entity_id=entity.id,
        extra={"action": action},
    )


def _store_one_by_one(intents):
    stored = []
    for intent in intents:
        notification = Notification.from_intent(intent)
        try:
            db.session.add(notification)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Dropping {intent.type} notification for user {intent.recipient_id}: {e}")
            continue
        stored.append(notification)
    return stored


def persist_and_push(intents):
    """
    Outbox sink: store a batch of intents, then push each to its recipient's
    room. When the batch insert fails the intents are stored one at a time so
    a single bad row only drops itself.
    """
    notifications = [Notification.from_intent(intent) for intent in intents]
    try:
        db.session.add_all(notifications)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.warning(f"Batch insert of {len(intents)} notification(s) failed, retrying one by one: {e}")
        notifications = _store_one_by_one(intents)

    for notification in notifications:
        try:
            socketio.emit("notification", notification.to_dict(), to=user_room(notification.recipient_id))
        except Exception as e:
            logger.warning(f"Socket push failed for notification {notification.id}: {e}")
    logger.debug(f"Delivered {len(notifications)} notification(s)")
    return notifications
