from datetime import datetime

from flask import Blueprint, request, jsonify

from fitcoach.errors import NotFound
from fitcoach.extensions import db
from fitcoach.models.notification import Notification
from fitcoach.utils.decorators import current_actor
from fitcoach.utils.pagination import paginate

notifications_bp = Blueprint("notifications", __name__)


@notifications_bp.route("", methods=["GET"])
@current_actor
def list_notifications(actor):
    query = Notification.query.filter_by(recipient_id=actor.id)
    is_read = request.args.get("is_read")
    if is_read is not None:
        query = query.filter(Notification.is_read.is_(is_read.lower() in ("1", "true", "yes")))
    query = query.order_by(Notification.created_at.desc(), Notification.id.desc())
    return jsonify(paginate(query)), 200


@notifications_bp.route("/unread-count", methods=["GET"])
@current_actor
def unread_count(actor):
    count = Notification.query.filter_by(recipient_id=actor.id, is_read=False).count()
    return jsonify({"unread_count": count}), 200


@notifications_bp.route("/<int:notification_id>/read", methods=["POST"])
@current_actor
def mark_read(notification_id, actor):
    notification = Notification.query.filter_by(id=notification_id, recipient_id=actor.id).first()
    if not notification:
        raise NotFound("Notification not found")
    notification.mark_as_read()
    db.session.commit()
    return jsonify({"msg": "Notification marked as read", "notification": notification.to_dict()}), 200


@notifications_bp.route("/mark-all-read", methods=["POST"])
@current_actor
def mark_all_read(actor):
    updated = (
        Notification.query
        .filter_by(recipient_id=actor.id, is_read=False)
        .update({"is_read": True, "read_at": datetime.utcnow()}, synchronize_session=False)
    )
    db.session.commit()
    return jsonify({"msg": "All notifications marked as read", "updated": updated}), 200
