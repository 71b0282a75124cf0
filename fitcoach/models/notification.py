from datetime import datetime
from fitcoach.extensions import db

NOTIFICATION_TYPES = (
    "info",
    "user_registered",
    "status_changed",
    "assigned_coach",
    "meal_action",
    "workout_action",
    "session_assigned",
    "health_questions_updated",
    "message",
)


class Notification(db.Model):
    __tablename__ = "notifications"

    id = db.Column(db.Integer, primary_key=True)
    recipient_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    sender_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    type = db.Column(
        db.String(30),
        db.CheckConstraint(
            "type IN ('info','user_registered','status_changed','assigned_coach','meal_action',"
            "'workout_action','session_assigned','health_questions_updated','message')",
            name="check_notification_type",
        ),
        nullable=False,
        default="info",
    )
    title = db.Column(db.String(150), nullable=False)
    message = db.Column(db.String(1000), nullable=False)

    # Related entity
    entity_type = db.Column(db.String(50))
    entity_id = db.Column(db.String(50))
    extra_data = db.Column(db.JSON, default=dict)

    is_read = db.Column(db.Boolean, default=False, index=True)
    read_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    recipient = db.relationship("User", foreign_keys=[recipient_id], back_populates="received_notifications")
    sender = db.relationship("User", foreign_keys=[sender_id])

    __table_args__ = (
        db.Index("idx_notifications_recipient_read", "recipient_id", "is_read", "created_at"),
    )

    @classmethod
    def from_intent(cls, intent):
        return cls(
            recipient_id=intent.recipient_id,
            sender_id=intent.sender_id,
            type=intent.type,
            title=intent.title[:150],
            message=intent.message[:1000],
            entity_type=intent.entity_type,
            entity_id=intent.entity_id,
            extra_data=intent.extra,
            created_at=intent.created_at,
        )

    def mark_as_read(self):
        """Mark notification as read"""
        if not self.is_read:
            self.is_read = True
            self.read_at = datetime.utcnow()

    def to_dict(self):
        return {
            "id": self.id,
            "recipient_id": self.recipient_id,
            "sender": self.sender.to_summary() if self.sender else None,
            "type": self.type,
            "title": self.title,
            "message": self.message,
            "entity": {
                "entity_type": self.entity_type,
                "entity_id": self.entity_id,
                "extra": self.extra_data or {},
            },
            "is_read": self.is_read,
            "read_at": self.read_at.isoformat() if self.read_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
