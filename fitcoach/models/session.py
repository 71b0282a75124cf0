from datetime import datetime
from fitcoach.extensions import db
from fitcoach.models.assignments import session_assignments
from fitcoach.services import duration


class TrainingSession(db.Model):
    """A training day grouping ordered workouts and combined workouts."""
    __tablename__ = "sessions"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, index=True)
    description = db.Column(db.String(500))
    duration = db.Column(db.Integer)  # minutes
    type = db.Column(
        db.String(20),
        db.CheckConstraint("type IN ('strength','cardio','flexibility','mixed','custom')", name="check_session_type"),
        default="mixed",
        index=True,
    )
    difficulty = db.Column(
        db.String(20),
        db.CheckConstraint("difficulty IN ('beginner','intermediate','advanced')", name="check_session_difficulty"),
        default="beginner",
        index=True,
    )
    tags = db.Column(db.JSON, default=list)

    is_active = db.Column(db.Boolean, default=True, index=True)
    is_public = db.Column(db.Boolean, default=False, index=True)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    creator = db.relationship("User", foreign_keys=[created_by])
    assigned_users = db.relationship("User", secondary=session_assignments, lazy="selectin")

    # Not owned: deleting a session only removes these according to the
    # configured cascade policy (see services.composition).
    workouts = db.relationship(
        "Workout",
        back_populates="session",
        order_by="[Workout.order, Workout.id]",
    )
    combined_workouts = db.relationship(
        "CombinedWorkout",
        back_populates="session",
        order_by="[CombinedWorkout.order, CombinedWorkout.id]",
    )

    @property
    def assigned_to(self):
        return [user.id for user in self.assigned_users]

    def calculate_total_duration(self):
        return duration.calculate_session_duration(self)

    def is_visible_to(self, user):
        if user.role in ("coach", "admin"):
            return True
        return self.is_public or self.created_by == user.id or user.id in self.assigned_to

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "duration": self.duration,
            "type": self.type,
            "difficulty": self.difficulty,
            "tags": self.tags or [],
            "is_active": self.is_active,
            "is_public": self.is_public,
            "created_by": self.created_by,
            "assigned_to": self.assigned_to,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<TrainingSession {self.name}>"
