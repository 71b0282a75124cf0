from datetime import datetime
from fitcoach.extensions import db
from fitcoach.models.assignments import workout_assignments
from fitcoach.models.exercise import DIFFICULTY_LEVELS
from fitcoach.services import duration
from fitcoach.services.exercise_entries import build_entries

WORKOUT_TYPES = ("strength", "cardio", "flexibility", "mixed", "custom")


def _resolve_exercise(exercise_id):
    from fitcoach.models.exercise import Exercise
    return db.session.get(Exercise, exercise_id)


class Workout(db.Model):
    __tablename__ = "workouts"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, index=True)
    description = db.Column(db.String(500))
    type = db.Column(
        db.String(20),
        db.CheckConstraint("type IN ('strength','cardio','flexibility','mixed','custom')", name="check_workout_type"),
        default="mixed",
        index=True,
    )
    difficulty = db.Column(
        db.String(20),
        db.CheckConstraint("difficulty IN ('beginner','intermediate','advanced')", name="check_workout_difficulty"),
        default="beginner",
        index=True,
    )
    duration = db.Column(db.Integer)  # explicit total, wins over the computed one
    exercises = db.Column(db.JSON, nullable=False, default=list)
    notes = db.Column(db.Text)
    tags = db.Column(db.JSON, default=list)

    is_active = db.Column(db.Boolean, default=True, index=True)
    is_public = db.Column(db.Boolean, default=False, index=True)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    # Position inside a session
    session_id = db.Column(db.Integer, db.ForeignKey("sessions.id"), nullable=True, index=True)
    order = db.Column(db.Integer, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    creator = db.relationship("User", foreign_keys=[created_by])
    assigned_users = db.relationship("User", secondary=workout_assignments, lazy="selectin")
    session = db.relationship("TrainingSession", back_populates="workouts")

    __table_args__ = (
        db.Index("idx_workouts_session_order", "session_id", "order"),
    )

    @property
    def assigned_to(self):
        return [user.id for user in self.assigned_users]

    @property
    def exercise_entries(self):
        return build_entries(self.exercises, resolver=_resolve_exercise)

    def calculate_total_duration(self):
        return duration.calculate_total_duration(self)

    def is_visible_to(self, user):
        if user.role in ("coach", "admin"):
            return True
        return self.is_public or self.created_by == user.id or user.id in self.assigned_to

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "type": self.type,
            "difficulty": self.difficulty,
            "duration": self.duration,
            "total_duration": self.calculate_total_duration(),
            "exercises": [entry.to_dict() for entry in self.exercise_entries],
            "notes": self.notes,
            "tags": self.tags or [],
            "is_active": self.is_active,
            "is_public": self.is_public,
            "created_by": self.created_by,
            "assigned_to": self.assigned_to,
            "session_id": self.session_id,
            "order": self.order,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Workout {self.name}>"
