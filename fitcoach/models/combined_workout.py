from datetime import datetime
from fitcoach.extensions import db
from fitcoach.models.assignments import combined_workout_assignments


class CombinedWorkout(db.Model):
    """A named, ordered bundle of existing workouts."""
    __tablename__ = "combined_workouts"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, index=True)
    description = db.Column(db.String(500))
    # Ordered workout ids. Checked when written, not kept in sync afterwards.
    workout_ids = db.Column(db.JSON, nullable=False, default=list)
    notes = db.Column(db.String(1000))
    tags = db.Column(db.JSON, default=list)
    start_date = db.Column(db.Date)
    end_date = db.Column(db.Date)

    is_active = db.Column(db.Boolean, default=True, index=True)
    is_public = db.Column(db.Boolean, default=False, index=True)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    session_id = db.Column(db.Integer, db.ForeignKey("sessions.id"), nullable=True, index=True)
    order = db.Column(db.Integer, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    creator = db.relationship("User", foreign_keys=[created_by])
    assigned_users = db.relationship("User", secondary=combined_workout_assignments, lazy="selectin")
    session = db.relationship("TrainingSession", back_populates="combined_workouts")

    __table_args__ = (
        db.Index("idx_combined_workouts_session_order", "session_id", "order"),
    )

    @property
    def assigned_to(self):
        return [user.id for user in self.assigned_users]

    @property
    def workout_count(self):
        return len(self.workout_ids or [])

    def _load_workouts(self):
        from fitcoach.models.workout import Workout
        ids = self.workout_ids or []
        if not ids:
            return {}
        rows = Workout.query.filter(Workout.id.in_(ids)).all()
        return {w.id: w for w in rows}

    def resolved_workouts(self):
        """Referenced workouts in stored order, skipping ones that no longer exist."""
        found = self._load_workouts()
        return [found[wid] for wid in self.workout_ids or [] if wid in found]

    def missing_workout_ids(self):
        found = self._load_workouts()
        return [wid for wid in self.workout_ids or [] if wid not in found]

    def is_visible_to(self, user):
        if user.role in ("coach", "admin"):
            return True
        return self.is_public or self.created_by == user.id or user.id in self.assigned_to

    def to_dict(self, with_workouts=True):
        data = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "workout_ids": list(self.workout_ids or []),
            "workout_count": self.workout_count,
            "notes": self.notes,
            "tags": self.tags or [],
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "is_active": self.is_active,
            "is_public": self.is_public,
            "created_by": self.created_by,
            "assigned_to": self.assigned_to,
            "session_id": self.session_id,
            "order": self.order,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if with_workouts:
            data["workouts"] = [w.to_dict() for w in self.resolved_workouts()]
            data["missing_workout_ids"] = self.missing_workout_ids()
        return data

    def __repr__(self):
        return f"<CombinedWorkout {self.name} ({self.workout_count})>"
