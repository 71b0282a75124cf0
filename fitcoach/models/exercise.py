from datetime import datetime
from fitcoach.extensions import db

EXERCISE_CATEGORIES = (
    "strength", "cardio", "flexibility", "balance", "sports",
    "yoga", "pilates", "hiit", "calisthenics", "other",
)
DIFFICULTY_LEVELS = ("beginner", "intermediate", "advanced")


class Exercise(db.Model):
    __tablename__ = "exercises"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, index=True)
    description = db.Column(db.Text)
    gif_url = db.Column(db.String(255))

    category = db.Column(db.String(50))
    muscle_groups = db.Column(db.JSON, default=list)
    equipment_needed = db.Column(db.JSON, default=list)
    difficulty_level = db.Column(
        db.String(20),
        db.CheckConstraint("difficulty_level IN ('beginner','intermediate','advanced')"),
        default="beginner"
    )

    # Default metrics
    default_duration = db.Column(db.Integer)  # in seconds
    default_sets = db.Column(db.Integer, default=3)
    default_reps = db.Column(db.Integer, default=10)

    is_active = db.Column(db.Boolean, default=True)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    creator = db.relationship("User", foreign_keys=[created_by])

    __table_args__ = (
        db.Index("idx_exercises_category", "category"),
        db.Index("idx_exercises_difficulty", "difficulty_level"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "gif_url": self.gif_url,
            "category": self.category,
            "muscle_groups": self.muscle_groups or [],
            "equipment_needed": self.equipment_needed or [],
            "difficulty_level": self.difficulty_level,
            "default_duration": self.default_duration,
            "default_sets": self.default_sets,
            "default_reps": self.default_reps,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None
        }

    def __repr__(self):
        return f"<Exercise {self.name}>"
