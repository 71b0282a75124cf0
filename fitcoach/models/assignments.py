from fitcoach.extensions import db

workout_assignments = db.Table(
    "workout_assignments",
    db.Column("workout_id", db.Integer, db.ForeignKey("workouts.id", ondelete="CASCADE"), primary_key=True),
    db.Column("user_id", db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)

combined_workout_assignments = db.Table(
    "combined_workout_assignments",
    db.Column("combined_workout_id", db.Integer, db.ForeignKey("combined_workouts.id", ondelete="CASCADE"), primary_key=True),
    db.Column("user_id", db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)

session_assignments = db.Table(
    "session_assignments",
    db.Column("session_id", db.Integer, db.ForeignKey("sessions.id", ondelete="CASCADE"), primary_key=True),
    db.Column("user_id", db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)
