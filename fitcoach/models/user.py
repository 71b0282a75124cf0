from datetime import datetime
from werkzeug.security import generate_password_hash, check_password_hash
from fitcoach.extensions import db

ROLE_USER = "user"
ROLE_COACH = "coach"
ROLE_ADMIN = "admin"


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    first_name = db.Column(db.String(50), nullable=False)
    last_name = db.Column(db.String(50), nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(
        db.String(20),
        db.CheckConstraint("role IN ('user','coach','admin')"),
        nullable=False,
        default=ROLE_USER,
        index=True,
    )
    status = db.Column(
        db.String(20),
        db.CheckConstraint("status IN ('active','pending','inactive')"),
        default="active",
        index=True,
    )
    assigned_coach_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    assigned_coach = db.relationship("User", remote_side=[id], backref=db.backref("clients", lazy="dynamic"))
    questionnaire = db.relationship(
        "HealthQuestionnaire",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )
    received_notifications = db.relationship(
        "Notification",
        foreign_keys="[Notification.recipient_id]",
        back_populates="recipient",
        lazy="dynamic",
        cascade="all, delete-orphan",
    )

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "role": self.role,
            "status": self.status,
            "assigned_coach_id": self.assigned_coach_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def to_summary(self):
        return {"id": self.id, "first_name": self.first_name, "last_name": self.last_name}

    def __repr__(self):
        return f"<User {self.email} ({self.role})>"
