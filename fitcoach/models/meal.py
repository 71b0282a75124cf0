from datetime import datetime
from sqlalchemy import event
from fitcoach.extensions import db
from fitcoach.services.nutrition import calculate_totals

MEAL_TYPES = ("breakfast", "lunch", "dinner", "snack")
MEAL_UNITS = ("g", "kg", "ml", "l", "piece", "cup", "tablespoon", "teaspoon")


class Meal(db.Model):
    __tablename__ = "meals"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, index=True)
    description = db.Column(db.String(500))
    type = db.Column(
        db.String(20),
        db.CheckConstraint("type IN ('breakfast','lunch','dinner','snack')", name="check_meal_type"),
        nullable=False,
        index=True,
    )
    # [{name, icon, quantity, unit, calories, protein, carbs, fat, fiber}]
    items = db.Column(db.JSON, nullable=False, default=list)

    total_calories = db.Column(db.Integer)
    total_protein = db.Column(db.Float)
    total_carbs = db.Column(db.Float)
    total_fat = db.Column(db.Float)
    total_fiber = db.Column(db.Float)

    image_url = db.Column(db.String(255))
    status = db.Column(
        db.String(20),
        db.CheckConstraint("status IN ('pending','approved','rejected')", name="check_meal_status"),
        default="pending",
        index=True,
    )
    reviewed_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    review_notes = db.Column(db.String(500))
    is_active = db.Column(db.Boolean, default=True, index=True)
    tags = db.Column(db.JSON, default=list)

    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    assigned_to = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    creator = db.relationship("User", foreign_keys=[created_by])
    assignee = db.relationship("User", foreign_keys=[assigned_to])
    reviewer = db.relationship("User", foreign_keys=[reviewed_by])

    def calculate_totals(self):
        totals = calculate_totals(self.items)
        self.total_calories = totals["calories"]
        self.total_protein = totals["protein"]
        self.total_carbs = totals["carbs"]
        self.total_fat = totals["fat"]
        self.total_fiber = totals["fiber"]
        return totals

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "type": self.type,
            "items": self.items or [],
            "total_calories": self.total_calories,
            "total_protein": self.total_protein,
            "total_carbs": self.total_carbs,
            "total_fat": self.total_fat,
            "total_fiber": self.total_fiber,
            "image_url": self.image_url,
            "status": self.status,
            "reviewed_by": self.reviewed_by,
            "review_notes": self.review_notes,
            "is_active": self.is_active,
            "tags": self.tags or [],
            "created_by": self.created_by,
            "assigned_to": self.assigned_to,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Meal {self.name}>"


@event.listens_for(Meal, "before_insert")
@event.listens_for(Meal, "before_update")
def _totals_before_write(mapper, connection, target):
    # totals supplied by the client are kept when there are no items
    if target.items:
        target.calculate_totals()
