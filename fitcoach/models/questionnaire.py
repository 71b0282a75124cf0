from datetime import datetime
from sqlalchemy import event
from fitcoach.extensions import db
from fitcoach.services import risk

YES_NO = "IN ('yes','no')"


def _flag_column(name):
    return db.Column(
        db.String(3),
        db.CheckConstraint(f"{name} {YES_NO}", name=f"check_{name}"),
        nullable=True,
    )


class HealthQuestionnaire(db.Model):
    __tablename__ = "health_questionnaires"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, unique=True, index=True)

    # Cardiovascular
    blood_pressure_systolic = db.Column(db.Integer)
    blood_pressure_diastolic = db.Column(db.Integer)
    resting_heart_rate = db.Column(db.Integer)

    # Fitness tests
    cardio_test = db.Column(db.Float)  # minutes
    pushups_per_minute = db.Column(db.Integer)
    situps_per_minute = db.Column(db.Integer)
    stretching = db.Column(db.Float)  # cm

    # Body composition
    body_fat_percentage = db.Column(db.Float)
    body_weight = db.Column(db.Float)  # kg

    # Medical yes/no answers
    heart_problems = _flag_column("heart_problems")
    chest_pain_during_exercise = _flag_column("chest_pain_during_exercise")
    chest_pain_last_month = _flag_column("chest_pain_last_month")
    dizziness_or_fainting = _flag_column("dizziness_or_fainting")
    joint_problems = _flag_column("joint_problems")
    blood_pressure_or_heart_medication = _flag_column("blood_pressure_or_heart_medication")
    type1_diabetes = _flag_column("type1_diabetes")
    other_exercise_restrictions = _flag_column("other_exercise_restrictions")
    has_allergies = _flag_column("has_allergies")
    allergies_details = db.Column(db.String(1000))

    # Derived, recomputed before every write
    risk_score = db.Column(db.Integer, nullable=False, default=0)
    risk_level = db.Column(
        db.String(10),
        db.CheckConstraint("risk_level IN ('low','moderate','high')", name="check_risk_level"),
        nullable=False,
        default=risk.RISK_LOW,
        index=True,
    )
    is_complete = db.Column(db.Boolean, nullable=False, default=False)
    last_updated = db.Column(db.DateTime, default=datetime.utcnow)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = db.relationship("User", back_populates="questionnaire")

    def __init__(self, **kwargs):
        # unanswered medical questions default to "no"
        for flag in risk.MEDICAL_FLAGS:
            kwargs.setdefault(flag, risk.NO)
        super().__init__(**kwargs)

    def calculate_risk_score(self):
        self.risk_score = risk.calculate_risk_score(self)
        self.risk_level = risk.risk_level_for(self.risk_score)
        return self.risk_score

    def is_questionnaire_complete(self):
        return risk.is_questionnaire_complete(self)

    def refresh_derived(self):
        """Recompute every derived field. Runs before each insert and update."""
        self.calculate_risk_score()
        self.is_complete = self.is_questionnaire_complete()
        self.last_updated = datetime.utcnow()

    @property
    def blood_pressure_status(self):
        return risk.blood_pressure_status(self.blood_pressure_systolic, self.blood_pressure_diastolic)

    @property
    def heart_rate_status(self):
        return risk.heart_rate_status(self.resting_heart_rate)

    def get_recommendations(self):
        return risk.build_recommendations(self.risk_level, self.joint_problems, self.has_allergies)

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "blood_pressure": {
                "systolic": self.blood_pressure_systolic,
                "diastolic": self.blood_pressure_diastolic,
            },
            "resting_heart_rate": self.resting_heart_rate,
            "cardio_test": self.cardio_test,
            "pushups_per_minute": self.pushups_per_minute,
            "situps_per_minute": self.situps_per_minute,
            "stretching": self.stretching,
            "body_fat_percentage": self.body_fat_percentage,
            "body_weight": self.body_weight,
            "heart_problems": self.heart_problems,
            "chest_pain_during_exercise": self.chest_pain_during_exercise,
            "chest_pain_last_month": self.chest_pain_last_month,
            "dizziness_or_fainting": self.dizziness_or_fainting,
            "joint_problems": self.joint_problems,
            "blood_pressure_or_heart_medication": self.blood_pressure_or_heart_medication,
            "type1_diabetes": self.type1_diabetes,
            "other_exercise_restrictions": self.other_exercise_restrictions,
            "has_allergies": self.has_allergies,
            "allergies_details": self.allergies_details,
            "risk_score": self.risk_score,
            "risk_level": self.risk_level,
            "is_complete": self.is_complete,
            "blood_pressure_status": self.blood_pressure_status,
            "heart_rate_status": self.heart_rate_status,
            "last_updated": self.last_updated.isoformat() if self.last_updated else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<HealthQuestionnaire user={self.user_id} risk={self.risk_level}>"


@event.listens_for(HealthQuestionnaire, "before_insert")
@event.listens_for(HealthQuestionnaire, "before_update")
def _refresh_before_write(mapper, connection, target):
    target.refresh_derived()
