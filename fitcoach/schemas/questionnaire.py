from marshmallow import fields, validate, post_load, EXCLUDE

from fitcoach.extensions import ma
from fitcoach.services.risk import YES, NO

YES_NO = validate.OneOf([YES, NO])


def _flag():
    return fields.String(validate=YES_NO, allow_none=True)


class BloodPressureSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    systolic = fields.Integer(validate=validate.Range(min=70, max=200), allow_none=True)
    diastolic = fields.Integer(validate=validate.Range(min=40, max=130), allow_none=True)


class QuestionnaireSchema(ma.Schema):
    """
    Client-writable questionnaire fields. Risk score, level, completeness
    and timestamps are derived and silently ignored if sent.
    """

    class Meta:
        unknown = EXCLUDE

    blood_pressure = fields.Nested(BloodPressureSchema, allow_none=True)
    resting_heart_rate = fields.Integer(validate=validate.Range(min=40, max=120), allow_none=True)

    cardio_test = fields.Float(validate=validate.Range(min=1, max=60), allow_none=True)
    pushups_per_minute = fields.Integer(validate=validate.Range(min=0, max=100), allow_none=True)
    situps_per_minute = fields.Integer(validate=validate.Range(min=0, max=100), allow_none=True)
    stretching = fields.Float(validate=validate.Range(min=0, max=50), allow_none=True)

    body_fat_percentage = fields.Float(validate=validate.Range(min=5, max=50), allow_none=True)
    body_weight = fields.Float(validate=validate.Range(min=30, max=200), allow_none=True)

    heart_problems = _flag()
    chest_pain_during_exercise = _flag()
    chest_pain_last_month = _flag()
    dizziness_or_fainting = _flag()
    joint_problems = _flag()
    blood_pressure_or_heart_medication = _flag()
    type1_diabetes = _flag()
    other_exercise_restrictions = _flag()
    has_allergies = _flag()
    allergies_details = fields.String(validate=validate.Length(max=1000), allow_none=True)

    @post_load
    def flatten(self, data, **kwargs):
        if "blood_pressure" in data:
            pressure = data.pop("blood_pressure")
            if pressure is None:
                data["blood_pressure_systolic"] = None
                data["blood_pressure_diastolic"] = None
            else:
                if "systolic" in pressure:
                    data["blood_pressure_systolic"] = pressure["systolic"]
                if "diastolic" in pressure:
                    data["blood_pressure_diastolic"] = pressure["diastolic"]
        if data.get("allergies_details") is not None:
            data["allergies_details"] = data["allergies_details"].strip()
        return data
