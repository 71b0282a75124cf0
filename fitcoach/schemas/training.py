from marshmallow import fields, validate, validates_schema, post_load, ValidationError, EXCLUDE

from fitcoach.extensions import ma
from fitcoach.models.exercise import EXERCISE_CATEGORIES, DIFFICULTY_LEVELS
from fitcoach.models.workout import WORKOUT_TYPES


class EmbeddedExerciseSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    description = fields.String(validate=validate.Length(max=500))
    category = fields.String()
    difficulty = fields.String(validate=validate.OneOf(DIFFICULTY_LEVELS))
    gif_url = fields.String()


class ExerciseEntrySchema(ma.Schema):
    """One exercise inside a workout: embedded data or a library reference."""

    class Meta:
        unknown = EXCLUDE

    exercise = fields.Nested(EmbeddedExerciseSchema)
    exercise_id = fields.Integer()
    sets = fields.Integer(validate=validate.Range(min=1, max=50))
    reps = fields.Integer(validate=validate.Range(min=1, max=1000))
    weight = fields.Float(validate=validate.Range(min=0, max=1000))
    duration = fields.Integer(validate=validate.Range(min=1, max=3600))  # seconds
    rest = fields.Integer(validate=validate.Range(min=0, max=600))  # seconds
    notes = fields.String()
    order = fields.Integer(validate=validate.Range(min=1))

    @validates_schema
    def check_kind(self, data, **kwargs):
        if ("exercise" in data) == ("exercise_id" in data):
            raise ValidationError("Provide either 'exercise' or 'exercise_id'", "exercise")


class WorkoutSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    description = fields.String(validate=validate.Length(max=500), allow_none=True)
    type = fields.String(validate=validate.OneOf(WORKOUT_TYPES))
    difficulty = fields.String(validate=validate.OneOf(DIFFICULTY_LEVELS))
    duration = fields.Integer(validate=validate.Range(min=1), allow_none=True)
    exercises = fields.List(fields.Nested(ExerciseEntrySchema))
    notes = fields.String(allow_none=True)
    tags = fields.List(fields.String(validate=validate.Length(max=30)))
    is_public = fields.Boolean()
    is_active = fields.Boolean()
    assigned_to = fields.List(fields.Integer())
    session_id = fields.Integer(allow_none=True)

    @post_load
    def number_exercises(self, data, **kwargs):
        # entries without an order take their list position
        for position, entry in enumerate(data.get("exercises") or [], start=1):
            entry.setdefault("order", position)
        return data


class CombinedWorkoutSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    # name and workout ids are checked by services.composition
    name = fields.String(validate=validate.Length(max=100), allow_none=True)
    description = fields.String(validate=validate.Length(max=500), allow_none=True)
    workout_ids = fields.List(fields.Integer(), allow_none=True)
    notes = fields.String(validate=validate.Length(max=1000), allow_none=True)
    tags = fields.List(fields.String(validate=validate.Length(max=30)))
    start_date = fields.Date(allow_none=True)
    end_date = fields.Date(allow_none=True)
    is_public = fields.Boolean()
    is_active = fields.Boolean()
    assigned_to = fields.List(fields.Integer())
    session_id = fields.Integer(allow_none=True)

    @validates_schema
    def check_dates(self, data, **kwargs):
        start, end = data.get("start_date"), data.get("end_date")
        if start and end and end < start:
            raise ValidationError("End date must not be before start date", "end_date")


class SessionSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    description = fields.String(validate=validate.Length(max=500), allow_none=True)
    duration = fields.Integer(validate=validate.Range(min=1), allow_none=True)
    type = fields.String(validate=validate.OneOf(WORKOUT_TYPES))
    difficulty = fields.String(validate=validate.OneOf(DIFFICULTY_LEVELS))
    tags = fields.List(fields.String(validate=validate.Length(max=30)))
    is_public = fields.Boolean()
    is_active = fields.Boolean()
    assigned_to = fields.List(fields.Integer())


class OrderSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    order = fields.Integer(required=True, strict=True)


class ExerciseSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    description = fields.String(allow_none=True)
    gif_url = fields.String(allow_none=True)
    category = fields.String(validate=validate.OneOf(EXERCISE_CATEGORIES))
    muscle_groups = fields.List(fields.String())
    equipment_needed = fields.List(fields.String())
    difficulty_level = fields.String(validate=validate.OneOf(DIFFICULTY_LEVELS))
    default_duration = fields.Integer(validate=validate.Range(min=1), allow_none=True)
    default_sets = fields.Integer(validate=validate.Range(min=1, max=50))
    default_reps = fields.Integer(validate=validate.Range(min=1, max=1000))
