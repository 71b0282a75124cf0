from marshmallow import fields, validate, EXCLUDE

from fitcoach.extensions import ma
from fitcoach.models.meal import MEAL_TYPES, MEAL_UNITS

NON_NEGATIVE = validate.Range(min=0)


class MealItemSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    icon = fields.String(load_default="")
    quantity = fields.Float(required=True, validate=NON_NEGATIVE)
    unit = fields.String(required=True, validate=validate.OneOf(MEAL_UNITS))
    calories = fields.Float(load_default=0, validate=NON_NEGATIVE)
    protein = fields.Float(load_default=0, validate=NON_NEGATIVE)
    carbs = fields.Float(load_default=0, validate=NON_NEGATIVE)
    fat = fields.Float(load_default=0, validate=NON_NEGATIVE)
    fiber = fields.Float(load_default=0, validate=NON_NEGATIVE)


class MealSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    description = fields.String(validate=validate.Length(max=500), allow_none=True)
    type = fields.String(required=True, validate=validate.OneOf(MEAL_TYPES))
    items = fields.List(fields.Nested(MealItemSchema))
    image_url = fields.Url(allow_none=True)
    assigned_to = fields.Integer(allow_none=True)
    tags = fields.List(fields.String(validate=validate.Length(max=30)))
    is_active = fields.Boolean()

    # Only kept when the meal has no items
    total_calories = fields.Integer(validate=NON_NEGATIVE, allow_none=True)
    total_protein = fields.Float(validate=NON_NEGATIVE, allow_none=True)
    total_carbs = fields.Float(validate=NON_NEGATIVE, allow_none=True)
    total_fat = fields.Float(validate=NON_NEGATIVE, allow_none=True)
    total_fiber = fields.Float(validate=NON_NEGATIVE, allow_none=True)


class MealReviewSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    status = fields.String(required=True, validate=validate.OneOf(["approved", "rejected"]))
    review_notes = fields.String(validate=validate.Length(max=500), allow_none=True)
