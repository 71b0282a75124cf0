from marshmallow import fields, validate, EXCLUDE

from fitcoach.extensions import ma


class RegisterSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=8, max=128))
    first_name = fields.String(required=True, validate=validate.Length(min=1, max=50))
    last_name = fields.String(required=True, validate=validate.Length(min=1, max=50))


class LoginSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True)


class AssignCoachSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    coach_id = fields.Integer(required=True, allow_none=True)
