import re

from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import create_access_token

from fitcoach.errors import ValidationFailed
from fitcoach.extensions import db
from fitcoach.models.user import User, ROLE_USER
from fitcoach.schemas import load_or_fail
from fitcoach.schemas.user import RegisterSchema, LoginSchema
from fitcoach.utils.decorators import current_actor

auth_bp = Blueprint("auth", __name__)
register_schema = RegisterSchema()
login_schema = LoginSchema()


def validate_password(password):
    """Validate password strength."""
    min_length = current_app.config.get("PASSWORD_MIN_LENGTH", 8)
    if len(password) < min_length:
        return False, f"Password must be at least {min_length} characters"
    if not re.search(r"[A-Z]", password):
        return False, "Password must contain at least one uppercase letter"
    if not re.search(r"[a-z]", password):
        return False, "Password must contain at least one lowercase letter"
    if not re.search(r"\d", password):
        return False, "Password must contain at least one number"
    return True, "Password is valid"


@auth_bp.route("/register", methods=["POST"])
def register():
    data = load_or_fail(register_schema, request.get_json(silent=True))
    email = data["email"].strip().lower()

    is_valid, msg = validate_password(data["password"])
    if not is_valid:
        raise ValidationFailed(msg, [{"field": "password", "message": msg}])

    if User.query.filter_by(email=email).first():
        raise ValidationFailed("Registration failed", [{"field": "email", "message": "Email already registered"}])

    user = User(
        email=email,
        first_name=data["first_name"].strip(),
        last_name=data["last_name"].strip(),
        role=ROLE_USER,
        status="active",
    )
    user.set_password(data["password"])
    db.session.add(user)
    db.session.commit()
    current_app.logger.info(f"Registered user {user.id}")

    return jsonify({"msg": "Registered successfully", "user": user.to_dict()}), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    data = load_or_fail(login_schema, request.get_json(silent=True))
    user = User.query.filter_by(email=data["email"].strip().lower()).first()

    if not user or not user.check_password(data["password"]):
        current_app.logger.info(f"Login failed for {data['email']}")
        return jsonify({"msg": "Invalid credentials"}), 401
    if user.status == "inactive":
        return jsonify({"msg": "Account is inactive"}), 403

    token = create_access_token(identity=str(user.id), additional_claims={"role": user.role})
    return jsonify({"access_token": token, "user": user.to_dict()}), 200


@auth_bp.route("/me", methods=["GET"])
@current_actor
def me(actor):
    return jsonify({"user": actor.to_dict()}), 200
