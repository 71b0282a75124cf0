from flask import Blueprint, request, jsonify

from fitcoach.errors import NotFound, ValidationFailed
from fitcoach.extensions import db
from fitcoach.models.user import User, ROLE_ADMIN, ROLE_COACH
from fitcoach.schemas import load_or_fail
from fitcoach.schemas.user import AssignCoachSchema
from fitcoach.services.notifications import notify
from fitcoach.utils.decorators import current_actor, roles_required

users_bp = Blueprint("users", __name__)
assign_coach_schema = AssignCoachSchema()


@users_bp.route("/coaches", methods=["GET"])
@current_actor
def list_coaches(actor):
    coaches = User.query.filter_by(role=ROLE_COACH, status="active").order_by(User.last_name).all()
    return jsonify({"coaches": [c.to_summary() for c in coaches]}), 200


@users_bp.route("/clients", methods=["GET"])
@current_actor
@roles_required(ROLE_COACH)
def list_clients(actor):
    clients = actor.clients.order_by(User.last_name, User.first_name).all()
    return jsonify({"clients": [c.to_dict() for c in clients]}), 200


@users_bp.route("/<int:user_id>/coach", methods=["PUT"])
@current_actor
@roles_required(ROLE_ADMIN)
def assign_coach(user_id, actor):
    """Assign (or clear, with ``coach_id: null``) the coach of a user."""
    user = db.session.get(User, user_id)
    if not user:
        raise NotFound("User not found")

    coach_id = load_or_fail(assign_coach_schema, request.get_json(silent=True))["coach_id"]
    coach = None
    if coach_id is not None:
        coach = db.session.get(User, coach_id)
        if not coach or coach.role != ROLE_COACH:
            raise ValidationFailed("Invalid coach", [{"field": "coach_id", "message": "Not a coach"}])

    user.assigned_coach_id = coach_id
    db.session.commit()

    if coach is not None:
        notify(
            [user.id],
            title="Coach assigned",
            message=f"{coach.full_name} is now your coach",
            type="assigned_coach",
            sender_id=actor.id,
            entity_type="user",
            entity_id=coach.id,
        )
        notify(
            [coach.id],
            title="New client assigned",
            message=f"{user.full_name} has been assigned to you",
            type="assigned_coach",
            sender_id=actor.id,
            entity_type="user",
            entity_id=user.id,
        )
    return jsonify({"msg": "Coach updated", "user": user.to_dict()}), 200
