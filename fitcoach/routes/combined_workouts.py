from flask import Blueprint, request, jsonify, current_app
from sqlalchemy import or_

from fitcoach.errors import NotFound
from fitcoach.extensions import db
from fitcoach.models.combined_workout import CombinedWorkout
from fitcoach.models.session import TrainingSession
from fitcoach.models.user import User, ROLE_ADMIN, ROLE_COACH
from fitcoach.schemas import load_or_fail
from fitcoach.schemas.training import CombinedWorkoutSchema
from fitcoach.services import duration
from fitcoach.services.composition import ensure_can_mutate, resolve_users, validate_combined_workout
from fitcoach.services.notifications import notify_assignees
from fitcoach.services.ordering import get_ordering_manager
from fitcoach.utils.decorators import current_actor
from fitcoach.utils.pagination import paginate

combined_workouts_bp = Blueprint("combined_workouts", __name__)
combined_workout_schema = CombinedWorkoutSchema()


def get_visible_combined(combined_id, actor):
    combined = db.session.get(CombinedWorkout, combined_id)
    if not combined or not combined.is_visible_to(actor):
        raise NotFound("Combined workout not found")
    return combined


def serialize(combined):
    data = combined.to_dict()
    data["total_duration"] = duration.calculate_combined_duration(combined)
    return data


def create_combined_from(data, actor, session=None):
    """Validate references, then write. Nothing is stored if any check fails."""
    validate_combined_workout(data)
    assignees = resolve_users(data.pop("assigned_to", None))
    data.pop("session_id", None)

    combined = CombinedWorkout(created_by=actor.id, **data)
    combined.assigned_users = assignees
    if session is not None:
        get_ordering_manager().place(combined, session.id)
    db.session.add(combined)
    db.session.commit()
    current_app.logger.info(f"Combined workout {combined.id} created with {combined.workout_count} workout(s)")

    notify_assignees(combined, "combined workout", "created", actor.id)
    return combined


@combined_workouts_bp.route("", methods=["GET"])
@current_actor
def list_combined_workouts(actor):
    query = CombinedWorkout.query.filter(CombinedWorkout.is_active.is_(True))
    if actor.role not in (ROLE_COACH, ROLE_ADMIN):
        query = query.filter(or_(
            CombinedWorkout.is_public.is_(True),
            CombinedWorkout.created_by == actor.id,
            CombinedWorkout.assigned_users.any(User.id == actor.id),
        ))
    search = (request.args.get("search") or "").strip()
    if search:
        query = query.filter(CombinedWorkout.name.ilike(f"%{search}%"))
    query = query.order_by(CombinedWorkout.created_at.desc(), CombinedWorkout.id.desc())
    return jsonify(paginate(query, serialize)), 200


@combined_workouts_bp.route("/<int:combined_id>", methods=["GET"])
@current_actor
def get_combined_workout(combined_id, actor):
    return jsonify({"combined_workout": serialize(get_visible_combined(combined_id, actor))}), 200


@combined_workouts_bp.route("", methods=["POST"])
@current_actor
def create_combined_workout(actor):
    data = load_or_fail(combined_workout_schema, request.get_json(silent=True))
    session = None
    if data.get("session_id") is not None:
        session = db.session.get(TrainingSession, data["session_id"])
        if not session:
            raise NotFound("Session not found")
        ensure_can_mutate(actor, session)
    combined = create_combined_from(data, actor, session)
    return jsonify({"msg": "Combined workout created", "combined_workout": serialize(combined)}), 201


@combined_workouts_bp.route("/<int:combined_id>", methods=["PUT", "PATCH"])
@current_actor
def update_combined_workout(combined_id, actor):
    combined = get_visible_combined(combined_id, actor)
    ensure_can_mutate(actor, combined)

    data = load_or_fail(combined_workout_schema, request.get_json(silent=True), partial=True)
    validate_combined_workout(data, partial=True)
    assignees = resolve_users(data.pop("assigned_to")) if "assigned_to" in data else None
    data.pop("session_id", None)

    for key, value in data.items():
        setattr(combined, key, value)
    if assignees is not None:
        combined.assigned_users = assignees
    db.session.commit()

    notify_assignees(combined, "combined workout", "updated", actor.id)
    return jsonify({"msg": "Combined workout updated", "combined_workout": serialize(combined)}), 200


@combined_workouts_bp.route("/<int:combined_id>", methods=["DELETE"])
@current_actor
def delete_combined_workout(combined_id, actor):
    combined = get_visible_combined(combined_id, actor)
    ensure_can_mutate(actor, combined)

    recipients = combined.assigned_to
    db.session.delete(combined)
    db.session.commit()

    notify_assignees(combined, "combined workout", "deleted", actor.id, recipients=recipients)
    return jsonify({"msg": "Combined workout deleted"}), 200
