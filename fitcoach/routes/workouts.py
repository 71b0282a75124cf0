from flask import Blueprint, request, jsonify, current_app
from sqlalchemy import func, or_

from fitcoach.errors import NotFound
from fitcoach.extensions import db
from fitcoach.models.session import TrainingSession
from fitcoach.models.user import User, ROLE_ADMIN, ROLE_COACH
from fitcoach.models.workout import Workout
from fitcoach.schemas import load_or_fail
from fitcoach.schemas.training import WorkoutSchema
from fitcoach.services.composition import ensure_can_mutate, resolve_users, validate_exercise_references
from fitcoach.services.notifications import notify_assignees
from fitcoach.services.ordering import get_ordering_manager
from fitcoach.utils.decorators import current_actor
from fitcoach.utils.pagination import paginate

workouts_bp = Blueprint("workouts", __name__)
workout_schema = WorkoutSchema()


def get_visible_workout(workout_id, actor):
    workout = db.session.get(Workout, workout_id)
    if not workout or not workout.is_visible_to(actor):
        raise NotFound("Workout not found")
    return workout


def visible_workouts(actor):
    query = Workout.query
    if actor.role not in (ROLE_COACH, ROLE_ADMIN):
        query = query.filter(or_(
            Workout.is_public.is_(True),
            Workout.created_by == actor.id,
            Workout.assigned_users.any(User.id == actor.id),
        ))
    return query


def create_workout_from(data, actor, session=None):
    """Build and persist a workout; placed at the end of ``session`` when given."""
    validate_exercise_references(data.get("exercises"))
    assignees = resolve_users(data.pop("assigned_to", None))
    data.pop("session_id", None)

    workout = Workout(created_by=actor.id, **data)
    workout.assigned_users = assignees
    if session is not None:
        get_ordering_manager().place(workout, session.id)
    db.session.add(workout)
    db.session.commit()
    current_app.logger.info(f"Workout {workout.id} created by user {actor.id}")

    notify_assignees(workout, "workout", "created", actor.id)
    return workout


@workouts_bp.route("", methods=["GET"])
@current_actor
def list_workouts(actor):
    query = visible_workouts(actor)
    if request.args.get("include_inactive") != "true":
        query = query.filter(Workout.is_active.is_(True))
    for key in ("type", "difficulty"):
        value = request.args.get(key)
        if value:
            query = query.filter(getattr(Workout, key) == value)
    search = (request.args.get("search") or "").strip()
    if search:
        query = query.filter(Workout.name.ilike(f"%{search}%"))
    return jsonify(paginate(query.order_by(Workout.created_at.desc(), Workout.id.desc()))), 200


@workouts_bp.route("/stats", methods=["GET"])
@current_actor
def workout_stats(actor):
    query = visible_workouts(actor).filter(Workout.is_active.is_(True))
    def counts(column):
        rows = query.with_entities(column, func.count(Workout.id)).group_by(column).all()
        return {key: count for key, count in rows}

    return jsonify({
        "total": query.count(),
        "by_type": counts(Workout.type),
        "by_difficulty": counts(Workout.difficulty),
    }), 200


@workouts_bp.route("/<int:workout_id>", methods=["GET"])
@current_actor
def get_workout(workout_id, actor):
    return jsonify({"workout": get_visible_workout(workout_id, actor).to_dict()}), 200


@workouts_bp.route("/<int:workout_id>/duration", methods=["GET"])
@current_actor
def get_workout_duration(workout_id, actor):
    workout = get_visible_workout(workout_id, actor)
    return jsonify({
        "workout_id": workout.id,
        "duration": workout.duration,
        "total_duration": workout.calculate_total_duration(),
    }), 200


@workouts_bp.route("", methods=["POST"])
@current_actor
def create_workout(actor):
    data = load_or_fail(workout_schema, request.get_json(silent=True))
    session = None
    if data.get("session_id") is not None:
        session = db.session.get(TrainingSession, data["session_id"])
        if not session:
            raise NotFound("Session not found")
        ensure_can_mutate(actor, session)
    workout = create_workout_from(data, actor, session)
    return jsonify({"msg": "Workout created", "workout": workout.to_dict()}), 201


@workouts_bp.route("/<int:workout_id>", methods=["PUT", "PATCH"])
@current_actor
def update_workout(workout_id, actor):
    workout = get_visible_workout(workout_id, actor)
    ensure_can_mutate(actor, workout)

    data = load_or_fail(workout_schema, request.get_json(silent=True), partial=True)
    if "exercises" in data:
        validate_exercise_references(data["exercises"])
    if "assigned_to" in data:
        workout.assigned_users = resolve_users(data.pop("assigned_to"))
    # moving between sessions goes through the session endpoints
    data.pop("session_id", None)

    for key, value in data.items():
        setattr(workout, key, value)
    db.session.commit()

    notify_assignees(workout, "workout", "updated", actor.id)
    return jsonify({"msg": "Workout updated", "workout": workout.to_dict()}), 200


@workouts_bp.route("/<int:workout_id>", methods=["DELETE"])
@current_actor
def delete_workout(workout_id, actor):
    workout = get_visible_workout(workout_id, actor)
    ensure_can_mutate(actor, workout)

    recipients = workout.assigned_to
    # combined workouts keep the id and report it as missing
    db.session.delete(workout)
    db.session.commit()
    current_app.logger.info(f"Workout {workout_id} deleted by user {actor.id}")

    notify_assignees(workout, "workout", "deleted", actor.id, recipients=recipients)
    return jsonify({"msg": "Workout deleted"}), 200
