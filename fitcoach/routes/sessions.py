from flask import Blueprint, request, jsonify, current_app
from sqlalchemy import func, or_

from fitcoach.errors import NotFound, PermissionDenied
from fitcoach.extensions import db
from fitcoach.models.combined_workout import CombinedWorkout
from fitcoach.models.session import TrainingSession
from fitcoach.models.user import User, ROLE_ADMIN, ROLE_COACH
from fitcoach.models.workout import Workout
from fitcoach.schemas import load_or_fail
from fitcoach.schemas.training import SessionSchema, WorkoutSchema, CombinedWorkoutSchema, OrderSchema
from fitcoach.services.composition import delete_session, ensure_can_mutate, resolve_users
from fitcoach.services.notifications import notify_assignees
from fitcoach.services.ordering import get_ordering_manager
from fitcoach.utils.decorators import current_actor
from fitcoach.utils.pagination import paginate

from .combined_workouts import create_combined_from, serialize as serialize_combined
from .workouts import create_workout_from

sessions_bp = Blueprint("sessions", __name__)
session_schema = SessionSchema()
workout_schema = WorkoutSchema()
combined_workout_schema = CombinedWorkoutSchema()
order_schema = OrderSchema()


def get_visible_session(session_id, actor):
    session = db.session.get(TrainingSession, session_id)
    if not session or not session.is_visible_to(actor):
        raise NotFound("Session not found")
    return session


def get_mutable_session(session_id, actor):
    session = get_visible_session(session_id, actor)
    ensure_can_mutate(actor, session)
    return session


def session_detail(session):
    manager = get_ordering_manager()
    data = session.to_dict()
    data["workouts"] = [w.to_dict() for w in manager.list_in_session(Workout, session.id)]
    data["combined_workouts"] = [
        serialize_combined(c) for c in manager.list_in_session(CombinedWorkout, session.id)
    ]
    data["total_duration"] = session.calculate_total_duration()
    return data


@sessions_bp.route("", methods=["GET"])
@current_actor
def list_sessions(actor):
    query = TrainingSession.query.filter(TrainingSession.is_active.is_(True))
    if actor.role not in (ROLE_COACH, ROLE_ADMIN):
        query = query.filter(or_(
            TrainingSession.is_public.is_(True),
            TrainingSession.created_by == actor.id,
            TrainingSession.assigned_users.any(User.id == actor.id),
        ))
    for key in ("type", "difficulty"):
        value = request.args.get(key)
        if value:
            query = query.filter(getattr(TrainingSession, key) == value)
    query = query.order_by(TrainingSession.created_at.desc(), TrainingSession.id.desc())
    return jsonify(paginate(query)), 200


@sessions_bp.route("/stats", methods=["GET"])
@current_actor
def session_stats(actor):
    """Figures over the active sessions the caller created."""
    query = TrainingSession.query.filter(
        TrainingSession.created_by == actor.id,
        TrainingSession.is_active.is_(True),
    )
    def counts(column):
        rows = query.with_entities(column, func.count(TrainingSession.id)).group_by(column).all()
        return {key: count for key, count in rows if key is not None}

    session_ids = [row.id for row in query.with_entities(TrainingSession.id)]
    total_workouts = 0
    if session_ids:
        total_workouts = Workout.query.filter(Workout.session_id.in_(session_ids)).count()
    average = query.with_entities(func.avg(func.coalesce(TrainingSession.duration, 0))).scalar()

    return jsonify({
        "total_sessions": len(session_ids),
        "total_workouts": total_workouts,
        "average_duration": round(float(average), 2) if average is not None else 0,
        "by_type": counts(TrainingSession.type),
        "by_difficulty": counts(TrainingSession.difficulty),
    }), 200


@sessions_bp.route("/user/<int:user_id>", methods=["GET"])
@current_actor
def list_user_sessions(user_id, actor):
    """Active sessions the user created or is assigned to, newest first."""
    if actor.id != user_id and actor.role not in (ROLE_COACH, ROLE_ADMIN):
        raise PermissionDenied("You can only list your own sessions")
    if not db.session.get(User, user_id):
        raise NotFound("User not found")
    query = TrainingSession.query.filter(
        TrainingSession.is_active.is_(True),
        or_(
            TrainingSession.created_by == user_id,
            TrainingSession.assigned_users.any(User.id == user_id),
        ),
    ).order_by(TrainingSession.created_at.desc(), TrainingSession.id.desc())
    return jsonify(paginate(query)), 200


@sessions_bp.route("/<int:session_id>", methods=["GET"])
@current_actor
def get_session(session_id, actor):
    """Session with its workouts and combined workouts, each sorted by order."""
    return jsonify({"session": session_detail(get_visible_session(session_id, actor))}), 200


@sessions_bp.route("/<int:session_id>/timeline", methods=["GET"])
@current_actor
def get_session_timeline(session_id, actor):
    session = get_visible_session(session_id, actor)
    entries = []
    for entity in get_ordering_manager().timeline(session.id):
        kind = "workout" if isinstance(entity, Workout) else "combined_workout"
        entries.append({"kind": kind, "id": entity.id, "name": entity.name, "order": entity.order})
    return jsonify({"session_id": session.id, "timeline": entries}), 200


@sessions_bp.route("", methods=["POST"])
@current_actor
def create_session(actor):
    data = load_or_fail(session_schema, request.get_json(silent=True))
    assignees = resolve_users(data.pop("assigned_to", None))

    session = TrainingSession(created_by=actor.id, **data)
    session.assigned_users = assignees
    db.session.add(session)
    db.session.commit()
    current_app.logger.info(f"Session {session.id} created by user {actor.id}")

    notify_assignees(session, "session", "created", actor.id, notification_type="session_assigned")
    return jsonify({"msg": "Session created", "session": session.to_dict()}), 201


@sessions_bp.route("/<int:session_id>", methods=["PUT", "PATCH"])
@current_actor
def update_session(session_id, actor):
    session = get_mutable_session(session_id, actor)

    data = load_or_fail(session_schema, request.get_json(silent=True), partial=True)
    if "assigned_to" in data:
        session.assigned_users = resolve_users(data.pop("assigned_to"))
    for key, value in data.items():
        setattr(session, key, value)
    db.session.commit()

    notify_assignees(session, "session", "updated", actor.id, notification_type="session_assigned")
    return jsonify({"msg": "Session updated", "session": session.to_dict()}), 200


@sessions_bp.route("/<int:session_id>", methods=["DELETE"])
@current_actor
def remove_session(session_id, actor):
    session = get_mutable_session(session_id, actor)

    recipients = session.assigned_to
    result = delete_session(session)
    db.session.commit()

    notify_assignees(session, "session", "deleted", actor.id,
                     notification_type="session_assigned", recipients=recipients)
    return jsonify({"msg": "Session deleted", **result}), 200


# ---------- session content ----------

@sessions_bp.route("/<int:session_id>/workouts", methods=["POST"])
@current_actor
def add_workout(session_id, actor):
    session = get_mutable_session(session_id, actor)
    data = load_or_fail(workout_schema, request.get_json(silent=True))
    workout = create_workout_from(data, actor, session)
    return jsonify({"msg": "Workout added to session", "workout": workout.to_dict()}), 201


@sessions_bp.route("/<int:session_id>/combined-workouts", methods=["POST"])
@current_actor
def add_combined_workout(session_id, actor):
    session = get_mutable_session(session_id, actor)
    data = load_or_fail(combined_workout_schema, request.get_json(silent=True))
    combined = create_combined_from(data, actor, session)
    return jsonify({
        "msg": "Combined workout added to session",
        "combined_workout": serialize_combined(combined),
    }), 201


def _reorder(model, session_id, entity_id, actor):
    get_mutable_session(session_id, actor)
    order = load_or_fail(order_schema, request.get_json(silent=True))["order"]
    entity = get_ordering_manager().update_order(model, session_id, entity_id, order)
    db.session.commit()
    return entity


@sessions_bp.route("/<int:session_id>/workouts/<int:workout_id>/order", methods=["PATCH"])
@current_actor
def reorder_workout(session_id, workout_id, actor):
    workout = _reorder(Workout, session_id, workout_id, actor)
    return jsonify({"msg": "Workout order updated", "workout": workout.to_dict()}), 200


@sessions_bp.route("/<int:session_id>/combined-workouts/<int:combined_id>/order", methods=["PATCH"])
@current_actor
def reorder_combined_workout(session_id, combined_id, actor):
    combined = _reorder(CombinedWorkout, session_id, combined_id, actor)
    return jsonify({"msg": "Combined workout order updated", "combined_workout": serialize_combined(combined)}), 200


@sessions_bp.route("/<int:session_id>/duration", methods=["GET"])
@current_actor
def get_session_duration(session_id, actor):
    session = get_visible_session(session_id, actor)
    return jsonify({
        "session_id": session.id,
        "duration": session.duration,
        "total_duration": session.calculate_total_duration(),
    }), 200
