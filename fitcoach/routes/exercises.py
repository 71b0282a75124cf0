from datetime import datetime, timedelta

from flask import Blueprint, request, jsonify
from sqlalchemy import func

from fitcoach.errors import NotFound
from fitcoach.extensions import db
from fitcoach.models.exercise import Exercise
from fitcoach.models.user import ROLE_ADMIN, ROLE_COACH
from fitcoach.schemas import load_or_fail
from fitcoach.schemas.training import ExerciseSchema
from fitcoach.utils.decorators import current_actor, roles_required
from fitcoach.utils.pagination import paginate

exercises_bp = Blueprint("exercises", __name__)
exercise_schema = ExerciseSchema()


@exercises_bp.route("", methods=["GET"])
@current_actor
def list_exercises(actor):
    query = Exercise.query.filter_by(is_active=True)
    category = request.args.get("category")
    if category:
        query = query.filter_by(category=category)
    search = (request.args.get("search") or "").strip()
    if search:
        query = query.filter(Exercise.name.ilike(f"%{search}%"))
    return jsonify(paginate(query.order_by(Exercise.name.asc()))), 200


@exercises_bp.route("/<int:exercise_id>", methods=["GET"])
@current_actor
def get_exercise(exercise_id, actor):
    exercise = db.session.get(Exercise, exercise_id)
    if not exercise or not exercise.is_active:
        raise NotFound("Exercise not found")
    return jsonify({"exercise": exercise.to_dict()}), 200


@exercises_bp.route("", methods=["POST"])
@current_actor
@roles_required(ROLE_COACH, ROLE_ADMIN)
def create_exercise(actor):
    data = load_or_fail(exercise_schema, request.get_json(silent=True))
    exercise = Exercise(created_by=actor.id, **data)
    db.session.add(exercise)
    db.session.commit()
    return jsonify({"msg": "Exercise created", "exercise": exercise.to_dict()}), 201


@exercises_bp.route("/stats", methods=["GET"])
@current_actor
@roles_required(ROLE_COACH, ROLE_ADMIN)
def exercise_stats(actor):
    def counts(column):
        rows = (
            db.session.query(column, func.count(Exercise.id))
            .filter(Exercise.is_active.is_(True))
            .group_by(column)
            .all()
        )
        return {key: count for key, count in rows if key is not None}

    total = Exercise.query.count()
    active = Exercise.query.filter_by(is_active=True).count()
    recent = Exercise.query.filter(Exercise.created_at >= datetime.utcnow() - timedelta(days=30)).count()
    return jsonify({
        "total": total,
        "active": active,
        "inactive": total - active,
        "recent": recent,
        "by_category": counts(Exercise.category),
        "by_difficulty": counts(Exercise.difficulty_level),
    }), 200


@exercises_bp.route("/<int:exercise_id>", methods=["PUT", "PATCH"])
@current_actor
@roles_required(ROLE_COACH, ROLE_ADMIN)
def update_exercise(exercise_id, actor):
    exercise = db.session.get(Exercise, exercise_id)
    if not exercise:
        raise NotFound("Exercise not found")
    data = load_or_fail(exercise_schema, request.get_json(silent=True), partial=True)
    for key, value in data.items():
        setattr(exercise, key, value)
    db.session.commit()
    return jsonify({"msg": "Exercise updated", "exercise": exercise.to_dict()}), 200


@exercises_bp.route("/<int:exercise_id>", methods=["DELETE"])
@current_actor
@roles_required(ROLE_COACH, ROLE_ADMIN)
def deactivate_exercise(exercise_id, actor):
    """Soft delete: workouts referencing the exercise keep working."""
    exercise = db.session.get(Exercise, exercise_id)
    if not exercise:
        raise NotFound("Exercise not found")
    exercise.is_active = False
    db.session.commit()
    return jsonify({"msg": "Exercise deactivated"}), 200
