from datetime import datetime, timedelta

from flask import Blueprint, request, jsonify
from sqlalchemy import func, or_

from fitcoach.errors import NotFound, ValidationFailed
from fitcoach.extensions import db
from fitcoach.models.meal import Meal, MEAL_TYPES
from fitcoach.models.user import User, ROLE_ADMIN, ROLE_COACH
from fitcoach.schemas import load_or_fail
from fitcoach.schemas.meal import MealSchema, MealReviewSchema
from fitcoach.services.composition import ensure_can_mutate
from fitcoach.services.notifications import notify
from fitcoach.utils.decorators import current_actor, roles_required
from fitcoach.utils.pagination import paginate

meals_bp = Blueprint("meals", __name__)
meal_schema = MealSchema()
review_schema = MealReviewSchema()


def get_visible_meal(meal_id, actor):
    meal = db.session.get(Meal, meal_id)
    if not meal:
        raise NotFound("Meal not found")
    if actor.role not in (ROLE_COACH, ROLE_ADMIN) and actor.id not in (meal.created_by, meal.assigned_to):
        raise NotFound("Meal not found")
    return meal


def check_assignee(user_id):
    if user_id is not None and not db.session.get(User, user_id):
        raise ValidationFailed(errors=[{"field": "assigned_to", "message": f"User {user_id} does not exist"}])


@meals_bp.route("", methods=["GET"])
@current_actor
def list_meals(actor):
    query = Meal.query.filter(Meal.is_active.is_(True))
    if actor.role not in (ROLE_COACH, ROLE_ADMIN):
        query = query.filter(or_(Meal.created_by == actor.id, Meal.assigned_to == actor.id))

    meal_type = request.args.get("type")
    if meal_type:
        if meal_type not in MEAL_TYPES:
            raise ValidationFailed(errors=[{"field": "type", "message": "Unknown meal type"}])
        query = query.filter(Meal.type == meal_type)
    status = request.args.get("status")
    if status:
        query = query.filter(Meal.status == status)
    user_id = request.args.get("user_id", type=int)
    if user_id:
        query = query.filter(Meal.assigned_to == user_id)

    return jsonify(paginate(query.order_by(Meal.created_at.desc(), Meal.id.desc()))), 200


@meals_bp.route("/stats", methods=["GET"])
@current_actor
def meal_stats(actor):
    query = Meal.query
    if actor.role not in (ROLE_COACH, ROLE_ADMIN):
        query = query.filter(or_(Meal.created_by == actor.id, Meal.assigned_to == actor.id))
    active = query.filter(Meal.is_active.is_(True))
    by_status = dict(active.with_entities(Meal.status, func.count(Meal.id)).group_by(Meal.status).all())
    by_type = dict(active.with_entities(Meal.type, func.count(Meal.id)).group_by(Meal.type).all())

    return jsonify({
        "total": query.count(),
        "active": active.count(),
        "pending": by_status.get("pending", 0),
        "approved": by_status.get("approved", 0),
        "rejected": by_status.get("rejected", 0),
        "recent": active.filter(Meal.created_at >= datetime.utcnow() - timedelta(days=30)).count(),
        "by_type": {meal_type: by_type.get(meal_type, 0) for meal_type in MEAL_TYPES},
    }), 200


@meals_bp.route("/<int:meal_id>", methods=["GET"])
@current_actor
def get_meal(meal_id, actor):
    return jsonify({"meal": get_visible_meal(meal_id, actor).to_dict()}), 200


@meals_bp.route("", methods=["POST"])
@current_actor
def create_meal(actor):
    data = load_or_fail(meal_schema, request.get_json(silent=True))
    check_assignee(data.get("assigned_to"))

    meal = Meal(created_by=actor.id, **data)
    db.session.add(meal)
    db.session.commit()

    if meal.assigned_to and meal.assigned_to != actor.id:
        notify(
            [meal.assigned_to],
            title="New meal assigned",
            message=f"{actor.full_name} assigned you a meal: {meal.name}",
            type="meal_action",
            sender_id=actor.id,
            entity_type="meal",
            entity_id=meal.id,
            extra={"action": "created"},
        )
    return jsonify({"msg": "Meal created", "meal": meal.to_dict()}), 201


@meals_bp.route("/<int:meal_id>", methods=["PUT", "PATCH"])
@current_actor
def update_meal(meal_id, actor):
    meal = get_visible_meal(meal_id, actor)
    ensure_can_mutate(actor, meal)

    data = load_or_fail(meal_schema, request.get_json(silent=True), partial=True)
    if "assigned_to" in data:
        check_assignee(data["assigned_to"])
    for key, value in data.items():
        setattr(meal, key, value)
    db.session.commit()
    return jsonify({"msg": "Meal updated", "meal": meal.to_dict()}), 200


@meals_bp.route("/<int:meal_id>", methods=["DELETE"])
@current_actor
def delete_meal(meal_id, actor):
    meal = get_visible_meal(meal_id, actor)
    ensure_can_mutate(actor, meal)
    db.session.delete(meal)
    db.session.commit()
    return jsonify({"msg": "Meal deleted"}), 200


@meals_bp.route("/<int:meal_id>/review", methods=["PATCH"])
@current_actor
@roles_required(ROLE_COACH, ROLE_ADMIN)
def review_meal(meal_id, actor):
    meal = get_visible_meal(meal_id, actor)
    data = load_or_fail(review_schema, request.get_json(silent=True))

    meal.status = data["status"]
    meal.review_notes = data.get("review_notes")
    meal.reviewed_by = actor.id
    db.session.commit()

    if meal.created_by != actor.id:
        notify(
            [meal.created_by],
            title=f"Meal {meal.status}",
            message=f"Your meal '{meal.name}' was {meal.status}",
            type="meal_action",
            sender_id=actor.id,
            entity_type="meal",
            entity_id=meal.id,
            extra={"action": "reviewed", "status": meal.status},
        )
    return jsonify({"msg": "Meal reviewed", "meal": meal.to_dict()}), 200
