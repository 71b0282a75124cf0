from flask import Blueprint, request, jsonify

from fitcoach.errors import NotFound, ValidationFailed
from fitcoach.models.questionnaire import HealthQuestionnaire
from fitcoach.models.user import User, ROLE_ADMIN, ROLE_COACH
from fitcoach.schemas import load_or_fail
from fitcoach.schemas.questionnaire import QuestionnaireSchema
from fitcoach.services import questionnaires as service
from fitcoach.services.risk import RISK_LEVELS
from fitcoach.utils.decorators import current_actor, roles_required
from fitcoach.utils.pagination import paginate

questionnaires_bp = Blueprint("questionnaires", __name__)
questionnaire_schema = QuestionnaireSchema()


def _save(user, actor, created_status):
    data = load_or_fail(questionnaire_schema, request.get_json(silent=True), partial=True)
    questionnaire = service.upsert(user, data, actor)
    return jsonify({
        "msg": "Questionnaire saved",
        "questionnaire": questionnaire.to_dict(),
        "recommendations": questionnaire.get_recommendations(),
    }), created_status


def _recommendations(user):
    questionnaire = HealthQuestionnaire.query.filter_by(user_id=user.id).first()
    if questionnaire is None:
        raise NotFound("No questionnaire found for this user")
    return {
        "risk_score": questionnaire.risk_score,
        "risk_level": questionnaire.risk_level,
        "is_complete": questionnaire.is_complete,
        "recommendations": questionnaire.get_recommendations(),
    }


# ---------- own questionnaire ----------

@questionnaires_bp.route("/me", methods=["GET"])
@current_actor
def get_my_questionnaire(actor):
    questionnaire = service.get_or_create(actor)
    return jsonify({"questionnaire": questionnaire.to_dict()}), 200


@questionnaires_bp.route("/me", methods=["POST"])
@current_actor
def create_my_questionnaire(actor):
    return _save(actor, actor, 201)


@questionnaires_bp.route("/me", methods=["PUT"])
@current_actor
def update_my_questionnaire(actor):
    return _save(actor, actor, 200)


@questionnaires_bp.route("/me/recommendations", methods=["GET"])
@current_actor
def my_recommendations(actor):
    return jsonify(_recommendations(actor)), 200


# ---------- another user's questionnaire ----------

@questionnaires_bp.route("/user/<int:user_id>", methods=["GET"])
@current_actor
def get_user_questionnaire(user_id, actor):
    user = service.get_user_or_404(user_id)
    service.ensure_can_access(actor, user)
    questionnaire = service.get_or_create(user)
    return jsonify({"questionnaire": questionnaire.to_dict(), "user": user.to_summary()}), 200


@questionnaires_bp.route("/user/<int:user_id>", methods=["POST", "PUT"])
@current_actor
def save_user_questionnaire(user_id, actor):
    user = service.get_user_or_404(user_id)
    service.ensure_can_access(actor, user)
    return _save(user, actor, 201 if request.method == "POST" else 200)


@questionnaires_bp.route("/user/<int:user_id>/recommendations", methods=["GET"])
@current_actor
def user_recommendations(user_id, actor):
    user = service.get_user_or_404(user_id)
    service.ensure_can_access(actor, user)
    data = _recommendations(user)
    data["user"] = user.to_summary()
    return jsonify(data), 200


@questionnaires_bp.route("/user/<int:user_id>", methods=["DELETE"])
@current_actor
@roles_required(ROLE_ADMIN)
def delete_user_questionnaire(user_id, actor):
    service.delete_for_user(user_id)
    return jsonify({"msg": "Questionnaire deleted"}), 200


# ---------- coach / admin overview ----------

@questionnaires_bp.route("", methods=["GET"])
@current_actor
@roles_required(ROLE_COACH, ROLE_ADMIN)
def list_questionnaires(actor):
    """List questionnaires, filtered by risk level, completeness or user name."""
    query = HealthQuestionnaire.query.join(User, HealthQuestionnaire.user_id == User.id)

    # coaches only see their own clients
    if actor.role == ROLE_COACH:
        query = query.filter(User.assigned_coach_id == actor.id)

    risk_level = request.args.get("risk_level")
    if risk_level:
        if risk_level not in RISK_LEVELS:
            raise ValidationFailed(errors=[{"field": "risk_level", "message": "Unknown risk level"}])
        query = query.filter(HealthQuestionnaire.risk_level == risk_level)

    is_complete = request.args.get("is_complete")
    if is_complete is not None:
        query = query.filter(HealthQuestionnaire.is_complete.is_(is_complete.lower() in ("1", "true", "yes")))

    search = (request.args.get("search") or "").strip()
    if len(search) >= 2:
        pattern = f"%{search}%"
        query = query.filter(
            User.first_name.ilike(pattern) | User.last_name.ilike(pattern) | User.email.ilike(pattern)
        )

    query = query.order_by(HealthQuestionnaire.risk_score.desc(), HealthQuestionnaire.id.asc())

    def serialize(questionnaire):
        data = questionnaire.to_dict()
        data["user"] = questionnaire.user.to_summary()
        return data

    return jsonify(paginate(query, serialize)), 200


@questionnaires_bp.route("/stats", methods=["GET"])
@current_actor
@roles_required(ROLE_COACH, ROLE_ADMIN)
def questionnaire_stats(actor):
    return jsonify({"stats": service.stats()}), 200
