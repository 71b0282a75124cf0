from datetime import datetime, timedelta

from sqlalchemy import func

from fitcoach.errors import NotFound, PermissionDenied
from fitcoach.extensions import db
from fitcoach.models.questionnaire import HealthQuestionnaire
from fitcoach.models.user import User, ROLE_ADMIN, ROLE_COACH
from fitcoach.services import risk
from fitcoach.services.notifications import notify


def get_user_or_404(user_id):
    user = db.session.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    return user


def ensure_can_access(actor, user):
    """The user themself, an admin, or the coach assigned to the user."""
    if actor.id == user.id or actor.role == ROLE_ADMIN:
        return
    if actor.role == ROLE_COACH and user.assigned_coach_id == actor.id:
        return
    raise PermissionDenied("You can only access the questionnaires of users assigned to you")


def get_or_create(user):
    """Return the user's questionnaire, creating an empty one on first read."""
    questionnaire = HealthQuestionnaire.query.filter_by(user_id=user.id).first()
    if questionnaire is None:
        questionnaire = HealthQuestionnaire(user_id=user.id)
        db.session.add(questionnaire)
        db.session.commit()
    return questionnaire


def upsert(user, data, actor):
    """
    Create the questionnaire or update the supplied fields in place. Derived
    fields are recomputed by the model before the write.
    """
    questionnaire = HealthQuestionnaire.query.filter_by(user_id=user.id).first()
    if questionnaire is None:
        questionnaire = HealthQuestionnaire(user_id=user.id, **data)
        db.session.add(questionnaire)
    else:
        for key, value in data.items():
            setattr(questionnaire, key, value)
        # force the pre-write hook even when nothing changed
        questionnaire.last_updated = datetime.utcnow()
    db.session.commit()

    if user.assigned_coach_id:
        notify(
            [user.assigned_coach_id],
            title="Health questionnaire updated",
            message=f"{user.full_name} updated their health questionnaire",
            type="health_questions_updated",
            sender_id=actor.id,
            entity_type="questionnaire",
            entity_id=questionnaire.id,
        )
    return questionnaire


def delete_for_user(user_id):
    questionnaire = HealthQuestionnaire.query.filter_by(user_id=user_id).first()
    if questionnaire is None:
        raise NotFound("No questionnaire found for this user")
    db.session.delete(questionnaire)
    db.session.commit()


def stats():
    total = HealthQuestionnaire.query.count()
    complete = HealthQuestionnaire.query.filter_by(is_complete=True).count()
    by_level = dict(
        db.session.query(HealthQuestionnaire.risk_level, func.count(HealthQuestionnaire.id))
        .group_by(HealthQuestionnaire.risk_level)
        .all()
    )
    recent = HealthQuestionnaire.query.filter(
        HealthQuestionnaire.created_at >= datetime.utcnow() - timedelta(days=30)
    ).count()
    average = db.session.query(func.avg(HealthQuestionnaire.risk_score)).scalar()

    return {
        "total": total,
        "complete": complete,
        "incomplete": total - complete,
        "recent": recent,
        "by_risk_level": {level: by_level.get(level, 0) for level in risk.RISK_LEVELS},
        "average_risk_score": round(float(average), 2) if average is not None else 0,
    }
