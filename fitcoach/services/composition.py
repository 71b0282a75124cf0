"""
Ownership checks and reference validation for sessions, workouts and
combined workouts.

Every check here runs before anything is written, so a rejected call leaves
the store untouched.
"""
import logging

from flask import current_app

from fitcoach.errors import InvariantViolation, PermissionDenied, ValidationFailed
from fitcoach.extensions import db
from fitcoach.models.combined_workout import CombinedWorkout
from fitcoach.models.exercise import Exercise
from fitcoach.models.user import User, ROLE_COACH
from fitcoach.models.workout import Workout

logger = logging.getLogger(__name__)

CASCADE_NONE = "none"
CASCADE_WORKOUTS = "cascade-workouts"
CASCADE_ALL = "cascade-all"
CASCADE_POLICIES = (CASCADE_NONE, CASCADE_WORKOUTS, CASCADE_ALL)


def can_mutate(actor, entity):
    return entity.created_by == actor.id or actor.role == ROLE_COACH


def ensure_can_mutate(actor, entity):
    if not can_mutate(actor, entity):
        raise PermissionDenied(f"You are not allowed to modify this {type(entity).__name__}")


def _as_id_list(values, field):
    if not isinstance(values, (list, tuple)):
        raise ValidationFailed(errors=[{"field": field, "message": "Must be a list of ids"}])
    ids = []
    for value in values:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationFailed(errors=[{"field": field, "message": f"Invalid id: {value!r}"}])
        ids.append(value)
    return ids


def resolve_workout_ids(workout_ids, field="workout_ids"):
    """
    Check that every id names an existing workout. Returns the ids in the
    given order; duplicates are kept.
    """
    ids = _as_id_list(workout_ids, field)
    if not ids:
        raise ValidationFailed(errors=[{"field": field, "message": "At least one workout is required"}])

    found = {row.id for row in Workout.query.with_entities(Workout.id).filter(Workout.id.in_(ids))}
    missing = [wid for wid in ids if wid not in found]
    if missing:
        raise ValidationFailed(
            "Some workouts do not exist",
            [{"field": field, "message": f"Workout {wid} does not exist"} for wid in missing],
        )
    return ids


def validate_exercise_references(entries, field="exercises"):
    """Referenced exercise entries must point at active library exercises."""
    ids = [entry["exercise_id"] for entry in entries or [] if entry.get("exercise_id") is not None]
    if not ids:
        return entries
    found = {row.id for row in Exercise.query.with_entities(Exercise.id).filter(
        Exercise.id.in_(ids), Exercise.is_active.is_(True))}
    missing = [eid for eid in ids if eid not in found]
    if missing:
        raise ValidationFailed(
            "Some exercises do not exist or are not active",
            [{"field": field, "message": f"Exercise {eid} does not exist"} for eid in missing],
        )
    return entries


def resolve_users(user_ids, field="assigned_to"):
    ids = _as_id_list(user_ids or [], field)
    if not ids:
        return []
    users = User.query.filter(User.id.in_(ids)).all()
    by_id = {u.id: u for u in users}
    missing = [uid for uid in ids if uid not in by_id]
    if missing:
        raise ValidationFailed(
            "Some users do not exist",
            [{"field": field, "message": f"User {uid} does not exist"} for uid in missing],
        )
    # de-duplicate, keep first occurrence
    return list({uid: by_id[uid] for uid in ids}.values())


def validate_combined_workout(data, partial=False):
    """
    Validate name and workout references of a combined workout payload.

    On create both are required; on a partial update only supplied keys are
    checked.
    """
    errors = []
    if not partial or "name" in data:
        name = (data.get("name") or "").strip()
        if not name:
            errors.append({"field": "name", "message": "Name is required"})
        else:
            data["name"] = name
    if errors:
        raise ValidationFailed(errors=errors)

    if not partial or "workout_ids" in data:
        data["workout_ids"] = resolve_workout_ids(data.get("workout_ids") or [])
    return data


def get_cascade_policy():
    policy = current_app.config.get("SESSION_CASCADE_POLICY", CASCADE_ALL)
    if policy not in CASCADE_POLICIES:
        raise InvariantViolation(f"Unknown session cascade policy: {policy}")
    return policy


def delete_session(session, policy=None):
    """
    Delete ``session`` and apply the cascade policy to its content:
    ``none`` detaches workouts and combined workouts, ``cascade-workouts``
    deletes workouts and detaches combined workouts, ``cascade-all``
    deletes both.
    """
    policy = policy or get_cascade_policy()
    workouts = Workout.query.filter_by(session_id=session.id).all()
    combined = CombinedWorkout.query.filter_by(session_id=session.id).all()

    for workout in workouts:
        if policy in (CASCADE_WORKOUTS, CASCADE_ALL):
            db.session.delete(workout)
        else:
            workout.session_id = None
            workout.order = None

    for item in combined:
        if policy == CASCADE_ALL:
            db.session.delete(item)
        else:
            item.session_id = None
            item.order = None

    db.session.delete(session)
    logger.info(f"Deleted session {session.id} ({policy}): {len(workouts)} workout(s), {len(combined)} combined")
    return {"policy": policy, "workouts": len(workouts), "combined_workouts": len(combined)}
