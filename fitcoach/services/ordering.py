"""
Positions of workouts and combined workouts inside a session.

By default each kind has its own sequence (a session can hold workout #1
and combined workout #1). With ``SESSION_ORDERING = "unified"`` both kinds
draw from one sequence instead. Reordering writes the requested value as
is: duplicates and gaps are kept until a caller corrects them, and ties
list in insertion order.
"""
import logging

from flask import current_app
from sqlalchemy import func

from fitcoach.errors import NotFound, ValidationFailed
from fitcoach.extensions import db
from fitcoach.models.combined_workout import CombinedWorkout
from fitcoach.models.workout import Workout

logger = logging.getLogger(__name__)

SEPARATE = "separate"
UNIFIED = "unified"
ORDERING_MODES = (SEPARATE, UNIFIED)

ORDERED_KINDS = (Workout, CombinedWorkout)


class OrderingManager:
    def __init__(self, mode=SEPARATE):
        if mode not in ORDERING_MODES:
            raise ValueError(f"Unknown session ordering mode: {mode}")
        self.mode = mode

    def _max_order(self, model, session_id):
        return (
            db.session.query(func.max(model.order))
            .filter(model.session_id == session_id)
            .scalar()
        )

    def next_order(self, model, session_id):
        models = ORDERED_KINDS if self.mode == UNIFIED else (model,)
        highest = [self._max_order(m, session_id) for m in models]
        highest = [value for value in highest if value is not None]
        return max(highest) + 1 if highest else 1

    def place(self, entity, session_id):
        """Append ``entity`` at the end of the session's sequence for its kind."""
        entity.session_id = session_id
        entity.order = self.next_order(type(entity), session_id)
        return entity.order

    def _clashes(self, model, session_id, entity_id, order):
        """How many other entries of the session already sit at ``order``."""
        kinds = ORDERED_KINDS if self.mode == UNIFIED else (model,)
        total = 0
        for kind in kinds:
            query = kind.query.filter(kind.session_id == session_id, kind.order == order)
            if kind is model:
                query = query.filter(kind.id != entity_id)
            total += query.count()
        return total

    def update_order(self, model, session_id, entity_id, new_order):
        if isinstance(new_order, bool) or not isinstance(new_order, int) or new_order < 1:
            raise ValidationFailed(
                "Invalid order",
                [{"field": "order", "message": "Order must be a positive integer"}],
            )

        entity = model.query.filter_by(id=entity_id, session_id=session_id).first()
        if entity is None:
            raise NotFound(f"{model.__name__} {entity_id} is not part of session {session_id}")

        if self._clashes(model, session_id, entity_id, new_order):
            logger.info(f"Session {session_id}: {model.__name__} {entity_id} now shares order {new_order}")

        entity.order = new_order
        return entity

    def list_in_session(self, model, session_id):
        return (
            model.query
            .filter(model.session_id == session_id)
            .order_by(model.order.asc(), model.id.asc())
            .all()
        )

    def timeline(self, session_id):
        """Workouts and combined workouts of a session as one ordered list."""
        entries = []
        for rank, model in enumerate(ORDERED_KINDS):
            entries.extend((e.order or 0, e.created_at, rank, e.id, e) for e in self.list_in_session(model, session_id))
        entries.sort(key=lambda row: row[:4])
        return [row[4] for row in entries]


def get_ordering_manager():
    return OrderingManager(current_app.config.get("SESSION_ORDERING", SEPARATE))
