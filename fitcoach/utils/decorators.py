# fitcoach/utils/decorators.py
from functools import wraps

from flask_jwt_extended import get_jwt_identity, jwt_required

from fitcoach.errors import PermissionDenied
from fitcoach.extensions import db
from fitcoach.models.user import User


def current_actor(view_func):
    """
    Require a valid JWT and pass the authenticated user to the view as the
    ``actor`` keyword argument.
    """
    @wraps(view_func)
    @jwt_required()
    def wrapper(*args, **kwargs):
        user = db.session.get(User, int(get_jwt_identity()))
        if not user or user.status == "inactive":
            raise PermissionDenied("Unknown or inactive account")
        kwargs['actor'] = user
        return view_func(*args, **kwargs)
    return wrapper


def roles_required(*roles):
    """Reject actors whose role is not in ``roles``. Use below ``current_actor``."""
    def decorator(view_func):
        @wraps(view_func)
        def wrapper(*args, **kwargs):
            actor = kwargs.get('actor')
            if actor is None or actor.role not in roles:
                raise PermissionDenied("You do not have the required role for this resource")
            return view_func(*args, **kwargs)
        return wrapper
    return decorator
