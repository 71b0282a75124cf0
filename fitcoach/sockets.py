import logging

from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from flask_socketio import join_room
from jwt.exceptions import PyJWTError

from fitcoach.extensions import socketio
from fitcoach.services.notifications import user_room

logger = logging.getLogger(__name__)


@socketio.on("connect")
def handle_connect(auth=None):
    """Put an authenticated client in its personal room; refuse anonymous ones."""
    try:
        verify_jwt_in_request()
    except (JWTExtendedException, PyJWTError) as e:
        logger.info(f"Rejected socket connection: {e}")
        return False
    join_room(user_room(get_jwt_identity()))
