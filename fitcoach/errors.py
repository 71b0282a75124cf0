"""Domain errors and their JSON rendering."""
import logging

from flask import jsonify
from marshmallow import ValidationError

from fitcoach.extensions import db

logger = logging.getLogger(__name__)


class FitcoachError(Exception):
    status_code = 500
    default_message = "Internal error"

    def __init__(self, message=None, errors=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.errors = errors or []

    def to_dict(self):
        payload = {"msg": self.message}
        if self.errors:
            payload["errors"] = self.errors
        return payload


class NotFound(FitcoachError):
    status_code = 404
    default_message = "Not found"


class ValidationFailed(FitcoachError):
    status_code = 400
    default_message = "Invalid data"

    @classmethod
    def from_messages(cls, messages, message=None):
        """Build from a marshmallow ``messages`` dict."""
        if not isinstance(messages, dict):
            messages = {"_schema": messages}
        errors = []
        for field, details in sorted(messages.items()):
            if isinstance(details, dict):
                details = [f"{key}: {value}" for key, value in details.items()]
            elif not isinstance(details, list):
                details = [details]
            for detail in details:
                errors.append({"field": field, "message": str(detail)})
        return cls(message or "Please correct the following errors", errors)


class PermissionDenied(FitcoachError):
    status_code = 403
    default_message = "Permission denied"


class InvariantViolation(FitcoachError):
    status_code = 500
    default_message = "Internal invariant violated"


def register_error_handlers(app):
    @app.errorhandler(FitcoachError)
    def handle_domain_error(error):
        db.session.rollback()
        if error.status_code >= 500:
            app.logger.error(f"{type(error).__name__}: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(ValidationError)
    def handle_schema_error(error):
        db.session.rollback()
        failed = ValidationFailed.from_messages(error.messages)
        return jsonify(failed.to_dict()), failed.status_code

    @app.errorhandler(404)
    def handle_missing_route(error):
        return jsonify({"msg": "Resource not found"}), 404

    @app.errorhandler(405)
    def handle_bad_method(error):
        return jsonify({"msg": "Method not allowed"}), 405
