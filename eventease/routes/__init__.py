from flask import current_app, jsonify, request
from eventease.extensions import db
from eventease.exceptions import BadRequestError, EventEaseError


def error_response(error: EventEaseError):
    return jsonify(error.to_dict()), error.status_code


def unexpected_error_response(action: str, error: Exception):
    db.session.rollback()
    current_app.logger.error(f"Unexpected error while {action}: {str(error)}", exc_info=True)
    return jsonify({"error": "An unexpected error occurred"}), 500


def json_body() -> dict:
    """The request's JSON object, or {} when no JSON was sent."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise BadRequestError("Request body must be a JSON object", code="INVALID_BODY")
    return data
