from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required
from flask_cors import cross_origin
from eventease.exceptions import EventEaseError, UnauthorizedError
from eventease.routes import error_response, json_body, unexpected_error_response
from eventease.services import AttendanceService, EventService, RegistrationService
from eventease.utils.auth import get_current_user

event_bp = Blueprint("event", __name__)


@event_bp.route("/events", methods=["GET", "OPTIONS"])
@cross_origin(supports_credentials=True)
def get_all_events():
    if request.method == "OPTIONS":
        return "", 204

    events = EventService.get_events()
    return jsonify({"events": [event.to_dict() for event in events]}), 200


@event_bp.route("/events", methods=["POST"])
@jwt_required()
def create_event():
    try:
        user = get_current_user()
        if not user:
            raise UnauthorizedError()

        data = json_body()
        if not data:
            return jsonify({"error": "No data provided", "code": "NO_DATA"}), 400

        event = EventService.create_event(data, user)
        return jsonify(event.to_dict()), 201
    except EventEaseError as e:
        return error_response(e)
    except Exception as e:
        return unexpected_error_response("creating event", e)


@event_bp.route("/events/<int:event_id>", methods=["GET"])
def get_event(event_id):
    try:
        event = EventService.get_event(event_id)
        return jsonify(event.to_dict()), 200
    except EventEaseError as e:
        return error_response(e)


@event_bp.route("/events/<int:event_id>/register", methods=["POST"])
@jwt_required()
def register_for_event(event_id):
    try:
        user = get_current_user()
        if not user:
            raise UnauthorizedError()

        registration = RegistrationService.register_for_event(event_id, user)
        return jsonify(registration.to_dict()), 201
    except EventEaseError as e:
        return error_response(e)
    except Exception as e:
        return unexpected_error_response("registering for event", e)


@event_bp.route("/events/<int:event_id>/cancel-registration", methods=["POST"])
@jwt_required()
def cancel_registration(event_id):
    try:
        user = get_current_user()
        if not user:
            raise UnauthorizedError()

        registration = RegistrationService.cancel_registration(event_id, user)
        return (
            jsonify(
                {
                    "message": "Registration cancelled successfully",
                    "registration": registration.to_dict(),
                }
            ),
            200,
        )
    except EventEaseError as e:
        return error_response(e)
    except Exception as e:
        return unexpected_error_response("cancelling registration", e)


@event_bp.route("/events/<int:event_id>/attendees", methods=["GET"])
@jwt_required()
def get_event_attendees(event_id):
    """Registrations of an event with their check-in state, for the organizer"""
    try:
        user = get_current_user()
        if not user:
            raise UnauthorizedError()

        roster = AttendanceService.get_event_roster(event_id, user, request.args)
        return jsonify(roster), 200
    except EventEaseError as e:
        return error_response(e)
    except Exception as e:
        return unexpected_error_response("loading event attendees", e)
