from flask import Blueprint, current_app, jsonify
from flask_jwt_extended import jwt_required
from eventease.exceptions import EventEaseError, UnauthorizedError
from eventease.routes import error_response, unexpected_error_response
from eventease.services import RegistrationService
from eventease.utils.auth import get_current_user

registration_bp = Blueprint("registration", __name__)


@registration_bp.route("/registrations", methods=["GET"])
@jwt_required()
def get_my_registrations():
    try:
        user = get_current_user()
        if not user:
            raise UnauthorizedError()

        return jsonify(RegistrationService.get_user_registrations(user)), 200
    except EventEaseError as e:
        return error_response(e)
    except Exception as e:
        return unexpected_error_response("loading registrations", e)


@registration_bp.route("/registrations/<int:registration_id>/qr", methods=["GET"])
@jwt_required()
def get_registration_qr(registration_id):
    """Issue a fresh signed check-in QR code for one of the caller's registrations"""
    try:
        user = get_current_user()
        if not user:
            raise UnauthorizedError()

        checkin_service = current_app.extensions["checkin_service"]
        return jsonify(checkin_service.issue_token(user, registration_id)), 200
    except EventEaseError as e:
        return error_response(e)
    except Exception as e:
        return unexpected_error_response("generating check-in QR code", e)
