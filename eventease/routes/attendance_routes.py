from flask import Blueprint, current_app, jsonify
from flask_jwt_extended import jwt_required
from eventease.exceptions import EventEaseError, UnauthorizedError
from eventease.extensions import limiter
from eventease.routes import error_response, json_body, unexpected_error_response
from eventease.services import AttendanceService
from eventease.utils.auth import get_current_user

attendance_bp = Blueprint("attendance", __name__)


@attendance_bp.route("/attendance/scan", methods=["POST"])
@limiter.limit("60 per minute")
@jwt_required()
def scan_attendance():
    try:
        user = get_current_user()
        if not user:
            raise UnauthorizedError()

        data = json_body()
        checkin_service = current_app.extensions["checkin_service"]
        result = checkin_service.redeem_token(user, data.get("qrData"), data.get("notes"))
        return jsonify(result), 201
    except EventEaseError as e:
        current_app.logger.info(f"Check-in scan rejected: {e.code}")
        return error_response(e)
    except Exception as e:
        return unexpected_error_response("recording scanned attendance", e)


@attendance_bp.route("/attendance/registrations/<int:registration_id>", methods=["PUT"])
@jwt_required()
def mark_attendance(registration_id):
    try:
        user = get_current_user()
        if not user:
            raise UnauthorizedError()

        data = json_body()
        attendance = AttendanceService.mark_attendance(registration_id, data, user)
        return jsonify(attendance.to_dict()), 200
    except EventEaseError as e:
        return error_response(e)
    except Exception as e:
        return unexpected_error_response("updating attendance", e)
