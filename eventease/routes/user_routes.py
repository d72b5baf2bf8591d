from flask import Blueprint, request, jsonify, make_response
from flask_jwt_extended import jwt_required
from eventease.exceptions import EventEaseError, UnauthorizedError
from eventease.routes import error_response, json_body, unexpected_error_response
from eventease.services import AttendanceService, UserService
from eventease.utils.auth import get_current_user

user_bp = Blueprint("user", __name__)


@user_bp.route("/signup", methods=["POST"])
def sign_up():
    try:
        user_data = json_body()
        if not user_data:
            return jsonify({"error": "No data provided", "code": "NO_DATA"}), 400

        result = UserService.sign_up(user_data)
        return make_response(jsonify(result), 201)
    except EventEaseError as e:
        return error_response(e)
    except Exception as e:
        return unexpected_error_response("signing up", e)


@user_bp.route("/signin", methods=["POST"])
def sign_in():
    try:
        user_data = json_body()
        if not user_data:
            return jsonify({"error": "No data provided", "code": "NO_DATA"}), 400

        required_fields = ["email", "password"]
        missing_fields = [field for field in required_fields if field not in user_data]
        if missing_fields:
            return (
                jsonify(
                    {
                        "error": "Missing required fields",
                        "code": "MISSING_FIELDS",
                        "missing_fields": missing_fields,
                    }
                ),
                400,
            )

        result = UserService.sign_in(user_data["email"], user_data["password"])
        return jsonify(result), 200
    except EventEaseError as e:
        return error_response(e)
    except Exception as e:
        return unexpected_error_response("signing in", e)


@user_bp.route("/me", methods=["GET"])
@jwt_required()
def current_user_profile():
    user = get_current_user()
    if not user:
        return error_response(UnauthorizedError())
    return jsonify({"valid": True, "user": user.to_dict()})


@user_bp.route("/attendance", methods=["GET"])
@jwt_required()
def attendance_history():
    """Attendance records of the signed-in user across all events"""
    try:
        user = get_current_user()
        if not user:
            raise UnauthorizedError()

        history = AttendanceService.get_attendance_history(user, request.args)
        return jsonify(history), 200
    except EventEaseError as e:
        return error_response(e)
    except Exception as e:
        return unexpected_error_response("loading attendance history", e)
