from flask import jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
import logging

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

db = SQLAlchemy()
migrate = Migrate(compare_type=True, render_as_batch=True)
jwt = JWTManager()
limiter = Limiter(
    get_remote_address,
    default_limits=["150 per minute", "10000 per hour"],
)


def _authentication_required(reason):
    logger.info(f"Rejected request without a usable access token: {reason}")
    return (
        jsonify({"error": "Authentication required", "code": "AUTHENTICATION_REQUIRED"}),
        401,
    )


@jwt.unauthorized_loader
def missing_token_callback(reason):
    return _authentication_required(reason)


@jwt.invalid_token_loader
def invalid_token_callback(reason):
    return _authentication_required(reason)


@jwt.expired_token_loader
def expired_token_callback(jwt_header, jwt_payload):
    return _authentication_required("token expired")
