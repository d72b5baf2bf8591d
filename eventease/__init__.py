from flask import Flask, jsonify
from flask_cors import CORS
from dotenv import load_dotenv
import os
from datetime import timedelta
import logging
from eventease.extensions import db, migrate, jwt, limiter
from eventease.services.checkin_service import CheckInService
from eventease.services.checkin_token import CheckInTokenSigner
from eventease.services.qr_code import QRCodeEncoder

# Load environment variables
load_dotenv()


def create_app(test_config=None):
    app = Flask(__name__)

    # Configure logging
    logging.basicConfig(level=logging.INFO)
    app.logger.setLevel(logging.INFO)

    # Configure database
    app.config["SQLALCHEMY_DATABASE_URI"] = os.getenv(
        "DATABASE_URL", "sqlite:///eventease.db"
    )
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False

    # Configure JWT
    app.config["JWT_SECRET_KEY"] = os.getenv("JWT_SECRET_KEY", "your-secret-key")
    app.config["JWT_ACCESS_TOKEN_EXPIRES"] = timedelta(days=1)
    app.config["JWT_TOKEN_LOCATION"] = ["headers"]
    app.config["JWT_HEADER_NAME"] = "Authorization"
    app.config["JWT_HEADER_TYPE"] = "Bearer"

    # Check-in QR codes
    app.config["CHECKIN_TOKEN_SECRET"] = os.getenv("CHECKIN_TOKEN_SECRET")
    app.config["CHECKIN_TOKEN_TTL_HOURS"] = int(os.getenv("CHECKIN_TOKEN_TTL_HOURS", 24))
    app.config["QR_BOX_SIZE"] = int(os.getenv("QR_BOX_SIZE", 8))
    app.config["QR_BORDER"] = int(os.getenv("QR_BORDER", 1))
    app.config["QR_ERROR_CORRECTION"] = os.getenv("QR_ERROR_CORRECTION", "M")

    # Rate limiting
    app.config["RATELIMIT_STORAGE_URI"] = os.getenv("LIMITER_STORAGE_URL", "memory://")
    app.config["RATELIMIT_STRATEGY"] = "fixed-window"

    if test_config:
        app.config.update(test_config)

    # Initialize Flask extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)

    # Wire the check-in workflow with its signing secret and encoder settings
    signer = CheckInTokenSigner(
        secret=app.config["CHECKIN_TOKEN_SECRET"] or app.config["JWT_SECRET_KEY"],
        ttl=timedelta(hours=app.config["CHECKIN_TOKEN_TTL_HOURS"]),
    )
    encoder = QRCodeEncoder(
        box_size=app.config["QR_BOX_SIZE"],
        border=app.config["QR_BORDER"],
        error_correction=app.config["QR_ERROR_CORRECTION"],
    )
    app.extensions["checkin_service"] = CheckInService(signer, encoder)

    # Register blueprints
    from eventease.routes.user_routes import user_bp
    from eventease.routes.event_routes import event_bp
    from eventease.routes.registration_routes import registration_bp
    from eventease.routes.attendance_routes import attendance_bp

    app.register_blueprint(user_bp, url_prefix="/api/user")
    app.register_blueprint(event_bp, url_prefix="/api")
    app.register_blueprint(registration_bp, url_prefix="/api")
    app.register_blueprint(attendance_bp, url_prefix="/api")

    # Set up CORS
    cors_origins = os.getenv(
        "CORS_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000",
    ).split(",")
    app.logger.info(f"Initializing CORS with origins: {cors_origins}")

    CORS(
        app,
        resources={
            r"/api/*": {"origins": cors_origins},
        },
        supports_credentials=True,
        methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept"],
        expose_headers=["Content-Type"],
    )

    @app.errorhandler(429)
    def rate_limited(e):
        return jsonify({"error": "Too many requests", "code": "RATE_LIMITED"}), 429

    return app
