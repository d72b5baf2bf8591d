from eventease.models import User
from eventease.models.enums import UserRole
from eventease.exceptions import BadRequestError, MissingFieldsError, UnauthorizedError
from werkzeug.security import generate_password_hash, check_password_hash
from flask_jwt_extended import create_access_token
from eventease.repositories import UserRepository
from datetime import timedelta
import logging

logger = logging.getLogger(__name__)

ROLE_NAMES = {"user": UserRole.USER, "organizer": UserRole.ORGANIZER}


class UserService:
    @staticmethod
    def sign_up(user_data):
        required_fields = ["email", "password", "name"]
        missing = [f for f in required_fields if not user_data.get(f)]
        if missing:
            raise MissingFieldsError(missing)

        email = user_data["email"].strip().lower()
        if UserRepository.find_by_email(email):
            logger.warning(f"Signup attempt with existing email: {email}")
            raise BadRequestError("User already exists", code="USER_EXISTS")

        role_name = str(user_data.get("role", "user")).lower()
        role = ROLE_NAMES.get(role_name)
        if role is None:
            logger.warning(f"Invalid role value: {role_name}")
            raise BadRequestError(
                "Invalid role value. Must be either user or organizer",
                code="INVALID_ROLE",
            )

        user = User(
            role_id=role.value,
            email=email,
            password=generate_password_hash(user_data["password"]),
            name=user_data["name"].strip(),
        )
        created_user = UserRepository.sign_up(user)

        access_token = create_access_token(
            identity=str(created_user.id), expires_delta=timedelta(days=1)
        )
        logger.info(f"User created successfully: {created_user.email}")
        return {"token": access_token, "user": created_user.to_dict()}

    @staticmethod
    def sign_in(email, password):
        user = UserRepository.find_by_email(email.strip().lower())
        if not user or not check_password_hash(user.password, password):
            logger.warning(f"Failed login attempt for: {email}")
            raise UnauthorizedError("Invalid email or password", code="INVALID_CREDENTIALS")

        access_token = create_access_token(
            identity=str(user.id), expires_delta=timedelta(days=1)
        )
        logger.info(f"User logged in successfully: {email}")
        return {"token": access_token, "user": user.to_dict()}
