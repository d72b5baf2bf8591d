from typing import Optional
from flask_jwt_extended import get_jwt_identity
from eventease.models import User
from eventease.repositories import UserRepository


def get_current_user() -> Optional[User]:
    """User named by the verified access token.

    Must be called under ``@jwt_required()``. Returns None when the token
    names a user that no longer exists.
    """
    identity = get_jwt_identity()
    if identity is None:
        return None
    try:
        user_id = int(identity)
    except (TypeError, ValueError):
        return None
    return UserRepository.find_by_id(user_id)
