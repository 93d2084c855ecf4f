"""User service: lookups, local registration and profile updates.

Functions flush but do NOT commit; the caller commits.
"""

import logging
from urllib.parse import urlparse

from sqlalchemy.exc import IntegrityError
from werkzeug.security import check_password_hash, generate_password_hash

from kanban.extensions import db
from kanban.models.user import User
from kanban.services.errors import Conflict, InvalidInput

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
MAX_NAME_LENGTH = 120


def user_summary(user):
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "image": user.image,
        "email_verified": bool(user.email_verified),
        "created_at": user.created_at.isoformat() if user.created_at else None,
    }


def get_user_by_id(user_id):
    """Return the User row or None."""
    if not user_id:
        return None
    return db.session.get(User, user_id)


def get_user_by_email(email):
    if not email:
        return None
    return User.query.filter_by(email=email.lower().strip()).first()


def register_user(email, password, name=None):
    """Create a local account.

    Raises:
        InvalidInput: INVALID_REGISTRATION for a missing email or short password.
        Conflict: USER_EXISTS if the email is taken.
    """
    email = (email or "").lower().strip()
    if not email or "@" not in email:
        raise InvalidInput("A valid email is required.", code="INVALID_REGISTRATION")
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise InvalidInput(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters.",
            code="INVALID_REGISTRATION",
        )
    if get_user_by_email(email) is not None:
        raise Conflict("An account with this email already exists.", code="USER_EXISTS")

    user = User(
        email=email,
        password_hash=generate_password_hash(password),
        name=(name or "").strip() or None,
    )
    db.session.add(user)
    try:
        db.session.flush()
    except IntegrityError as e:
        db.session.rollback()
        logger.warning(f"Registration raced on existing email {email}: {e}")
        raise Conflict("An account with this email already exists.", code="USER_EXISTS") from e
    return user


def authenticate(email, password):
    """Return the active user matching the credentials, or None."""
    user = get_user_by_email(email)
    if user is None or not check_password_hash(user.password_hash, password or ""):
        return None
    if not user.is_active:
        return None
    return user


def _valid_image_url(value):
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def update_user_profile(user_id, data):
    """Update name and/or image. Returns None if the user does not exist.

    An empty update returns the user unchanged.

    Raises:
        InvalidInput: INVALID_PROFILE for a blank/long name or a non-URL image.
    """
    user = get_user_by_id(user_id)
    if user is None:
        return None

    if "name" in data:
        name = data["name"]
        if name is not None:
            name = name.strip() if isinstance(name, str) else ""
            if not name or len(name) > MAX_NAME_LENGTH:
                raise InvalidInput("Invalid name", code="INVALID_PROFILE")
        user.name = name

    if "image" in data:
        image = data["image"]
        if image is not None and not (isinstance(image, str) and _valid_image_url(image)):
            raise InvalidInput("Image must be an http(s) URL", code="INVALID_PROFILE")
        user.image = image

    db.session.flush()
    return user
