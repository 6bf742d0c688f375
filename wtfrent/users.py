import logging
from datetime import timedelta

from sqlalchemy.exc import IntegrityError

from wtfrent import db
from wtfrent.accounts import ANONYMOUS_EMAIL, ANONYMOUS_USERNAME
from wtfrent.errors import ConflictError, NotFoundError
from wtfrent.models import PasswordResetToken, User
from wtfrent.passwords import get_reset_token, hash_password, verify_password
from wtfrent.time_utils import utc_now

RESET_TOKEN_TTL = timedelta(hours=1)
UNIQUE_FIELDS = ("email", "username")


def get_user_by_id(user_id):
    if not user_id:
        return None
    return db.session.get(User, user_id)


def get_user_by_email(email):
    if not email:
        return None
    return User.query.filter_by(email=email).first()


def _conflicting_field(exc):
    detail = str(getattr(exc, "orig", exc)).lower()
    for field in UNIQUE_FIELDS:
        if field in detail:
            return field
    return None


def create_user(email, password, username):
    """Create a user with a hashed password.

    Raises ConflictError naming ``email`` or ``username`` when either is taken
    or reserved for the anonymous account.
    """
    if email.lower() == ANONYMOUS_EMAIL or get_user_by_email(email):
        raise ConflictError("email")
    if username.lower() == ANONYMOUS_USERNAME:
        raise ConflictError("username")
    if User.query.filter_by(username=username).first():
        raise ConflictError("username")

    user = User(email=email, username=username, password=hash_password(password))
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        field = _conflicting_field(exc)
        if field is None:
            raise
        raise ConflictError(field) from exc
    return user


def delete_user_by_email(email):
    user = get_user_by_email(email)
    if not user:
        raise NotFoundError(f"User with email {email} not found")
    db.session.delete(user)
    db.session.commit()


def verify_login(email, password):
    """Return the user for a matching email/password pair, otherwise None.

    Unknown email and wrong password are indistinguishable to the caller.
    """
    user = get_user_by_email(email)
    if not user:
        return None
    if not verify_password(password, user.password):
        return None
    return user


def issue_reset_token(email):
    """Replace the user's reset token with a fresh one valid for an hour.

    Returns None for unknown emails so callers can answer identically.
    """
    user = get_user_by_email(email)
    if not user:
        return None

    expires_at = utc_now() + RESET_TOKEN_TTL
    if user.reset_token is None:
        user.reset_token = PasswordResetToken(token=get_reset_token(), expires_at=expires_at)
    else:
        user.reset_token.token = get_reset_token()
        user.reset_token.expires_at = expires_at
    db.session.commit()
    logging.info("Issued password reset token for user %s", user.id)
    return user.reset_token


def get_valid_reset_token(token_value):
    if not token_value:
        return None
    token = PasswordResetToken.query.filter_by(token=token_value).first()
    if not token or token.is_expired() or not token.user:
        return None
    return token


def reset_password(reset_token, password):
    user = reset_token.user
    user.password = hash_password(password)
    user.reset_token = None
    db.session.commit()
    return user
