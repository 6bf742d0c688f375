"""Account deletion.

A deleted user's posts and comments are handed to a shared ``anonymous``
account instead of being removed. The account is created on first use with a
random password nobody knows.
"""
import logging

from wtfrent import db
from wtfrent.errors import AccountConfirmationError, NotFoundError
from wtfrent.models import Comment, PasswordResetToken, Post, User
from wtfrent.passwords import get_reset_token, hash_password

ANONYMOUS_USERNAME = "anonymous"
ANONYMOUS_EMAIL = "anonymous@wtf.rent"


def get_or_create_anonymous_user():
    """Fetch the sentinel account, adding it to the session when missing.

    Does not commit; the caller owns the transaction.
    """
    anonymous = User.query.filter_by(username=ANONYMOUS_USERNAME, email=ANONYMOUS_EMAIL).first()
    if anonymous is None:
        anonymous = User(
            username=ANONYMOUS_USERNAME,
            email=ANONYMOUS_EMAIL,
            password=hash_password(get_reset_token()),
        )
        db.session.add(anonymous)
        db.session.flush()
    return anonymous


def delete_account(user_id, confirm_email):
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    # exact, case-sensitive match against the stored address
    if not confirm_email or user.email != confirm_email:
        raise AccountConfirmationError()
    if user.username == ANONYMOUS_USERNAME and user.email == ANONYMOUS_EMAIL:
        raise AccountConfirmationError("the anonymous account cannot be deleted")

    try:
        anonymous = get_or_create_anonymous_user()
        anonymous_id = anonymous.id
        Comment.query.filter_by(author_id=user_id).update({"author_id": anonymous_id})
        Post.query.filter_by(author_id=user_id).update({"author_id": anonymous_id})
        PasswordResetToken.query.filter_by(user_id=user_id).delete()
        User.query.filter_by(id=user_id).delete()
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logging.info("Deleted account %s; content reassigned to %s", user_id, anonymous_id)
    return anonymous_id
