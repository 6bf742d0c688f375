from urllib.parse import urlencode

from flask import abort, redirect, request, session

from wtfrent.users import get_user_by_id

USER_SESSION_KEY = "userId"
DEFAULT_REDIRECT = "/"


def safe_redirect(target, default=DEFAULT_REDIRECT):
    """Only local paths are allowed as redirect targets."""
    if not target or not isinstance(target, str):
        return default
    if not target.startswith("/") or target.startswith("//"):
        return default
    return target


def login_url(redirect_to):
    return f"/login?{urlencode({'redirectTo': redirect_to})}"


def get_user_id():
    return session.get(USER_SESSION_KEY)


def require_user_id(redirect_to=None):
    """Return the session's user id, or end the request with a login redirect."""
    user_id = get_user_id()
    if not user_id:
        abort(redirect(login_url(redirect_to or request.path)))
    return user_id


def get_user():
    """Resolve the session's user. A stale id (deleted account) logs the visitor out."""
    user_id = get_user_id()
    if user_id is None:
        return None
    user = get_user_by_id(user_id)
    if user:
        return user
    abort(logout())


def require_user():
    user_id = require_user_id()
    user = get_user_by_id(user_id)
    if user:
        return user
    abort(logout(login_url(request.path)))


def create_user_session(user_id, remember=False, redirect_to=DEFAULT_REDIRECT):
    session[USER_SESSION_KEY] = user_id
    # a permanent session is committed with the week-long max age
    session.permanent = bool(remember)
    return redirect(redirect_to)


def logout(redirect_to=None):
    session.clear()
    return redirect(redirect_to or request.path)
