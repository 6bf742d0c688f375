from flask.sessions import SecureCookieSession, SessionInterface, session_json_serializer
from itsdangerous import BadData, URLSafeTimedSerializer
from werkzeug.http import dump_cookie, parse_cookie


class SessionStore:
    """Signed cookie storage for the user session.

    ``get_session`` never fails: a missing, malformed or tampered cookie
    yields an empty session. ``commit_session`` and ``destroy_session``
    return the value of a ``Set-Cookie`` header.
    """

    salt = "cookie-session"

    def __init__(
        self, secret_key, cookie_name="_session", secure=True, path="/", samesite="Lax", max_age=None
    ):
        self.cookie_name = cookie_name
        self.secure = secure
        self.path = path
        self.samesite = samesite
        # upper bound for signature age, also the "remember me" lifetime
        self.max_age = max_age
        self.serializer = URLSafeTimedSerializer(
            secret_key, salt=self.salt, serializer=session_json_serializer
        )

    @classmethod
    def from_app(cls, app):
        return cls(
            app.config["SECRET_KEY"],
            cookie_name=app.config["SESSION_COOKIE_NAME"],
            secure=app.config["SESSION_COOKIE_SECURE"],
            path=app.config["SESSION_COOKIE_PATH"] or "/",
            samesite=app.config["SESSION_COOKIE_SAMESITE"] or "Lax",
            max_age=int(app.permanent_session_lifetime.total_seconds()),
        )

    def get_session(self, cookie_header):
        value = parse_cookie(cookie_header or "").get(self.cookie_name)
        if not value:
            return SecureCookieSession()
        try:
            data = self.serializer.loads(value, max_age=self.max_age)
        except BadData:
            return SecureCookieSession()
        if not isinstance(data, dict):
            return SecureCookieSession()
        return SecureCookieSession(data)

    def commit_session(self, session, max_age=None):
        return dump_cookie(
            self.cookie_name,
            self.serializer.dumps(dict(session)),
            max_age=max_age,
            path=self.path,
            secure=self.secure,
            httponly=True,
            samesite=self.samesite,
        )

    def destroy_session(self, session):
        session.clear()
        return dump_cookie(
            self.cookie_name,
            "",
            max_age=0,
            expires=0,
            path=self.path,
            secure=self.secure,
            httponly=True,
            samesite=self.samesite,
        )


class CookieSessionInterface(SessionInterface):
    """Plugs SessionStore into Flask so ``flask.session`` is the store's session.

    A permanent session ("remember me") is committed with the store's
    ``max_age``; anything else lives for the browser session.
    """

    def _store(self, app):
        return app.extensions["session_store"]

    def open_session(self, app, request):
        return self._store(app).get_session(request.headers.get("Cookie"))

    def save_session(self, app, session, response):
        if session.accessed:
            response.vary.add("Cookie")
        if not session.modified:
            return

        store = self._store(app)
        if not session:
            response.headers.add("Set-Cookie", store.destroy_session(session))
            return

        max_age = store.max_age if session.permanent else None
        response.headers.add("Set-Cookie", store.commit_session(session, max_age=max_age))


def init_session_store(app):
    app.extensions["session_store"] = SessionStore.from_app(app)
    app.session_interface = CookieSessionInterface()
    return app.extensions["session_store"]
