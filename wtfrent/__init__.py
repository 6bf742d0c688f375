import logging
from datetime import timedelta

from flask import Flask, render_template
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_wtf import CSRFProtect


from .config_db import (
    load_env_once,
    resolve_database_uri,
    resolve_environment,
    resolve_session_secret,
)
from .session import init_session_store
from .time_utils import utc_now

db = SQLAlchemy()
migrate = Migrate()
csrf = CSRFProtect()

# "remember me" keeps the session cookie for a week
REMEMBER_ME_LIFETIME = timedelta(days=7)


def create_app(test_config=None):
    app = Flask(__name__)

    # .env is read once; without SESSION_SECRET the app is never built
    load_env_once()
    environment = resolve_environment()
    app.config["ENV_NAME"] = environment
    app.config["SQLALCHEMY_DATABASE_URI"] = resolve_database_uri()
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    app.config["SECRET_KEY"] = resolve_session_secret()
    app.config["SESSION_COOKIE_NAME"] = "_session"
    app.config["SESSION_COOKIE_SAMESITE"] = "Lax"
    app.config["SESSION_COOKIE_PATH"] = "/"
    app.config["SESSION_COOKIE_SECURE"] = environment not in ("development", "test")
    app.config["PERMANENT_SESSION_LIFETIME"] = REMEMBER_ME_LIFETIME
    app.config["SESSION_REFRESH_EACH_REQUEST"] = False
    app.config["WTF_CSRF_TIME_LIMIT"] = None

    if test_config:
        app.config.update(test_config)

    init_session_store(app)
    db.init_app(app)
    migrate.init_app(app, db)
    csrf.init_app(app)

    from . import models  # noqa: F401  (tables must be registered before create_all)
    from .routes import bp

    app.register_blueprint(bp)

    @app.errorhandler(404)
    def not_found(error):
        return render_template("404.html"), 404

    @app.errorhandler(500)
    def internal_error(error):
        logging.exception("Unhandled error while serving request")
        return render_template("500.html"), 500

    @app.context_processor
    def inject_template_globals():
        return {"current_year": utc_now().year}

    @app.shell_context_processor
    def _ctx():
        ctx = {"db": db}
        for name in ("User", "PasswordResetToken", "Post", "Comment"):
            ctx[name] = getattr(models, name)
        return ctx

    return app
