import os
from typing import Optional

from dotenv import load_dotenv, dotenv_values

_ENV_LOADED = False
_DOTENV_VALUES = {}


class MissingSessionSecret(RuntimeError):
    """Raised at startup when SESSION_SECRET is not configured."""


def load_env_once(dotenv_path: Optional[str] = None) -> None:
    """
    Load .env a single time and keep the raw file values in _DOTENV_VALUES.
    """
    global _ENV_LOADED, _DOTENV_VALUES
    if _ENV_LOADED:
        return
    path = dotenv_path or os.path.join(os.getcwd(), ".env")
    # push into os.environ so Flask and its extensions see it too
    load_dotenv(path)
    # raw .env values, without overrides from the shell
    _DOTENV_VALUES = dotenv_values(path)
    _ENV_LOADED = True


def _first_nonempty(*vals: Optional[str]) -> Optional[str]:
    for v in vals:
        if v:
            v = v.strip()
            if v:
                return v
    return None


def _normalize_pg(url: Optional[str]) -> Optional[str]:
    if url and url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql://", 1)
    return url


def resolve_database_uri() -> str:
    """
    Final priority:
      1) ENV SQLALCHEMY_DATABASE_URI
      2) .env SQLALCHEMY_DATABASE_URI
      3) ENV DATABASE_URL
      4) .env DATABASE_URL
      5) Fallback sqlite:///instance/wtfrent.db
    Plus: normalize postgres:// -> postgresql://
    """
    url = _first_nonempty(
        os.environ.get("SQLALCHEMY_DATABASE_URI"),
        _DOTENV_VALUES.get("SQLALCHEMY_DATABASE_URI"),
    )
    if url:
        return _normalize_pg(url)

    url = _first_nonempty(
        os.environ.get("DATABASE_URL"),
        _DOTENV_VALUES.get("DATABASE_URL"),
    )
    if url:
        return _normalize_pg(url)

    inst = os.path.abspath(os.path.join(os.getcwd(), "instance"))
    os.makedirs(inst, exist_ok=True)
    return f"sqlite:///{os.path.join(inst, 'wtfrent.db')}"


def resolve_session_secret() -> str:
    """
    SESSION_SECRET: ENV first, then .env. There is no fallback value.
    """
    secret = _first_nonempty(
        os.environ.get("SESSION_SECRET"),
        _DOTENV_VALUES.get("SESSION_SECRET"),
    )
    if not secret:
        raise MissingSessionSecret("SESSION_SECRET is not defined")
    return secret


def resolve_environment() -> str:
    env = _first_nonempty(
        os.environ.get("FLASK_ENV"),
        _DOTENV_VALUES.get("FLASK_ENV"),
    )
    return (env or "production").lower()
