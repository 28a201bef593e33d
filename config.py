import os
import secrets
import warnings

from dotenv import load_dotenv

basedir = os.path.abspath(os.path.dirname(__file__))
load_dotenv(os.path.join(basedir, ".env"))


def _env_flag(name, default="false"):
    return os.environ.get(name, default).lower() in ("true", "on", "1", "yes")


def _env_int(name, default):
    return int(os.environ.get(name) or default)


def _secret(name):
    """Read a signing key, or make a throwaway one and say so"""
    value = os.environ.get(name)
    if not value:
        warnings.warn(
            f"{name} not set! Using an auto-generated key; logins will not "
            "survive a restart. Run 'python3 generate_secrets.py' to create a .env.",
            UserWarning,
        )
        value = secrets.token_urlsafe(32)
    return value


class Config:
    SECRET_KEY = _secret("SECRET_KEY")
    WTF_CSRF_SECRET_KEY = _secret("WTF_CSRF_SECRET_KEY")

    def __init__(self):
        self.SQLALCHEMY_DATABASE_URI = self._build_database_uri()

    def _build_database_uri(self):
        """DATABASE_URL wins; otherwise postgres from DB_* parts, or local sqlite"""
        if os.environ.get("DATABASE_URL"):
            return os.environ["DATABASE_URL"]

        if os.environ.get("DB_TYPE", "sqlite").lower() != "postgresql":
            return "sqlite:///" + os.path.join(basedir, "gamenight.db")

        parts = {
            "user": os.environ.get("DB_USER") or "gamenight",
            "password": os.environ.get("DB_PASSWORD") or "gamenight",
            "host": os.environ.get("DB_HOST") or "localhost",
            "port": os.environ.get("DB_PORT") or "5432",
            "name": os.environ.get("DB_NAME") or "gamenight_db",
        }
        return "postgresql+psycopg://{user}:{password}@{host}:{port}/{name}".format(
            **parts
        )

    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Invite and password reset mail
    MAIL_SERVER = os.environ.get("MAIL_SERVER")
    MAIL_PORT = _env_int("MAIL_PORT", 587)
    MAIL_USE_TLS = _env_flag("MAIL_USE_TLS", "true")
    MAIL_USERNAME = os.environ.get("MAIL_USERNAME")
    MAIL_PASSWORD = os.environ.get("MAIL_PASSWORD")
    FROM_EMAIL = os.environ.get("FROM_EMAIL") or MAIL_USERNAME
    FROM_NAME = os.environ.get("FROM_NAME", "Game Night")
    RESET_TOKEN_EXPIRY = _env_int("RESET_TOKEN_EXPIRY", 72)  # hours, invites too

    # Leaderboards
    DEFAULT_GAME_SLUG = os.environ.get("DEFAULT_GAME_SLUG", "catan")
    CHAMPION_FALLBACK_AVATAR_URL = os.environ.get("CHAMPION_FALLBACK_AVATAR_URL")
    RECENT_MATCHES_LIMIT = _env_int("RECENT_MATCHES_LIMIT", 10)
    ADMIN_LIST_LIMIT = _env_int("ADMIN_LIST_LIMIT", 50)
    TIMEZONE = os.environ.get("TIMEZONE", "UTC")

    RATELIMIT_STORAGE_URI = os.environ.get("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_ENABLED = True

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_TO_CONSOLE = _env_flag("LOG_TO_CONSOLE", "true")
    LOG_TO_FILE = _env_flag("LOG_TO_FILE", "true")
    LOG_DIR = os.environ.get("LOG_DIR", "logs")
    SLOW_FUNCTION_THRESHOLD = float(os.environ.get("SLOW_FUNCTION_THRESHOLD", "1.0"))

    FLASK_ENV = os.environ.get("FLASK_ENV", "development")
    DEBUG = FLASK_ENV == "development"
    TESTING = False


class DevelopmentConfig(Config):
    DEBUG = True
    SQLALCHEMY_ECHO = _env_flag("SQLALCHEMY_ECHO")


class ProductionConfig(Config):
    DEBUG = False

    def __init__(self):
        super().__init__()

        for name in ("SECRET_KEY", "WTF_CSRF_SECRET_KEY"):
            if not os.environ.get(name):
                warnings.warn(
                    f"PRODUCTION WARNING: {name} not explicitly set!", UserWarning
                )


class TestingConfig(Config):
    """In-memory database, no CSRF, no rate limits, quiet logs"""

    TESTING = True
    DEBUG = False
    WTF_CSRF_ENABLED = False
    RATELIMIT_ENABLED = False
    LOG_TO_CONSOLE = False
    LOG_TO_FILE = False

    def __init__(self):
        super().__init__()
        self.SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"


config = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
    "default": DevelopmentConfig,
}
