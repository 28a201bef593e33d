"""
Logging setup for Game Night

Console output for development, plus rotating files (everything, and errors
only) tagged with the request and the logged-in player.
"""

import logging
import logging.handlers
import os

from flask import g, has_request_context, request

MB = 1024 * 1024

PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEBUG_FORMAT = PLAIN_FORMAT + " [%(filename)s:%(lineno)d]"
FILE_FORMAT = (
    PLAIN_FORMAT + " [%(method)s %(url)s] [%(remote_addr)s] [player %(player_id)s]"
)
ERROR_FORMAT = PLAIN_FORMAT + " [%(pathname)s:%(lineno)d] [%(method)s %(url)s]"


class RequestContextFilter(logging.Filter):
    """Stamp records with the current request and player, or '-' outside one"""

    def filter(self, record):
        record.url = record.method = record.remote_addr = record.player_id = "-"
        if has_request_context():
            record.url = request.url
            record.method = request.method
            record.remote_addr = request.remote_addr
            # Never trigger the user loader from a log call
            user = g.get("_login_user")
            if user is not None and user.is_authenticated:
                record.player_id = user.id
        return True


class ColoredFormatter(logging.Formatter):
    """Level names in color, for a terminal"""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record):
        color = self.COLORS.get(record.levelname)
        if color:
            # Copy so other handlers see the plain level name
            record = logging.makeLogRecord(record.__dict__)
            record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def _rotating_handler(path, level, fmt, max_bytes, backups):
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=max_bytes, backupCount=backups
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt="%Y-%m-%d %H:%M:%S"))
    handler.addFilter(RequestContextFilter())
    return handler


def setup_logging(app):
    """Configure the root logger from LOG_LEVEL, LOG_TO_CONSOLE, LOG_TO_FILE and LOG_DIR"""
    log_level = getattr(logging, app.config.get("LOG_LEVEL", "INFO").upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if app.config.get("LOG_TO_CONSOLE", True):
        console = logging.StreamHandler()
        console.setLevel(log_level)
        if app.debug:
            console.setFormatter(ColoredFormatter(DEBUG_FORMAT, datefmt="%H:%M:%S"))
        else:
            console.setFormatter(
                logging.Formatter(PLAIN_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
            )
        root_logger.addHandler(console)

    if app.config.get("LOG_TO_FILE", True):
        log_dir = app.config.get("LOG_DIR", "logs")
        os.makedirs(log_dir, exist_ok=True)

        root_logger.addHandler(
            _rotating_handler(
                os.path.join(log_dir, "gamenight.log"), log_level, FILE_FORMAT, 10 * MB, 5
            )
        )
        root_logger.addHandler(
            _rotating_handler(
                os.path.join(log_dir, "errors.log"), logging.ERROR, ERROR_FORMAT, 5 * MB, 3
            )
        )

    for noisy in ("werkzeug", "flask_limiter"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    app.logger.info(f"Logging configured - Level: {logging.getLevelName(log_level)}")


def get_logger(name):
    return logging.getLogger(name)
