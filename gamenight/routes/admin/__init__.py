from flask import Blueprint

bp = Blueprint("admin", __name__)

from gamenight.routes.admin import routes  # noqa: E402, F401
