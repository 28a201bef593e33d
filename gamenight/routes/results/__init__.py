from flask import Blueprint

bp = Blueprint("results", __name__)

from gamenight.routes.results import routes  # noqa: E402, F401
