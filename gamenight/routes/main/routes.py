import logging

from flask import current_app, render_template, request

from gamenight import db
from gamenight.models import Game
from gamenight.routes.main import bp
from gamenight.services.leaderboard_service import (
    build_champions,
    build_game_leaderboard,
    resolve_selected_game,
)

logger = logging.getLogger(__name__)


@bp.route("/")
def index():
    """Landing page: pick a game, see who holds each crown"""
    games = Game.get_all()
    champions = build_champions(
        db.session,
        games,
        fallback_avatar_url=current_app.config.get("CHAMPION_FALLBACK_AVATAR_URL"),
    )

    return render_template("main/index.html", games=games, champions=champions)


@bp.route("/leaderboard")
def leaderboard():
    """Per-game leaderboard, recomputed from scratch on every request"""
    games = Game.get_all()
    selected_slug = request.args.get("game")
    selected_game = resolve_selected_game(
        games, selected_slug, current_app.config.get("DEFAULT_GAME_SLUG")
    )

    board = build_game_leaderboard(
        db.session,
        selected_game,
        recent_limit=current_app.config.get("RECENT_MATCHES_LIMIT", 10),
        fallback_avatar_url=current_app.config.get("CHAMPION_FALLBACK_AVATAR_URL"),
    )

    return render_template(
        "main/leaderboard.html",
        games=games,
        selected_game=selected_game,
        board=board,
    )
