from functools import wraps

from flask import current_app, jsonify

from gamenight import db
from gamenight.models import Game
from gamenight.routes.api import bp
from gamenight.services.leaderboard_service import build_champions, build_game_leaderboard


def add_security_headers(f):
    """Add no-cache headers to API responses"""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        response = f(*args, **kwargs)
        if hasattr(response, "headers"):
            response.headers["Cache-Control"] = (
                "no-store, no-cache, must-revalidate, max-age=0"
            )
        return response

    return decorated_function


@bp.route("/games")
@add_security_headers
def games():
    """All games with their versions"""
    return jsonify([game.to_dict() for game in Game.get_all()])


@bp.route("/leaderboard/<slug>")
@add_security_headers
def leaderboard(slug):
    """Ranked stats for one game"""
    game = Game.get_by_slug(slug)
    if not game:
        return jsonify({"error": "Game not found"}), 404

    board = build_game_leaderboard(
        db.session,
        game,
        recent_limit=current_app.config.get("RECENT_MATCHES_LIMIT", 10),
        fallback_avatar_url=current_app.config.get("CHAMPION_FALLBACK_AVATAR_URL"),
    )
    return jsonify(board.to_dict())


@bp.route("/champions")
@add_security_headers
def champions():
    """Current champion per game (null for games nobody has won yet)"""
    games = Game.get_all()
    by_game = build_champions(
        db.session,
        games,
        fallback_avatar_url=current_app.config.get("CHAMPION_FALLBACK_AVATAR_URL"),
    )
    return jsonify(
        [
            {
                "game": game.slug,
                "champion": by_game[game.id].to_dict() if by_game.get(game.id) else None,
            }
            for game in games
        ]
    )
