import logging

from flask import current_app, flash, redirect, render_template, request, url_for
from flask_login import current_user, login_required

from gamenight import db, limiter
from gamenight.forms.results import SubmitResultForm, optional_int
from gamenight.models import Game, User
from gamenight.routes.results import bp
from gamenight.services.leaderboard_service import resolve_selected_game
from gamenight.services.match_service import default_version_id, submit_match

logger = logging.getLogger(__name__)


def _selected_game(games):
    """The posted game on submit, otherwise ?game=slug, the default, or the first"""
    if request.method == "POST":
        try:
            game_id = optional_int(request.form.get("game_id"))
        except ValueError:
            return None
        return next((game for game in games if game.id == game_id), None)

    return resolve_selected_game(
        games, request.args.get("game"), current_app.config.get("DEFAULT_GAME_SLUG")
    )


def _build_form():
    games = Game.get_all()
    selected = _selected_game(games)
    form = SubmitResultForm()
    form.set_choices(selected, User.get_roster())
    return form, games, selected


def _apply_defaults(form, selected):
    """Winner and participants default to the current user, version to Base"""
    if selected is not None:
        form.game_id.data = selected.id
        form.version_id.data = default_version_id(db.session, selected.id)

    form.winner_id.data = current_user.id
    form.participant_ids.data = [current_user.id]


def _render(form, games, selected, status=200):
    return (
        render_template(
            "results/submit.html", form=form, games=games, selected_game=selected
        ),
        status,
    )


@bp.route("/submit", methods=["GET", "POST"])
@login_required
@limiter.limit("60 per hour", methods=["POST"])
def submit():
    """Record the result of a game"""
    form, games, selected = _build_form()

    if not games:
        flash("No games yet. Ask the admin to add one.", "info")

    if request.method == "GET":
        _apply_defaults(form, selected)
        return _render(form, games, selected)

    if not form.validate_on_submit():
        for field, errors in form.errors.items():
            for error in errors:
                flash(f"{getattr(form, field).label.text}: {error}", "error")
        return _render(form, games, selected, 400)

    match, error = submit_match(
        db.session,
        current_user,
        game_id=form.game_id.data,
        version_id=form.version_id.data,
        winner_id=form.winner_id.data,
        participant_ids=form.participant_ids.data,
        notes=form.notes.data,
    )

    if error:
        flash(error, "error")
        return _render(form, games, selected, 400)

    flash("Saved. Leaderboard updated.", "success")
    return redirect(url_for("main.leaderboard", game=match.game.slug))
