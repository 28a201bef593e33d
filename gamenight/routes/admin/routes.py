import logging
from functools import wraps

from flask import current_app, flash, redirect, render_template, url_for
from flask_login import current_user, login_required

from gamenight import db
from gamenight.forms.admin import AddVersionForm, CreateGameForm, DeleteMatchForm
from gamenight.models import AuditLog, Game, User
from gamenight.routes.admin import bp
from gamenight.services.match_service import (
    add_game_version,
    create_game,
    delete_match,
    recent_matches,
)

logger = logging.getLogger(__name__)


def admin_required(f):
    """Send non-admins back to the landing page"""

    @wraps(f)
    @login_required
    def decorated_function(*args, **kwargs):
        if not current_user.is_admin:
            logger.warning(f"User {current_user.id} denied access to admin page")
            flash("Admins only.", "error")
            return redirect(url_for("main.index"))
        return f(*args, **kwargs)

    return decorated_function


def _version_form():
    form = AddVersionForm(prefix="version")
    form.game_id.choices = [(game.id, game.name) for game in Game.get_all()]
    return form


@bp.route("/")
@admin_required
def dashboard():
    """Recent matches (with delete) and the audit log"""
    limit = current_app.config.get("ADMIN_LIST_LIMIT", 50)
    names = {user.id: user.full_name for user in User.query.all()}

    return render_template(
        "admin/dashboard.html",
        matches=recent_matches(db.session, limit=limit),
        audit_entries=AuditLog.recent(db.session, limit=limit),
        names=names,
        delete_form=DeleteMatchForm(),
        game_form=CreateGameForm(prefix="game"),
        version_form=_version_form(),
    )


@bp.route("/matches/<match_id>/delete", methods=["POST"])
@admin_required
def delete_match_view(match_id):
    form = DeleteMatchForm()
    if not form.validate_on_submit():
        flash("Could not verify the delete request. Please try again.", "error")
        return redirect(url_for("admin.dashboard"))

    success, message = delete_match(db.session, match_id, current_user)
    flash(message, "success" if success else "error")
    return redirect(url_for("admin.dashboard"))


@bp.route("/games", methods=["POST"])
@admin_required
def add_game():
    form = CreateGameForm(prefix="game")
    if form.validate_on_submit():
        game, error = create_game(
            db.session, form.name.data, slug=form.slug.data, actor=current_user
        )
        if error:
            flash(error, "error")
        else:
            flash(f"Added {game.name}.", "success")
    else:
        for field, errors in form.errors.items():
            for error in errors:
                flash(f"{getattr(form, field).label.text}: {error}", "error")

    return redirect(url_for("admin.dashboard"))


@bp.route("/versions", methods=["POST"])
@admin_required
def add_version():
    form = _version_form()
    if form.validate_on_submit():
        version, error = add_game_version(
            db.session, form.game_id.data, form.name.data, actor=current_user
        )
        if error:
            flash(error, "error")
        else:
            flash(f"Added version {version.name}.", "success")
    else:
        for field, errors in form.errors.items():
            for error in errors:
                flash(f"{getattr(form, field).label.text}: {error}", "error")

    return redirect(url_for("admin.dashboard"))
