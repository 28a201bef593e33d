import logging
from urllib.parse import urlparse

from flask import flash, redirect, render_template, request, url_for
from flask_login import current_user, login_required, login_user, logout_user

from gamenight import db, limiter, login_manager
from gamenight.forms.auth import ForgotPasswordForm, LoginForm, SetPasswordForm
from gamenight.models import User
from gamenight.routes.auth import bp
from gamenight.utils.email_service import EmailService

logger = logging.getLogger(__name__)


@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, int(user_id))


@bp.route("/login", methods=["GET", "POST"])
@limiter.limit("10 per minute")
def login():
    if current_user.is_authenticated:
        return redirect(url_for("results.submit"))

    form = LoginForm()
    if form.validate_on_submit():
        email = form.email.data.strip().lower()
        user = User.query.filter_by(email=email).first()

        if user and user.check_password(form.password.data):
            if not user.is_active:
                flash("Your account has been deactivated. Ask the admin.", "error")
                return render_template("auth/login.html", form=form)

            login_user(user, remember=form.remember_me.data)
            user.update_last_login()
            logger.info(f"User {user.id} logged in")

            next_page = request.args.get("next")
            if not next_page or urlparse(next_page).netloc != "":
                next_page = url_for("results.submit")

            return redirect(next_page)

        logger.warning(f"Failed login attempt for {email}")
        flash("Invalid email or password.", "error")

    return render_template("auth/login.html", form=form)


@bp.route("/logout")
@login_required
def logout():
    logout_user()
    flash("You have been logged out.", "info")
    return redirect(url_for("main.index"))


@bp.route("/forgot-password", methods=["GET", "POST"])
@limiter.limit("20 per hour")
def forgot_password():
    if current_user.is_authenticated:
        return redirect(url_for("results.submit"))

    form = ForgotPasswordForm()
    if form.validate_on_submit():
        user = User.query.filter_by(email=form.email.data.strip().lower()).first()
        if user and user.is_active:
            token = user.generate_reset_token()
            db.session.commit()

            link = url_for("auth.reset_password", token=token, _external=True)
            if not EmailService().send_password_reset_email(user, link):
                logger.warning(f"Failed to send password reset email to {user.email}")

        # Same message either way so the form does not reveal who has an account
        flash(
            "If an account with that email exists, password reset instructions have been sent.",
            "info",
        )
        return redirect(url_for("auth.login"))

    return render_template("auth/forgot_password.html", form=form)


@bp.route("/reset-password/<token>", methods=["GET", "POST"])
@limiter.limit("30 per hour")
def reset_password(token):
    """Set a new password from a reset or invite link"""
    if current_user.is_authenticated:
        return redirect(url_for("results.submit"))

    user = User.verify_reset_token(token)
    if not user:
        flash("Invalid or expired link.", "error")
        return redirect(url_for("auth.forgot_password"))

    form = SetPasswordForm()
    if form.validate_on_submit():
        user.set_password(form.password.data)
        user.clear_reset_token()
        db.session.commit()
        logger.info(f"User {user.id} set a new password")

        login_user(user)
        flash("Password saved. Welcome to game night!", "success")
        return redirect(url_for("results.submit"))

    return render_template(
        "auth/reset_password.html", form=form, token=token, user=user
    )
