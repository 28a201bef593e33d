#!/usr/bin/env python3
"""
Game Night Management CLI

This script provides command-line management functionality for the Game Night leaderboard.
"""

import logging

import click
from flask import current_app, url_for
from flask.cli import with_appcontext
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from gamenight import create_app, db
from gamenight.models import AvatarOverride, Game, Match, User
from gamenight.services.match_service import add_game_version, create_game
from gamenight.utils.email_service import EmailService

app = create_app()


@click.group()
def cli():
    """Game Night Management CLI"""
    pass


# User Management Commands
@cli.group()
def user():
    """User management commands"""
    pass


@user.command()
@click.argument("email")
@click.argument("display_name")
@click.argument("password")
@with_appcontext
def create_admin(email, display_name, password):
    """Create an admin user"""
    email = email.strip().lower()
    try:
        if User.query.filter_by(email=email).first():
            click.echo(f"❌ User with email '{email}' already exists!")
            return

        admin = User(
            email=email,
            display_name=display_name,
            avatar_url=User.generate_avatar_url(display_name),
            is_active=True,
            is_admin=True,
        )
        admin.set_password(password)

        db.session.add(admin)
        db.session.commit()
        click.echo(f"✅ Created admin user '{display_name}' ({email})")

    except IntegrityError as e:
        db.session.rollback()
        click.echo(f"❌ User '{email}' already exists!")
        logging.error(f"Admin creation failed - integrity error: {e}")
    except SQLAlchemyError as e:
        db.session.rollback()
        click.echo(f"❌ Database error creating user: {str(e)}")
        logging.error(f"Admin creation failed - SQL error: {e}")


@user.command()
@click.argument("email")
@click.argument("display_name")
@click.option(
    "--base-url",
    default="http://localhost:5000",
    show_default=True,
    help="Public URL used to build the set-password link",
)
@with_appcontext
def invite(email, display_name, base_url):
    """Invite a family member (accounts are invite-only)"""
    email = email.strip().lower()
    try:
        if User.query.filter_by(email=email).first():
            click.echo(f"❌ User with email '{email}' already exists!")
            return

        invitee = User(
            email=email,
            display_name=display_name,
            avatar_url=User.generate_avatar_url(display_name),
            is_active=True,
        )
        expiry_hours = current_app.config.get("RESET_TOKEN_EXPIRY", 72)
        token = invitee.generate_reset_token(hours=expiry_hours)

        db.session.add(invitee)
        db.session.commit()

    except SQLAlchemyError as e:
        db.session.rollback()
        click.echo(f"❌ Database error inviting user: {str(e)}")
        logging.error(f"Invite failed - SQL error: {e}")
        return

    with current_app.test_request_context(base_url=base_url):
        link = url_for("auth.reset_password", token=token, _external=True)
        sent = EmailService().send_invite_email(invitee, link, expiry_hours)

    click.echo(f"✅ Invited {display_name} ({email})")
    if sent:
        click.echo("📧 Invitation email sent")
    else:
        click.echo(f"⚠️  Email not sent. Share this link instead:\n   {link}")


@user.command("list")
@with_appcontext
def list_users():
    """List all users"""
    users = User.query.order_by(User.display_name).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("Users:")
    for u in users:
        status = "🟢" if u.is_active else "🔴"
        role = " (admin)" if u.is_admin else ""
        pending = "" if u.has_password else " - invite pending"
        click.echo(f"  {status} {u.display_name} <{u.email}>{role}{pending}")


@user.command("set-avatar")
@click.argument("display_name")
@click.argument("avatar_url")
@with_appcontext
def set_avatar(display_name, avatar_url):
    """Pick the picture shown on a champion card"""
    override = AvatarOverride.query.filter_by(name=display_name).first()
    if override:
        override.avatar_url = avatar_url
    else:
        db.session.add(AvatarOverride(name=display_name, avatar_url=avatar_url))

    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        click.echo(f"❌ Database error saving avatar: {str(e)}")
        return

    if not User.query.filter_by(display_name=display_name).first():
        click.echo(f"⚠️  No player is called '{display_name}' yet")
    click.echo(f"✅ Champion avatar for {display_name} set")


# Game catalogue commands
@cli.group()
def game():
    """Game catalogue commands"""
    pass


@game.command("create")
@click.argument("name")
@click.option("--slug", help="URL slug (defaults to the name, lowercased)")
@click.option(
    "--version",
    "versions",
    multiple=True,
    help="Version to add (repeatable, default: Base)",
)
@with_appcontext
def create_game_cmd(name, slug, versions):
    """Add a game"""
    created, error = create_game(
        db.session, name, slug=slug, versions=versions or ("Base",)
    )
    if error:
        click.echo(f"❌ {error}")
        return
    click.echo(f"✅ Created game {created.name} ({created.slug})")


@game.command("add-version")
@click.argument("slug")
@click.argument("name")
@with_appcontext
def add_version_cmd(slug, name):
    """Add a version to a game"""
    target = Game.query.filter_by(slug=slug).first()
    if not target:
        click.echo(f"❌ Game '{slug}' not found!")
        return

    version, error = add_game_version(db.session, target.id, name)
    if error:
        click.echo(f"❌ {error}")
        return
    click.echo(f"✅ Added version {version.name} to {target.name}")


@game.command("list")
@with_appcontext
def list_games():
    """List all games and their versions"""
    games = Game.get_all()
    if not games:
        click.echo("No games found.")
        return

    click.echo("Games:")
    for g in games:
        versions = ", ".join(v.name for v in g.versions) or "no versions"
        click.echo(f"  {g.name} ({g.slug}) - {versions} - {g.matches.count()} matches")


# Database Commands
@cli.group()
def db_cmd():
    """Database commands"""
    pass


@db_cmd.command()
@with_appcontext
def init_db():
    """Initialize database tables"""
    try:
        db.create_all()
        click.echo("✅ Database tables created successfully!")
    except SQLAlchemyError as e:
        click.echo(f"❌ Error initializing database: {str(e)}")


@db_cmd.command()
@with_appcontext
def reset():
    """⚠️  DANGER: Drop and recreate all tables"""
    if not click.confirm("This will DELETE ALL DATA. Are you sure?"):
        click.echo("Cancelled.")
        return

    try:
        db.drop_all()
        db.create_all()
        click.echo("✅ Database reset successfully!")
    except SQLAlchemyError as e:
        click.echo(f"❌ Error resetting database: {str(e)}")


@cli.command()
@with_appcontext
def status():
    """Show application status"""
    click.echo("🎲 Game Night Application Status")
    click.echo("=" * 40)

    try:
        db.session.execute(text("SELECT 1"))
        click.echo("✅ Database: Connected")
    except SQLAlchemyError as e:
        click.echo(f"❌ Database: Error - {str(e)}")
        return

    click.echo(f"👥 Active Players: {User.query.filter_by(is_active=True).count()}")
    click.echo(f"🛡️  Admins: {User.query.filter_by(is_admin=True).count()}")
    click.echo(f"🎲 Games: {Game.query.count()}")
    click.echo(f"🏆 Matches: {Match.query.count()}")


if __name__ == "__main__":
    with app.app_context():
        cli()
