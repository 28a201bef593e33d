"""Shared fixtures: an app on in-memory SQLite with a small family roster."""

from __future__ import annotations

import pytest

from gamenight import create_app, db
from gamenight.models import Game, GameVersion, User

PASSWORD = "Boardgames1"


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def session(app):
    return db.session


def _make_user(name, admin=False):
    user = User(
        email=f"{name.lower()}@smithfamily.net",
        display_name=name,
        avatar_url=User.generate_avatar_url(name),
        is_active=True,
        is_admin=admin,
    )
    user.set_password(PASSWORD)
    db.session.add(user)
    return user


@pytest.fixture
def players(app):
    """Alice (admin), Bob and Carol"""
    roster = {
        "alice": _make_user("Alice", admin=True),
        "bob": _make_user("Bob"),
        "carol": _make_user("Carol"),
    }
    db.session.commit()
    return roster


@pytest.fixture
def catan(app):
    game = Game(name="Catan", slug="catan")
    db.session.add(game)
    db.session.flush()
    db.session.add(GameVersion(game_id=game.id, name="Base"))
    db.session.add(GameVersion(game_id=game.id, name="Seafarers"))
    db.session.commit()
    return game


@pytest.fixture
def ticket(app):
    game = Game(name="Ticket to Ride", slug="ticket-to-ride")
    db.session.add(game)
    db.session.flush()
    db.session.add(GameVersion(game_id=game.id, name="Base"))
    db.session.commit()
    return game


@pytest.fixture
def login(client):
    def _login(user):
        return client.post(
            "/auth/login",
            data={"email": user.email, "password": PASSWORD},
            follow_redirects=False,
        )

    return _login
