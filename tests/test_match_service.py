"""Tests for recording, deleting and cataloguing through the services."""

from __future__ import annotations

from datetime import datetime, timedelta

from gamenight.models import (
    AuditLog,
    AvatarOverride,
    Game,
    GameVersion,
    Match,
    MatchParticipant,
)
from gamenight.services.leaderboard_service import (
    build_champions,
    build_game_leaderboard,
    load_matches,
    load_participants,
    load_roster,
    resolve_selected_game,
)
from gamenight.services.match_service import (
    add_game_version,
    create_game,
    default_version_id,
    delete_match,
    submit_match,
)

T0 = datetime(2026, 3, 1, 20, 0, 0)


def _submit(session, players, game, winner, who, hours=0, **kwargs):
    return submit_match(
        session,
        players["alice"],
        game_id=game.id,
        version_id=kwargs.pop("version_id", None),
        winner_id=players[winner].id,
        participant_ids=[players[name].id for name in who],
        played_at=T0 + timedelta(hours=hours),
        **kwargs,
    )


def test_submit_match_records_participants_and_audit(session, players, catan) -> None:
    match, error = _submit(
        session, players, catan, "bob", ["alice", "bob", "carol"], notes="  close one  "
    )

    assert error is None
    assert match.winner_id == players["bob"].id
    assert match.notes == "close one"
    assert sorted(match.participant_ids) == sorted(
        p.id for p in players.values()
    )

    entry = AuditLog.recent(session)[0]
    assert entry.action == "create_match"
    assert entry.record_id == match.id
    assert entry.actor == players["alice"].id


def test_submit_match_rejects_single_participant(session, players, catan) -> None:
    match, error = _submit(session, players, catan, "alice", ["alice"])

    assert match is None
    assert error == "Pick at least 2 participants."
    assert session.query(Match).count() == 0


def test_submit_match_rejects_winner_outside_participants(session, players, catan) -> None:
    match, error = _submit(session, players, catan, "carol", ["alice", "bob"])

    assert match is None
    assert error == "Winner must be included in participants."


def test_submit_match_rejects_foreign_version(session, players, catan, ticket) -> None:
    ticket_base = default_version_id(session, ticket.id)
    match, error = _submit(
        session, players, catan, "alice", ["alice", "bob"], version_id=ticket_base
    )

    assert match is None
    assert error == "That version does not belong to the selected game."


def test_submit_match_rejects_missing_game(session, players) -> None:
    match, error = submit_match(
        session,
        players["alice"],
        game_id=None,
        version_id=None,
        winner_id=players["alice"].id,
        participant_ids=[players["alice"].id, players["bob"].id],
    )
    assert match is None
    assert error == "No game selected."


def test_submit_match_rejects_unknown_player(session, players, catan) -> None:
    match, error = submit_match(
        session,
        players["alice"],
        game_id=catan.id,
        version_id=None,
        winner_id=players["alice"].id,
        participant_ids=[players["alice"].id, 9999],
    )
    assert match is None
    assert error == "Unknown player selected."


def test_delete_match_removes_participants_and_keeps_audit(session, players, catan) -> None:
    match, _ = _submit(session, players, catan, "alice", ["alice", "bob"])
    match_id = match.id

    success, message = delete_match(session, match_id, players["alice"])

    assert success is True
    assert message == "Deleted."
    assert session.get(Match, match_id) is None
    assert session.query(MatchParticipant).filter_by(match_id=match_id).count() == 0

    actions = [entry.action for entry in AuditLog.recent(session)]
    assert "delete_match" in actions
    assert "create_match" in actions


def test_delete_missing_match(session, players) -> None:
    assert delete_match(session, "no-such-id", players["alice"]) == (
        False,
        "Match not found.",
    )


def test_create_game_adds_base_version(session, players) -> None:
    game, error = create_game(session, "Ticket to Ride", actor=players["alice"])

    assert error is None
    assert game.slug == "ticket-to-ride"
    assert [v.name for v in game.versions] == ["Base"]
    assert default_version_id(session, game.id) == game.get_default_version().id


def test_create_game_rejects_duplicate_slug(session, catan) -> None:
    game, error = create_game(session, "Catan")
    assert game is None
    assert "already exists" in error


def test_add_game_version(session, catan) -> None:
    version, error = add_game_version(session, catan.id, "Cities & Knights")
    assert error is None
    assert version.game_id == catan.id

    _, error = add_game_version(session, catan.id, "Base")
    assert error == "Catan already has a 'Base' version."


def test_default_version_prefers_base(session, catan) -> None:
    base = session.query(GameVersion).filter_by(game_id=catan.id, name="Base").one()
    assert default_version_id(session, catan.id) == base.id


def test_resolve_selected_game(catan, ticket) -> None:
    games = Game.get_all()
    assert resolve_selected_game(games, "ticket-to-ride", "catan") is ticket
    assert resolve_selected_game(games, "missing", "catan") is catan
    assert resolve_selected_game(games, None, "missing") is games[0]
    assert resolve_selected_game([], "catan", "catan") is None


def test_loaders_feed_the_aggregator(session, players, catan) -> None:
    first, _ = _submit(session, players, catan, "alice", ["alice", "bob"], hours=1)
    second, _ = _submit(session, players, catan, "bob", ["bob", "carol"], hours=2)

    roster = load_roster(session)
    assert [p.name for p in roster] == ["Alice", "Bob", "Carol"]

    matches = load_matches(session, game_id=catan.id)
    assert [m.id for m in matches] == [second.id, first.id]

    participants = load_participants(session, [m.id for m in matches])
    assert sorted(participants[first.id]) == sorted(
        [players["alice"].id, players["bob"].id]
    )


def test_three_match_scenario_end_to_end(session, players, catan) -> None:
    _submit(session, players, catan, "alice", ["alice", "bob"], hours=1)
    _submit(session, players, catan, "alice", ["alice", "carol"], hours=2)
    _submit(session, players, catan, "bob", ["alice", "bob"], hours=3)

    board = build_game_leaderboard(session, catan)

    assert [(r.name, r.wins, r.games_played) for r in board.rows] == [
        ("Alice", 2, 3),
        ("Bob", 1, 2),
        ("Carol", 0, 1),
    ]
    assert board.champion.name == "Alice"
    assert board.champion.wins == 2
    assert board.champion.last_match_at == T0 + timedelta(hours=3)
    assert [m.winner_name for m in board.recent_matches] == ["Bob", "Alice", "Alice"]


def test_leaderboard_is_per_game(session, players, catan, ticket) -> None:
    _submit(session, players, catan, "alice", ["alice", "bob"])
    _submit(session, players, ticket, "carol", ["carol", "bob"])

    rows = {r.name: r for r in build_game_leaderboard(session, ticket).rows}
    assert rows["Carol"].wins == 1
    assert rows["Alice"].games_played == 0


def test_leaderboard_recent_matches_limit(session, players, catan) -> None:
    for n in range(5):
        _submit(session, players, catan, "alice", ["alice", "bob"], hours=n)

    board = build_game_leaderboard(session, catan, recent_limit=3)
    assert len(board.recent_matches) == 3
    assert board.recent_matches[0].played_at == T0 + timedelta(hours=4)


def test_leaderboard_without_game_is_empty(session) -> None:
    board = build_game_leaderboard(session, None)
    assert board.rows == []
    assert board.champion is None


def test_build_champions_per_game(session, players, catan, ticket) -> None:
    _submit(session, players, catan, "bob", ["alice", "bob"])

    champions = build_champions(
        session, Game.get_all(), fallback_avatar_url="/static/crown.png"
    )

    assert champions[catan.id].name == "Bob"
    assert champions[catan.id].avatar_url == players["bob"].avatar_url
    assert champions[ticket.id] is None


def test_champion_avatar_override_by_name(session, players, catan) -> None:
    session.add(AvatarOverride(name="Bob", avatar_url="https://avatars.example/bob.png"))
    session.commit()
    _submit(session, players, catan, "bob", ["alice", "bob"])

    board = build_game_leaderboard(session, catan, fallback_avatar_url="/crown.png")
    assert board.champion.avatar_url == "https://avatars.example/bob.png"


def test_leaderboard_champion_is_the_top_row(session, players, catan) -> None:
    # One win each; Carol played three games, Alice two, Bob one
    _submit(session, players, catan, "carol", ["carol", "alice"], hours=1)
    _submit(session, players, catan, "alice", ["alice", "carol"], hours=2)
    _submit(session, players, catan, "bob", ["bob", "carol"], hours=3)

    board = build_game_leaderboard(session, catan)

    assert [r.name for r in board.rows] == ["Carol", "Alice", "Bob"]
    assert board.champion.player_id == board.rows[0].id
    assert board.champion.wins == 1
    assert board.champion.last_match_at == T0 + timedelta(hours=3)
    # The landing page still crowns the most recent of the tied winners
    assert build_champions(session, [catan])[catan.id].name == "Bob"


def test_leaderboard_has_no_champion_without_wins(session, players, catan) -> None:
    board = build_game_leaderboard(session, catan)
    assert board.rows
    assert board.champion is None


def test_deactivated_player_keeps_history(session, players, catan) -> None:
    _submit(session, players, catan, "alice", ["alice", "bob"], hours=1)
    _submit(session, players, catan, "alice", ["alice", "bob"], hours=2)
    players["bob"].is_active = False
    session.commit()

    rows = {r.name: r for r in build_game_leaderboard(session, catan).rows}

    assert rows["Bob"].games_played == 2
    assert rows["Alice"].most_beaten.name == "Bob"
    assert rows["Alice"].most_beaten.count == 2
    assert "Bob" in [p.name for p in load_roster(session)]
