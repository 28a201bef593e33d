"""Unit tests for per-game champion selection."""

from __future__ import annotations

from datetime import datetime, timedelta

from gamenight.utils.leaderboard import (
    MatchRecord,
    PlayerRecord,
    aggregate_leaderboard,
    leader_champion,
    select_champion,
    select_champions,
    tally_wins,
)

T0 = datetime(2026, 2, 14, 18, 30, 0)
CATAN = 1
TICKET = 2

ALICE = PlayerRecord(id=1, name="Alice", avatar_url="https://avatars.example/alice.svg")
BOB = PlayerRecord(id=2, name="Bob")
ROSTER = [ALICE, BOB]


def _match(match_id, winner_id, hours, game_id=CATAN):
    return MatchRecord(
        id=match_id,
        game_id=game_id,
        winner_id=winner_id,
        played_at=T0 + timedelta(hours=hours),
    )


def test_no_matches_means_no_champion() -> None:
    assert select_champion(CATAN, [], ROSTER) is None


def test_only_other_games_means_no_champion() -> None:
    assert select_champion(CATAN, [_match("m1", 1, 1, game_id=TICKET)], ROSTER) is None


def test_only_unknown_winners_means_no_champion() -> None:
    assert select_champion(CATAN, [_match("m1", 77, 1)], ROSTER) is None


def test_most_wins_takes_the_crown() -> None:
    matches = [_match("m3", 2, 3), _match("m2", 1, 2), _match("m1", 1, 1)]
    champion = select_champion(CATAN, matches, ROSTER)

    assert champion.player_id == 1
    assert champion.name == "Alice"
    assert champion.wins == 2
    assert champion.game_id == CATAN


def test_last_match_at_covers_all_matches_of_the_game() -> None:
    matches = [
        _match("m4", 1, 9, game_id=TICKET),
        _match("m3", 77, 5),
        _match("m2", 1, 2),
    ]
    champion = select_champion(CATAN, matches, ROSTER)
    assert champion.last_match_at == T0 + timedelta(hours=5)


def test_tie_goes_to_first_encountered_winner() -> None:
    # Newest first: Bob won most recently
    matches = [_match("m4", 2, 4), _match("m3", 1, 3), _match("m2", 2, 2), _match("m1", 1, 1)]
    assert select_champion(CATAN, matches, ROSTER).name == "Bob"
    assert select_champion(CATAN, list(reversed(matches)), ROSTER).name == "Alice"


def test_avatar_prefers_override_then_profile_then_fallback() -> None:
    alice_wins = [_match("m1", 1, 1)]
    bob_wins = [_match("m1", 2, 1)]
    overrides = {"Alice": "https://avatars.example/alice-custom.png"}

    assert (
        select_champion(CATAN, alice_wins, ROSTER, overrides).avatar_url
        == "https://avatars.example/alice-custom.png"
    )
    assert (
        select_champion(CATAN, alice_wins, ROSTER).avatar_url
        == "https://avatars.example/alice.svg"
    )
    assert (
        select_champion(CATAN, bob_wins, ROSTER, fallback_avatar_url="/crown.png").avatar_url
        == "/crown.png"
    )
    assert select_champion(CATAN, bob_wins, ROSTER).avatar_url is None


def test_select_champions_covers_every_game() -> None:
    matches = iter([_match("m1", 2, 1, game_id=TICKET)])
    champions = select_champions([CATAN, TICKET], matches, ROSTER)

    assert champions[CATAN] is None
    assert champions[TICKET].name == "Bob"


def test_tally_wins_skips_off_roster_winners() -> None:
    matches = [_match("m1", 1, 1), _match("m2", 77, 2), _match("m3", 1, 3)]
    assert tally_wins(matches) == {1: 2, 77: 1}
    assert tally_wins(matches, roster_ids={1, 2}) == {1: 2}


def test_champion_to_dict() -> None:
    champion = select_champion(CATAN, [_match("m1", 1, 1)], ROSTER)
    assert champion.to_dict() == {
        "game_id": CATAN,
        "player_id": 1,
        "name": "Alice",
        "avatar_url": "https://avatars.example/alice.svg",
        "wins": 1,
        "last_match_at": (T0 + timedelta(hours=1)).isoformat(),
    }


def test_leader_champion_follows_table_order() -> None:
    carol = PlayerRecord(id=3, name="Carol")
    roster = [ALICE, BOB, carol]
    # Newest first: the win tally meets Bob first, the table ranks Carol first
    matches = [_match("m3", 2, 3), _match("m2", 1, 2), _match("m1", 3, 1)]
    participants = {"m3": [2, 3], "m2": [1, 3], "m1": [3, 1]}
    rows = aggregate_leaderboard(roster, matches, participants)

    champion = leader_champion(CATAN, rows, matches, roster, fallback_avatar_url="/crown.png")

    assert select_champion(CATAN, matches, roster).name == "Bob"
    assert rows[0].name == "Carol"
    assert champion.player_id == rows[0].id
    assert champion.avatar_url == "/crown.png"
    assert champion.last_match_at == T0 + timedelta(hours=3)


def test_leader_champion_needs_a_win() -> None:
    rows = aggregate_leaderboard(ROSTER, [], {})
    assert leader_champion(CATAN, rows, [], ROSTER) is None
    assert leader_champion(CATAN, [], [], ROSTER) is None


def test_leader_champion_uses_avatar_override() -> None:
    matches = [_match("m1", 1, 1)]
    rows = aggregate_leaderboard(ROSTER, matches, {"m1": [1, 2]})
    champion = leader_champion(
        CATAN, rows, matches, ROSTER, {"Alice": "https://avatars.example/a.png"}
    )
    assert champion.avatar_url == "https://avatars.example/a.png"
