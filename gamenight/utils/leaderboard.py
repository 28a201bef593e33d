"""
Leaderboard aggregation for Game Night

Pure functions over plain records: no database, no Flask. Callers fetch the
roster, matches and participant lists themselves and hand them in.
Missing or stale references are skipped, never raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union

PlayerId = Union[int, str]
MatchId = Union[int, str]


@dataclass(frozen=True)
class PlayerRecord:
    id: PlayerId
    name: str
    avatar_url: Optional[str] = None


@dataclass(frozen=True)
class MatchRecord:
    id: MatchId
    game_id: int
    winner_id: PlayerId
    played_at: datetime
    version_id: Optional[int] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class OpponentTally:
    opponent_id: PlayerId
    name: str
    count: int


@dataclass(frozen=True)
class PlayerStats:
    id: PlayerId
    name: str
    wins: int
    games_played: int
    last_played: Optional[datetime]
    most_beaten: Optional[OpponentTally]
    most_lost_to: Optional[OpponentTally]

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "wins": self.wins,
            "games_played": self.games_played,
            "last_played": self.last_played.isoformat() if self.last_played else None,
            "most_beaten": _tally_to_dict(self.most_beaten),
            "most_lost_to": _tally_to_dict(self.most_lost_to),
        }


@dataclass(frozen=True)
class Champion:
    game_id: int
    player_id: PlayerId
    name: str
    avatar_url: Optional[str]
    wins: int
    last_match_at: Optional[datetime]

    def to_dict(self):
        return {
            "game_id": self.game_id,
            "player_id": self.player_id,
            "name": self.name,
            "avatar_url": self.avatar_url,
            "wins": self.wins,
            "last_match_at": self.last_match_at.isoformat()
            if self.last_match_at
            else None,
        }


def _tally_to_dict(tally):
    if tally is None:
        return None
    return {"opponent_id": tally.opponent_id, "name": tally.name, "count": tally.count}


class _Tally:
    """Mutable per-player accumulator, only alive during one aggregation"""

    __slots__ = ("wins", "games_played", "last_played", "beaten", "lost_to")

    def __init__(self):
        self.wins = 0
        self.games_played = 0
        self.last_played = None
        self.beaten: Dict[PlayerId, int] = {}
        self.lost_to: Dict[PlayerId, int] = {}


def _unique_participants(participant_ids):
    # dict.fromkeys keeps first-seen order
    return list(dict.fromkeys(participant_ids))


def _pick_opponent(counts, names):
    """Highest count wins; ties go to the alphabetically first name, then id"""
    if not counts:
        return None

    opponent_id, count = min(
        counts.items(),
        key=lambda item: (-item[1], names[item[0]].casefold(), str(item[0])),
    )
    return OpponentTally(opponent_id=opponent_id, name=names[opponent_id], count=count)


def aggregate_leaderboard(
    players: Sequence[PlayerRecord],
    matches: Iterable[MatchRecord],
    participants_by_match: Mapping[MatchId, Sequence[PlayerId]],
) -> List[PlayerStats]:
    """Compute ranked per-player statistics.

    Args:
        players: roster; its order is the final tie-break between players
            with equal wins and games played
        matches: match records in any order
        participants_by_match: match id -> ids of the players who took part.
            A match without an entry contributes nothing.

    Returns:
        One PlayerStats per roster player, sorted by wins then games played
        (both descending).
    """
    tallies: Dict[PlayerId, _Tally] = {}
    names: Dict[PlayerId, str] = {}
    for player in players:
        if player.id in tallies:
            continue
        tallies[player.id] = _Tally()
        names[player.id] = player.name

    for match in matches:
        participant_ids = _unique_participants(participants_by_match.get(match.id, ()))

        for player_id in participant_ids:
            tally = tallies.get(player_id)
            if tally is None:
                continue
            tally.games_played += 1
            if tally.last_played is None or match.played_at > tally.last_played:
                tally.last_played = match.played_at
            if player_id == match.winner_id:
                tally.wins += 1

        winner = tallies.get(match.winner_id)
        if winner is None:
            continue

        for player_id in participant_ids:
            if player_id == match.winner_id:
                continue
            loser = tallies.get(player_id)
            if loser is None:
                continue
            winner.beaten[player_id] = winner.beaten.get(player_id, 0) + 1
            loser.lost_to[match.winner_id] = loser.lost_to.get(match.winner_id, 0) + 1

    stats = [
        PlayerStats(
            id=player_id,
            name=names[player_id],
            wins=tally.wins,
            games_played=tally.games_played,
            last_played=tally.last_played,
            most_beaten=_pick_opponent(tally.beaten, names),
            most_lost_to=_pick_opponent(tally.lost_to, names),
        )
        for player_id, tally in tallies.items()
    ]

    # sort() is stable, so full ties keep roster order
    stats.sort(key=lambda row: (row.wins, row.games_played), reverse=True)
    return stats


def tally_wins(matches, roster_ids=None):
    """Count wins per winner id in first-encountered order.

    Winners outside ``roster_ids`` are skipped when a roster is given.
    """
    wins: Dict[PlayerId, int] = {}
    for match in matches:
        if roster_ids is not None and match.winner_id not in roster_ids:
            continue
        wins[match.winner_id] = wins.get(match.winner_id, 0) + 1
    return wins


def _resolve_avatar(player, avatar_overrides, fallback_avatar_url):
    """Override by display name, then the player's own picture, then the fallback"""
    return (
        (avatar_overrides or {}).get(player.name)
        or player.avatar_url
        or fallback_avatar_url
    )


def leader_champion(
    game_id: int,
    rows: Sequence[PlayerStats],
    matches: Iterable[MatchRecord],
    players: Sequence[PlayerRecord],
    avatar_overrides: Optional[Mapping[str, str]] = None,
    fallback_avatar_url: Optional[str] = None,
) -> Optional[Champion]:
    """Champion card for a ranked table: its top row, once that player has a win.

    Unlike select_champion, ties follow the table (wins, then games played),
    so the card always names rank 1.
    """
    if not rows or rows[0].wins == 0:
        return None

    leader = rows[0]
    player = next(
        (p for p in players if p.id == leader.id),
        PlayerRecord(id=leader.id, name=leader.name),
    )
    played = [match.played_at for match in matches if match.game_id == game_id]

    return Champion(
        game_id=game_id,
        player_id=leader.id,
        name=leader.name,
        avatar_url=_resolve_avatar(player, avatar_overrides, fallback_avatar_url),
        wins=leader.wins,
        last_match_at=max(played) if played else None,
    )


def select_champion(
    game_id: int,
    matches: Iterable[MatchRecord],
    players: Sequence[PlayerRecord],
    avatar_overrides: Optional[Mapping[str, str]] = None,
    fallback_avatar_url: Optional[str] = None,
) -> Optional[Champion]:
    """The player with the most wins in ``game_id``, or None.

    Ties go to whoever the tally met first, so callers passing matches newest
    first crown the most recent winner among the tied players.
    """
    by_id = {player.id: player for player in players}
    game_matches = [match for match in matches if match.game_id == game_id]
    if not game_matches:
        return None

    wins = tally_wins(game_matches, roster_ids=by_id.keys())
    if not wins:
        return None

    champion_id = None
    best = 0
    for player_id, count in wins.items():
        if count > best:
            champion_id, best = player_id, count

    player = by_id[champion_id]
    return Champion(
        game_id=game_id,
        player_id=champion_id,
        name=player.name,
        avatar_url=_resolve_avatar(player, avatar_overrides, fallback_avatar_url),
        wins=best,
        last_match_at=max(match.played_at for match in game_matches),
    )


def select_champions(
    game_ids, matches, players, avatar_overrides=None, fallback_avatar_url=None
):
    """Champion per game id (None for games without a roster winner)"""
    matches = list(matches)
    return {
        game_id: select_champion(
            game_id, matches, players, avatar_overrides, fallback_avatar_url
        )
        for game_id in game_ids
    }
