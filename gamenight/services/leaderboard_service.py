"""
Leaderboard service

Fetches the roster, matches and participant lists through the session it is
given and feeds them to the pure aggregator in gamenight.utils.leaderboard.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from gamenight.models import (
    AvatarOverride,
    Game,
    GameVersion,
    Match,
    MatchParticipant,
    User,
)
from gamenight.utils.leaderboard import (
    Champion,
    MatchRecord,
    PlayerRecord,
    PlayerStats,
    aggregate_leaderboard,
    leader_champion,
    select_champions,
)
from gamenight.utils.performance import PerformanceMonitor

logger = logging.getLogger(__name__)


@dataclass
class RecentMatch:
    id: str
    winner_name: str
    version_name: Optional[str]
    played_at: Optional[datetime]
    notes: Optional[str] = None


@dataclass
class GameLeaderboard:
    game: Optional[Game]
    rows: List[PlayerStats] = field(default_factory=list)
    champion: Optional[Champion] = None
    recent_matches: List[RecentMatch] = field(default_factory=list)

    def to_dict(self):
        return {
            "game": {"id": self.game.id, "slug": self.game.slug, "name": self.game.name}
            if self.game
            else None,
            "champion": self.champion.to_dict() if self.champion else None,
            "rows": [row.to_dict() for row in self.rows],
            "recent_matches": [
                {
                    "id": match.id,
                    "winner": match.winner_name,
                    "version": match.version_name,
                    "played_at": match.played_at.isoformat() if match.played_at else None,
                    "notes": match.notes,
                }
                for match in self.recent_matches
            ],
        }


def resolve_selected_game(games, slug, default_slug=None):
    """Requested slug, else the default slug, else the first game"""
    by_slug = {game.slug: game for game in games}
    for candidate in (slug, default_slug):
        if candidate and candidate in by_slug:
            return by_slug[candidate]
    return games[0] if games else None


def load_roster(session):
    """Every player ever registered, ordered by display name.

    Deactivated players stay in so their past matches keep counting, for
    them and against their opponents.
    """
    users = session.query(User).order_by(User.display_name, User.id).all()
    return [
        PlayerRecord(id=user.id, name=user.full_name, avatar_url=user.avatar_url)
        for user in users
    ]


def load_matches(session, game_id=None):
    """Matches as records, newest first"""
    query = session.query(Match)
    if game_id is not None:
        query = query.filter(Match.game_id == game_id)
    query = query.order_by(Match.played_at.desc())

    return [
        MatchRecord(
            id=match.id,
            game_id=match.game_id,
            winner_id=match.winner_id,
            played_at=match.played_at,
            version_id=match.version_id,
            notes=match.notes,
        )
        for match in query.all()
    ]


def load_participants(session, match_ids):
    """match id -> participant ids, for the given matches only"""
    participants_by_match: Dict[str, List[int]] = {match_id: [] for match_id in match_ids}
    if not participants_by_match:
        return participants_by_match

    rows = (
        session.query(MatchParticipant.match_id, MatchParticipant.player_id)
        .filter(MatchParticipant.match_id.in_(list(participants_by_match)))
        .order_by(MatchParticipant.id)
        .all()
    )
    for match_id, player_id in rows:
        participants_by_match[match_id].append(player_id)
    return participants_by_match


def load_avatar_overrides(session):
    return {row.name: row.avatar_url for row in session.query(AvatarOverride).all()}


def build_game_leaderboard(
    session, game, recent_limit=10, fallback_avatar_url=None
):
    """Everything the leaderboard page shows for one game"""
    if game is None:
        return GameLeaderboard(game=None)

    with PerformanceMonitor(f"leaderboard:{game.slug}"):
        roster = load_roster(session)
        matches = load_matches(session, game_id=game.id)
        participants = load_participants(session, [match.id for match in matches])

        rows = aggregate_leaderboard(roster, matches, participants)
        champion = leader_champion(
            game.id,
            rows,
            matches,
            roster,
            load_avatar_overrides(session),
            fallback_avatar_url,
        )

    # Winners are looked up among all users so retired players still show up
    names = {user_id: name for user_id, name in session.query(User.id, User.display_name)}
    version_names = {
        version.id: version.name
        for version in session.query(GameVersion).filter(GameVersion.game_id == game.id)
    }

    recent = [
        RecentMatch(
            id=match.id,
            winner_name=names.get(match.winner_id, "Unknown"),
            version_name=version_names.get(match.version_id, "Version")
            if match.version_id
            else None,
            played_at=match.played_at,
            notes=match.notes,
        )
        for match in matches[:recent_limit]
    ]

    logger.debug(
        f"Built leaderboard for {game.slug}: {len(matches)} matches, {len(rows)} players"
    )
    return GameLeaderboard(game=game, rows=rows, champion=champion, recent_matches=recent)


def build_champions(session, games, fallback_avatar_url=None):
    """game id -> Champion (or None) for the landing view"""
    if not games:
        return {}

    with PerformanceMonitor("champions"):
        roster = load_roster(session)
        matches = load_matches(session)
        return select_champions(
            [game.id for game in games],
            matches,
            roster,
            load_avatar_overrides(session),
            fallback_avatar_url,
        )
