"""
Match service

Writes to the store: recording results, deleting mistakes and managing the
game catalogue. Every function takes the SQLAlchemy session explicitly and
returns ``(result, error_message)``-style tuples instead of raising for
problems a user can fix.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from gamenight.models import AuditLog, Game, GameVersion, Match, MatchParticipant, User

logger = logging.getLogger(__name__)

MIN_PARTICIPANTS = 2


def default_version_id(session, game_id):
    """The game's "Base" version, else its first version, else None"""
    game = session.get(Game, game_id) if game_id else None
    version = game.get_default_version() if game else None
    return version.id if version else None


def _validate_submission(session, game_id, version_id, winner_id, participant_ids):
    """Return (game, winner, participant_ids) or an error message"""
    game = session.get(Game, game_id) if game_id else None
    if not game:
        return None, "No game selected."

    if version_id:
        version = session.get(GameVersion, version_id)
        if not version or version.game_id != game.id:
            return None, "That version does not belong to the selected game."

    if not winner_id:
        return None, "Pick a winner."

    participant_ids = list(dict.fromkeys(participant_ids or []))
    if len(participant_ids) < MIN_PARTICIPANTS:
        return None, f"Pick at least {MIN_PARTICIPANTS} participants."

    if winner_id not in participant_ids:
        return None, "Winner must be included in participants."

    known = {
        user_id
        for (user_id,) in session.query(User.id).filter(
            User.id.in_(participant_ids), User.is_active.is_(True)
        )
    }
    if len(known) != len(participant_ids):
        return None, "Unknown player selected."

    return (game, session.get(User, winner_id), participant_ids), None


def submit_match(
    session,
    submitter,
    game_id,
    version_id,
    winner_id,
    participant_ids,
    notes=None,
    played_at=None,
):
    """Record a finished match.

    Args:
        session: SQLAlchemy session to write through
        submitter: the logged-in User recording the result
        game_id: id of the game played
        version_id: optional GameVersion id (must belong to the game)
        winner_id: User id of the winner, who must be a participant
        participant_ids: User ids of everyone who played (at least two)
        notes: optional free text
        played_at: defaults to now (UTC)

    Returns:
        tuple: (Match, None) on success, (None, error message) otherwise
    """
    validated, error = _validate_submission(
        session, game_id, version_id, winner_id, participant_ids
    )
    if error:
        logger.info(f"Rejected result from user {submitter.id}: {error}")
        return None, error

    game, winner, participant_ids = validated
    notes = (notes or "").strip() or None

    match = Match(
        game_id=game.id,
        version_id=version_id or None,
        winner_id=winner.id,
        submitted_by=submitter.id,
        played_at=played_at or datetime.now(timezone.utc),
        notes=notes,
        participants=[
            MatchParticipant(player_id=player_id) for player_id in participant_ids
        ],
    )

    try:
        session.add(match)
        session.flush()
        AuditLog.log_match_creation(session, submitter, match, game, winner)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Failed to save match for game {game.slug}: {e}")
        return None, "Could not save the result. Please try again."

    logger.info(
        f"Match {match.id} recorded: {game.slug} won by {winner.id} "
        f"({len(participant_ids)} players, submitted by {submitter.id})"
    )
    return match, None


def delete_match(session, match_id, actor):
    """Delete a match and its participants, leaving an audit entry.

    Returns:
        tuple: (success, message)
    """
    match = session.get(Match, match_id)
    if not match:
        return False, "Match not found."

    try:
        # Audit first so the entry can describe what is being removed
        AuditLog.log_match_deletion(session, actor, match)
        session.delete(match)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Failed to delete match {match_id}: {e}")
        return False, "Could not delete the match. Please try again."

    logger.info(f"Match {match_id} deleted by user {actor.id}")
    return True, "Deleted."


def create_game(session, name, slug=None, actor=None, versions=("Base",)):
    """Add a game (with its initial versions).

    Returns:
        tuple: (Game, None) on success, (None, error message) otherwise
    """
    name = (name or "").strip()
    if not name:
        return None, "Game name is required."

    slug = Game.slugify(slug or name)
    if not slug:
        return None, "Game slug must contain letters or numbers."

    if session.query(Game).filter(Game.slug == slug).first():
        return None, f"A game with slug '{slug}' already exists."

    game = Game(name=name, slug=slug)

    try:
        session.add(game)
        session.flush()
        for version_name in versions:
            session.add(GameVersion(game_id=game.id, name=version_name))
        AuditLog.log_action(
            session,
            action="create_game",
            record_id=game.id,
            actor_id=actor.id if actor else None,
            description=f"Added game {name}",
            action_metadata={"slug": slug, "versions": list(versions)},
        )
        session.commit()
    except IntegrityError as e:
        session.rollback()
        logger.warning(f"Game creation failed - integrity error: {e}")
        return None, f"A game with slug '{slug}' already exists."
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Game creation failed - SQL error: {e}")
        return None, "Could not create the game."

    logger.info(f"Game {slug} created")
    return game, None


def add_game_version(session, game_id, name, actor=None):
    """Add a version to an existing game.

    Returns:
        tuple: (GameVersion, None) on success, (None, error message) otherwise
    """
    game = session.get(Game, game_id)
    if not game:
        return None, "Game not found."

    name = (name or "").strip()
    if not name:
        return None, "Version name is required."

    exists = (
        session.query(GameVersion)
        .filter(GameVersion.game_id == game.id, GameVersion.name == name)
        .first()
    )
    if exists:
        return None, f"{game.name} already has a '{name}' version."

    version = GameVersion(game_id=game.id, name=name)
    try:
        session.add(version)
        session.flush()
        AuditLog.log_action(
            session,
            action="create_version",
            record_id=version.id,
            actor_id=actor.id if actor else None,
            description=f"Added version {name} to {game.name}",
            action_metadata={"game": game.slug},
        )
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Version creation failed for {game.slug}: {e}")
        return None, "Could not add the version."

    logger.info(f"Version '{name}' added to {game.slug}")
    return version, None


def recent_matches(session, limit=50):
    """Newest matches as model objects, for the admin page"""
    return (
        session.query(Match)
        .order_by(Match.played_at.desc())
        .limit(limit)
        .all()
    )
