import uuid
from datetime import datetime, timezone

from gamenight import db


def _new_match_id():
    return str(uuid.uuid4())


class Match(db.Model):
    """One recorded play of a game, with exactly one winner"""

    __tablename__ = "matches"

    id = db.Column(db.String(36), primary_key=True, default=_new_match_id)

    game_id = db.Column(db.Integer, db.ForeignKey("games.id"), nullable=False)
    version_id = db.Column(
        db.Integer, db.ForeignKey("game_versions.id"), nullable=True
    )
    winner_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    submitted_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)

    played_at = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    notes = db.Column(db.Text, nullable=True)

    # Relationships
    version = db.relationship("GameVersion")
    winner = db.relationship("User", foreign_keys=[winner_id])
    submitter = db.relationship("User", foreign_keys=[submitted_by])
    participants = db.relationship(
        "MatchParticipant",
        backref="match",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        db.Index("idx_match_game_played", "game_id", "played_at"),
        db.Index("idx_match_played_at", "played_at"),
    )

    def __repr__(self):
        return f"<Match {self.id[:8]} game={self.game_id} winner={self.winner_id}>"

    @property
    def participant_ids(self):
        return [participant.player_id for participant in self.participants]


class MatchParticipant(db.Model):
    __tablename__ = "match_participants"

    id = db.Column(db.Integer, primary_key=True)
    match_id = db.Column(
        db.String(36),
        db.ForeignKey("matches.id", ondelete="CASCADE"),
        nullable=False,
    )
    player_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)

    player = db.relationship("User")

    __table_args__ = (
        db.UniqueConstraint("match_id", "player_id", name="unique_match_player"),
        db.Index("idx_participant_match", "match_id"),
        db.Index("idx_participant_player", "player_id"),
    )

    def __repr__(self):
        return f"<MatchParticipant match={self.match_id[:8]} player={self.player_id}>"
