from datetime import datetime, timezone

from gamenight import db


class AuditLog(db.Model):
    __tablename__ = "audit_log"

    id = db.Column(db.Integer, primary_key=True)

    # Action details
    action = db.Column(
        db.String(50), nullable=False
    )  # 'create_match', 'delete_match', 'create_game', 'create_version'
    record_id = db.Column(db.String(36), nullable=False)
    actor = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    description = db.Column(db.String(500), nullable=False)

    # Additional context data (JSON)
    action_metadata = db.Column(db.JSON, nullable=True)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    # No FK on record_id: entries outlive the rows they describe
    actor_user = db.relationship("User", foreign_keys=[actor])

    __table_args__ = (
        db.Index("idx_audit_action", "action"),
        db.Index("idx_audit_actor", "actor"),
        db.Index("idx_audit_created", "created_at"),
    )

    def __repr__(self):
        return f"<AuditLog {self.action} {self.record_id[:8]} by {self.actor}>"

    @property
    def short_record_id(self):
        return self.record_id[:8]

    @staticmethod
    def log_action(
        session, action, record_id, actor_id, description, action_metadata=None
    ):
        """Add an audit entry to the session; the caller commits"""
        entry = AuditLog(
            action=action,
            record_id=str(record_id),
            actor=actor_id,
            description=description,
            action_metadata=action_metadata or {},
        )

        session.add(entry)
        return entry

    @staticmethod
    def log_match_creation(session, actor, match, game, winner):
        """Convenience method for logging a submitted result"""
        return AuditLog.log_action(
            session,
            action="create_match",
            record_id=match.id,
            actor_id=actor.id,
            description=f"{actor.full_name} recorded a {game.name} win for {winner.full_name}",
            action_metadata={
                "game": game.slug,
                "winner_id": winner.id,
                "participants": match.participant_ids,
                "version_id": match.version_id,
            },
        )

    @staticmethod
    def log_match_deletion(session, actor, match):
        """Convenience method for logging match deletion"""
        winner_name = match.winner.full_name if match.winner else "Unknown"
        game_name = match.game.name if match.game else "Unknown game"

        return AuditLog.log_action(
            session,
            action="delete_match",
            record_id=match.id,
            actor_id=actor.id,
            description=f"Deleted {game_name} match won by {winner_name}",
            action_metadata={
                "game_id": match.game_id,
                "winner_id": match.winner_id,
                "played_at": match.played_at.isoformat() if match.played_at else None,
                "participants": match.participant_ids,
                "notes": match.notes,
            },
        )

    @staticmethod
    def recent(session, limit=50):
        return (
            session.query(AuditLog)
            .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
            .limit(limit)
            .all()
        )
