import re
from datetime import datetime, timezone

from gamenight import db


class Game(db.Model):
    __tablename__ = "games"

    id = db.Column(db.Integer, primary_key=True)
    slug = db.Column(db.String(50), unique=True, nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    versions = db.relationship(
        "GameVersion",
        backref="game",
        lazy="dynamic",
        cascade="all, delete-orphan",
        order_by="GameVersion.name",
    )
    matches = db.relationship("Match", backref="game", lazy="dynamic")

    def __repr__(self):
        return f"<Game {self.slug}>"

    @staticmethod
    def slugify(name):
        """'Settlers of Catan!' -> 'settlers-of-catan'"""
        return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")

    @staticmethod
    def get_all():
        """All games ordered by name"""
        return Game.query.order_by(Game.name).all()

    @staticmethod
    def get_by_slug(slug):
        return Game.query.filter_by(slug=slug).first()

    def get_default_version(self):
        """The "Base" version if there is one, otherwise the first version"""
        versions = self.versions.all()
        for version in versions:
            if version.name == "Base":
                return version
        return versions[0] if versions else None

    def to_dict(self):
        return {
            "id": self.id,
            "slug": self.slug,
            "name": self.name,
            "versions": [version.to_dict() for version in self.versions],
        }


class GameVersion(db.Model):
    __tablename__ = "game_versions"

    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey("games.id"), nullable=False)
    name = db.Column(db.String(100), nullable=False)

    __table_args__ = (
        db.UniqueConstraint("game_id", "name", name="unique_game_version_name"),
    )

    def __repr__(self):
        return f"<GameVersion {self.name} (game {self.game_id})>"

    def to_dict(self):
        return {"id": self.id, "game_id": self.game_id, "name": self.name}
