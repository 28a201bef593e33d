from gamenight import db


class AvatarOverride(db.Model):
    """Champion-card picture keyed by player display name"""

    __tablename__ = "avatar_overrides"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)
    avatar_url = db.Column(db.String(500), nullable=False)

    def __repr__(self):
        return f"<AvatarOverride {self.name}>"
