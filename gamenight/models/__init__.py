from gamenight import db  # noqa: F401 - imported for model imports

from .audit_log import AuditLog
from .avatar_override import AvatarOverride
from .game import Game, GameVersion
from .match import Match, MatchParticipant
from .user import User

__all__ = [
    "User",
    "Game",
    "GameVersion",
    "Match",
    "MatchParticipant",
    "AuditLog",
    "AvatarOverride",
]
