from gamenight import create_app, db
from gamenight.models import AuditLog, Game, GameVersion, Match, MatchParticipant, User

app = create_app()


@app.shell_context_processor
def make_shell_context():
    return {
        "db": db,
        "User": User,
        "Game": Game,
        "GameVersion": GameVersion,
        "Match": Match,
        "MatchParticipant": MatchParticipant,
        "AuditLog": AuditLog,
    }


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=app.config.get("DEBUG", False))
