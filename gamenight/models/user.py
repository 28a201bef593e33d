import secrets
from datetime import datetime, timedelta, timezone

from flask_login import UserMixin
from werkzeug.security import check_password_hash, generate_password_hash

from gamenight import db


class User(UserMixin, db.Model):
    """A family member: login identity and leaderboard player in one row"""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=True)

    # Profile information
    display_name = db.Column(db.String(100), nullable=False)
    avatar_url = db.Column(db.String(500))  # Avatar URL from DiceBear API

    # Account status
    is_active = db.Column(db.Boolean, default=True)
    is_admin = db.Column(db.Boolean, default=False)

    # Password reset / invite acceptance
    reset_token = db.Column(db.String(100), unique=True, nullable=True)
    reset_token_expiry = db.Column(db.DateTime(timezone=True), nullable=True)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    last_login = db.Column(db.DateTime)

    __table_args__ = (
        db.Index("idx_user_display_name", "display_name"),
        db.Index("idx_user_active_status", "is_active"),
    )

    def __repr__(self):
        return f"<User {self.email}>"

    @staticmethod
    def generate_avatar_url(seed=None):
        """Generate an avatar URL using DiceBear API"""
        if seed is None:
            seed = secrets.token_urlsafe(16)

        return f"https://api.dicebear.com/7.x/adventurer/svg?seed={seed}"

    def set_password(self, password):
        """Set password hash"""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        """Check password against hash"""
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    @property
    def has_password(self):
        return self.password_hash is not None

    def generate_reset_token(self, hours=1):
        """Generate a password reset (or invite acceptance) token"""
        self.reset_token = secrets.token_urlsafe(32)
        self.reset_token_expiry = datetime.now(timezone.utc) + timedelta(hours=hours)
        return self.reset_token

    @staticmethod
    def verify_reset_token(token):
        """Verify reset token and return user if valid"""
        user = User.query.filter_by(reset_token=token).first()
        if user and user.reset_token_expiry:
            # SQLite hands back naive datetimes
            expiry = user.reset_token_expiry
            if expiry.tzinfo is None:
                expiry = expiry.replace(tzinfo=timezone.utc)

            if expiry > datetime.now(timezone.utc):
                return user
        return None

    def clear_reset_token(self):
        """Clear reset token after use"""
        self.reset_token = None
        self.reset_token_expiry = None

    @property
    def full_name(self):
        """Return display name or email"""
        return self.display_name or self.email

    def update_last_login(self):
        """Update last login timestamp"""
        self.last_login = datetime.now(timezone.utc)
        db.session.commit()

    @staticmethod
    def get_roster():
        """Active players ordered by display name"""
        return (
            User.query.filter_by(is_active=True).order_by(User.display_name).all()
        )
