import secrets
import uuid
from datetime import datetime, timedelta, timezone

from propspals import db

DEFAULT_EXPIRY_HOURS = 168  # 1 week


class RecoveryToken(db.Model):
    __tablename__ = "recovery_tokens"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Opaque value shared in recovery links in place of the raw secret
    token = db.Column(db.String(64), unique=True, nullable=False, index=True)

    participant_id = db.Column(
        db.String(36),
        db.ForeignKey("participants.id", ondelete="CASCADE"),
        nullable=False,
    )
    pool_id = db.Column(
        db.String(36), db.ForeignKey("pools.id", ondelete="CASCADE"), nullable=False
    )

    expires_at = db.Column(db.DateTime(timezone=True), nullable=False)
    used_at = db.Column(db.DateTime(timezone=True))
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        db.Index("idx_recovery_tokens_pool", "pool_id"),
        db.Index("idx_recovery_tokens_participant", "participant_id"),
        db.Index("idx_recovery_tokens_expires", "expires_at"),
    )

    def __repr__(self):
        return f"<RecoveryToken participant_id={self.participant_id} pool_id={self.pool_id}>"

    def __init__(self, expires_hours=DEFAULT_EXPIRY_HOURS, **kwargs):
        super(RecoveryToken, self).__init__(**kwargs)
        if not self.token:
            self.token = self.generate_token()
        if not self.expires_at:
            self.expires_at = datetime.now(timezone.utc) + timedelta(hours=expires_hours)

    @staticmethod
    def generate_token():
        """Generate a unique opaque token"""
        while True:
            token = secrets.token_urlsafe(24)
            if not RecoveryToken.query.filter_by(token=token).first():
                return token

    @property
    def is_expired(self):
        expires_at = self.expires_at

        # SQLite hands back naive datetimes; they are stored as UTC
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)

        return datetime.now(timezone.utc) >= expires_at

    @property
    def is_used(self):
        return self.used_at is not None

    @property
    def is_valid(self):
        """Unused and unexpired"""
        return not self.is_used and not self.is_expired
