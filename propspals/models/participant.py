import hmac
import secrets
import uuid
from datetime import datetime, timezone

from propspals import db

PARTICIPANT_ACTIVE = "active"
PARTICIPANT_REMOVED = "removed"


class Participant(db.Model):
    __tablename__ = "participants"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    pool_id = db.Column(
        db.String(36), db.ForeignKey("pools.id", ondelete="CASCADE"), nullable=False
    )

    # Display name, unique within the pool (case-sensitive)
    name = db.Column(db.String(50), nullable=False)

    # Capability token; possession authenticates as this participant
    secret = db.Column(db.String(64), unique=True, nullable=False)

    # Always recomputed from picks, never incremented
    total_points = db.Column(db.Integer, nullable=False, default=0)

    status = db.Column(db.String(16), nullable=False, default=PARTICIPANT_ACTIVE)

    joined_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    picks = db.relationship(
        "Pick", backref="participant", lazy="dynamic", cascade="all, delete-orphan"
    )
    recovery_tokens = db.relationship(
        "RecoveryToken",
        backref="participant",
        lazy="dynamic",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        db.UniqueConstraint("pool_id", "name", name="unique_pool_participant_name"),
        db.Index("idx_participants_pool", "pool_id"),
        db.Index("idx_participants_pool_status", "pool_id", "status"),
    )

    def __repr__(self):
        return f"<Participant {self.name} pool_id={self.pool_id}>"

    def __init__(self, **kwargs):
        super(Participant, self).__init__(**kwargs)
        if not self.secret:
            self.secret = self.generate_secret()
        if self.total_points is None:
            self.total_points = 0
        if not self.status:
            self.status = PARTICIPANT_ACTIVE

    @staticmethod
    def generate_secret():
        """Generate a high-entropy participant secret"""
        return secrets.token_urlsafe(32)

    @property
    def is_active(self):
        return self.status == PARTICIPANT_ACTIVE

    @property
    def is_captain(self):
        return self.pool is not None and self.pool.is_captain_secret(self.secret)

    def matches_secret(self, secret):
        """Constant-time comparison against a presented secret"""
        if not secret or not self.secret:
            return False
        return hmac.compare_digest(secret.encode(), self.secret.encode())

    def remove(self):
        """Soft-remove the participant from the pool"""
        self.status = PARTICIPANT_REMOVED

    def to_dict(self, include_joined=True):
        data = {
            "id": self.id,
            "poolId": self.pool_id,
            "name": self.name,
            "totalPoints": self.total_points,
            "status": self.status,
            "isCaptain": self.is_captain,
        }
        if include_joined:
            data["joinedAt"] = self.joined_at.isoformat() if self.joined_at else None
        return data
