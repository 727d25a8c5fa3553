import hmac
import re
import secrets
import uuid
from datetime import datetime, timezone

from propspals import db

STATUS_DRAFT = "draft"
STATUS_OPEN = "open"
STATUS_LOCKED = "locked"
STATUS_COMPLETED = "completed"

POOL_STATUSES = (STATUS_DRAFT, STATUS_OPEN, STATUS_LOCKED, STATUS_COMPLETED)

# Forward-only lifecycle: draft -> open -> locked -> completed
POOL_TRANSITIONS = {
    STATUS_DRAFT: (STATUS_OPEN,),
    STATUS_OPEN: (STATUS_LOCKED,),
    STATUS_LOCKED: (STATUS_COMPLETED,),
    STATUS_COMPLETED: (),
}


class Pool(db.Model):
    __tablename__ = "pools"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text)

    # Code players use to find and join the pool
    invite_code = db.Column(db.String(64), unique=True, nullable=False, index=True)

    # Free-form label only, no money is handled
    buy_in_amount = db.Column(db.String(20))

    # Captain identity; the secret never changes after creation
    captain_name = db.Column(db.String(50), nullable=False)
    captain_secret = db.Column(db.String(64), nullable=False)

    status = db.Column(db.String(16), nullable=False, default=STATUS_DRAFT)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    participants = db.relationship(
        "Participant", backref="pool", lazy="dynamic", cascade="all, delete-orphan"
    )
    props = db.relationship(
        "Prop", backref="pool", lazy="dynamic", cascade="all, delete-orphan"
    )
    recovery_tokens = db.relationship(
        "RecoveryToken", backref="pool", lazy="dynamic", cascade="all, delete-orphan"
    )

    __table_args__ = (
        db.Index("idx_pool_status", "status"),
        db.Index("idx_pool_created_at", "created_at"),
    )

    def __repr__(self):
        return f"<Pool {self.invite_code} ({self.status})>"

    def __init__(self, **kwargs):
        super(Pool, self).__init__(**kwargs)
        if not self.invite_code:
            self.invite_code = self.generate_invite_code()
        if not self.status:
            self.status = STATUS_DRAFT

    @staticmethod
    def generate_invite_code():
        """Generate a unique 6-character invite code"""
        while True:
            code = secrets.token_urlsafe(8).replace("-", "").replace("_", "")[:6].upper()
            if len(code) == 6 and not Pool.query.filter_by(invite_code=code).first():
                return code

    @staticmethod
    def normalize_name_for_code(name):
        """Normalize a display name into an invite code prefix ("John Smith" -> "john-smith")"""
        text = (name or "").lower().strip()
        text = re.sub(r"\s+", "-", text)
        text = re.sub(r"[^a-z0-9-]", "", text)
        text = re.sub(r"-+", "-", text)
        return text.strip("-")

    @classmethod
    def build_custom_invite_code(cls, captain_name, suffix):
        """Combine the captain's name with a custom suffix: "john-superbowl-2026" """
        prefix = cls.normalize_name_for_code(captain_name)
        suffix = suffix.strip().lower()
        return f"{prefix}-{suffix}" if prefix else suffix

    def is_captain_secret(self, secret):
        """Constant-time check of a presented secret against the captain secret"""
        if not secret or not self.captain_secret:
            return False
        return hmac.compare_digest(secret.encode(), self.captain_secret.encode())

    def get_active_participants(self):
        from .participant import PARTICIPANT_ACTIVE, Participant

        return (
            self.participants.filter_by(status=PARTICIPANT_ACTIVE)
            .order_by(Participant.name)
            .all()
        )

    def get_props(self, include_voided=True):
        from .prop import PROP_ACTIVE, Prop

        query = self.props
        if not include_voided:
            query = query.filter_by(status=PROP_ACTIVE)
        return query.order_by(Prop.order, Prop.created_at).all()

    def count_active_props(self):
        from .prop import PROP_ACTIVE

        return self.props.filter_by(status=PROP_ACTIVE).count()

    def count_unresolved_props(self):
        from .prop import PROP_ACTIVE, Prop

        return self.props.filter(
            Prop.status == PROP_ACTIVE, Prop.correct_option_index.is_(None)
        ).count()

    # Lifecycle guards. Each returns (error_code, message); error_code is None
    # when the operation is permitted in the current status.

    def check_transition(self, target):
        """Check whether the pool may move to the target status"""
        if target not in POOL_STATUSES:
            return "VALIDATION_ERROR", f"Unknown status '{target}'"
        if self.status == STATUS_COMPLETED:
            return "POOL_LOCKED", "Pool is already completed"
        if target in POOL_TRANSITIONS[self.status]:
            return None, "Transition allowed"
        if self.status == STATUS_LOCKED:
            return "POOL_LOCKED", "Pool is already locked"
        if target == self.status:
            return "INVALID_TRANSITION", f"Pool is already {self.status}"
        if self.status == STATUS_DRAFT and target == STATUS_LOCKED:
            return "INVALID_TRANSITION", "Cannot lock a draft pool. Open it first."
        if target == STATUS_COMPLETED:
            return "INVALID_TRANSITION", "Pool must be locked before it can be completed"
        return "INVALID_TRANSITION", f"Cannot move pool from {self.status} to {target}"

    def check_can_join(self):
        if self.status == STATUS_OPEN:
            return None, "Can join"
        if self.status == STATUS_DRAFT:
            return "POOL_LOCKED", "Pool is not open for players yet"
        return "POOL_LOCKED", "Cannot join locked or completed pool"

    def check_can_pick(self, allow_when_locked=False):
        if self.status == STATUS_OPEN:
            return None, "Picks accepted"
        if self.status == STATUS_COMPLETED:
            return "POOL_COMPLETED", "Cannot submit picks to a completed pool"
        if self.status == STATUS_LOCKED:
            if allow_when_locked:
                return None, "Picks accepted"
            return "POOL_LOCKED", "Picks are closed for this pool"
        return "POOL_LOCKED", "Pool is not open for picks yet"

    def check_can_add_prop(self, allow_when_open=False):
        if self.status == STATUS_DRAFT:
            return None, "Props accepted"
        if self.status == STATUS_OPEN and allow_when_open:
            return None, "Props accepted"
        if self.status == STATUS_OPEN:
            return "POOL_LOCKED", "Cannot add props after pool is open"
        return "POOL_LOCKED", "Cannot add props after pool is locked"

    def check_can_edit(self):
        """Pool details, prop edits, prop deletion and reordering"""
        if self.status in (STATUS_DRAFT, STATUS_OPEN):
            return None, "Editable"
        return "POOL_LOCKED", "Cannot edit after pool is locked"

    def check_can_resolve(self):
        """Resolving and voiding props"""
        if self.status == STATUS_LOCKED:
            return None, "Resolvable"
        if self.status == STATUS_COMPLETED:
            return "POOL_COMPLETED", "Pool is already completed"
        return "POOL_NOT_LOCKED", "Pool must be locked first"

    def check_can_manage_players(self):
        if self.status == STATUS_COMPLETED:
            return "POOL_COMPLETED", "Pool is already completed"
        return None, "Players manageable"

    def check_can_reveal_picks(self):
        """Other players' picks stay hidden while picks can still change"""
        if self.status in (STATUS_LOCKED, STATUS_COMPLETED):
            return None, "Picks visible"
        return "POOL_NOT_LOCKED", "Picks are hidden until the pool is locked"

    def to_dict(self, is_captain=False):
        """Public representation; the captain secret is never included"""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "inviteCode": self.invite_code,
            "buyInAmount": self.buy_in_amount,
            "captainName": self.captain_name,
            "status": self.status,
            "isCaptain": is_captain,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
