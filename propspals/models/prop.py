import uuid
from datetime import datetime, timezone

from propspals import db

PROP_ACTIVE = "active"
PROP_VOIDED = "voided"


class Prop(db.Model):
    __tablename__ = "props"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    pool_id = db.Column(
        db.String(36), db.ForeignKey("pools.id", ondelete="CASCADE"), nullable=False
    )

    question_text = db.Column(db.Text, nullable=False)
    options = db.Column(db.JSON, nullable=False)
    point_value = db.Column(db.Integer, nullable=False, default=1)
    category = db.Column(db.String(50))

    # None until the captain resolves the prop
    correct_option_index = db.Column(db.Integer)

    status = db.Column(db.String(16), nullable=False, default=PROP_ACTIVE)
    order = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    picks = db.relationship(
        "Pick", backref="prop", lazy="dynamic", cascade="all, delete-orphan"
    )

    __table_args__ = (
        db.Index("idx_props_pool", "pool_id"),
        db.Index("idx_props_pool_order", "pool_id", "order"),
    )

    def __repr__(self):
        return f"<Prop {self.id} pool_id={self.pool_id}>"

    @property
    def is_resolved(self):
        return self.correct_option_index is not None

    @property
    def is_voided(self):
        return self.status == PROP_VOIDED

    def is_valid_option(self, index):
        """Check that an option index points into this prop's options"""
        return index is not None and 0 <= index < len(self.options or [])

    def to_dict(self):
        return {
            "id": self.id,
            "poolId": self.pool_id,
            "questionText": self.question_text,
            "options": list(self.options or []),
            "pointValue": self.point_value,
            "correctOptionIndex": self.correct_option_index,
            "category": self.category,
            "status": self.status,
            "order": self.order,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
