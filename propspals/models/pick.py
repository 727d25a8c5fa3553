import uuid
from datetime import datetime, timezone

from propspals import db


class Pick(db.Model):
    __tablename__ = "picks"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    participant_id = db.Column(
        db.String(36),
        db.ForeignKey("participants.id", ondelete="CASCADE"),
        nullable=False,
    )
    prop_id = db.Column(
        db.String(36), db.ForeignKey("props.id", ondelete="CASCADE"), nullable=False
    )

    selected_option_index = db.Column(db.Integer, nullable=False)

    # None until the prop is resolved, then 0 or the prop's point value
    points_earned = db.Column(db.Integer)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # One current pick per participant and prop
    __table_args__ = (
        db.UniqueConstraint(
            "participant_id", "prop_id", name="unique_participant_prop_pick"
        ),
        db.Index("idx_picks_participant", "participant_id"),
        db.Index("idx_picks_prop", "prop_id"),
    )

    def __repr__(self):
        return f"<Pick participant_id={self.participant_id} prop_id={self.prop_id} option={self.selected_option_index}>"

    def update_result(self):
        """Score this pick against its prop's current answer"""
        from propspals.utils.scoring import calculate_pick_score

        self.points_earned = calculate_pick_score(
            self.selected_option_index,
            self.prop.correct_option_index,
            self.prop.point_value,
        )

    def to_dict(self):
        return {
            "id": self.id,
            "participantId": self.participant_id,
            "propId": self.prop_id,
            "selectedOptionIndex": self.selected_option_index,
            "pointsEarned": self.points_earned,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
