"""
Pick store

One current pick per participant and prop. Submitting again overwrites the
earlier choice; scoring only ever happens at resolution time.
"""

import logging

from sqlalchemy.exc import IntegrityError

from propspals import db
from propspals.errors import (
    AlreadyResolved,
    InvalidOption,
    PlayerNotFound,
    PropNotFound,
    require_allowed,
)
from propspals.models import Participant, Pick, Prop
from propspals.utils.cache_utils import invalidate_pool_cache

logger = logging.getLogger(__name__)


def get_pool_prop(pool, prop_id, include_voided=False):
    """Fetch a prop that belongs to the pool or raise PROP_NOT_FOUND"""
    prop = Prop.query.filter_by(id=prop_id, pool_id=pool.id).first() if prop_id else None
    if prop is None or (prop.is_voided and not include_voided):
        raise PropNotFound()
    return prop


def submit_pick(pool, participant, prop_id, selected_option_index, allow_when_locked=False):
    """
    Create or overwrite the participant's pick on a prop.

    Returns:
        (pick, created) where created is False when an existing pick was
        overwritten
    """
    require_allowed(pool.check_can_pick(allow_when_locked))

    prop = get_pool_prop(pool, prop_id)
    if prop.is_resolved:
        # Only reachable when picks stay open after locking
        raise AlreadyResolved("Picks are closed for a resolved prop")
    if not prop.is_valid_option(selected_option_index):
        raise InvalidOption(
            f"selectedOptionIndex must be between 0 and {len(prop.options) - 1}"
        )

    pick = Pick.query.filter_by(participant_id=participant.id, prop_id=prop.id).first()
    created = pick is None

    if created:
        pick = Pick(
            participant_id=participant.id,
            prop_id=prop.id,
            selected_option_index=selected_option_index,
        )
        db.session.add(pick)
        try:
            db.session.commit()
        except IntegrityError:
            # Another request inserted the same pick first; last write wins
            db.session.rollback()
            pick = Pick.query.filter_by(
                participant_id=participant.id, prop_id=prop.id
            ).first()
            if pick is None:
                raise
            created = False

    if not created:
        pick.selected_option_index = selected_option_index
        db.session.commit()

    invalidate_pool_cache(pool.invite_code)
    logger.debug(
        f"Pick {'created' if created else 'updated'}: {participant.name} -> "
        f"option {selected_option_index} on prop {prop.id}"
    )
    return pick, created


def list_picks(participant):
    """The participant's picks on props that are still active"""
    return [
        pick
        for pick in participant.picks.order_by(Pick.created_at).all()
        if not pick.prop.is_voided
    ]


def get_player_picks(pool, participant_id):
    """
    Another player's picks, once the pool is locked or completed.

    Every active prop is listed in display order with the player's choice,
    or None where they skipped it.

    Returns:
        dict with the participant, their props and a correct/wrong/pending/
        unanswered tally
    """
    require_allowed(pool.check_can_reveal_picks())

    participant = Participant.query.filter_by(id=participant_id, pool_id=pool.id).first()
    if participant is None or not participant.is_active:
        raise PlayerNotFound()

    picks_by_prop = {pick.prop_id: pick for pick in participant.picks.all()}
    stats = {"correct": 0, "wrong": 0, "pending": 0, "unanswered": 0}
    props = []

    for prop in pool.get_props(include_voided=False):
        pick = picks_by_prop.get(prop.id)
        selected = pick.selected_option_index if pick else None

        if selected is None:
            stats["unanswered"] += 1
        elif not prop.is_resolved:
            stats["pending"] += 1
        elif selected == prop.correct_option_index:
            stats["correct"] += 1
        else:
            stats["wrong"] += 1

        entry = prop.to_dict()
        entry["selectedOptionIndex"] = selected
        entry["pointsEarned"] = pick.points_earned if pick else None
        props.append(entry)

    return {
        "participant": participant.to_dict(include_joined=False),
        "props": props,
        "stats": stats,
    }


def count_prop_picks(pool, prop_id):
    """Number of picks made on a prop, voided or not"""
    prop = get_pool_prop(pool, prop_id, include_voided=True)
    return Pick.query.filter_by(prop_id=prop.id).count()
