"""
Resolution and scoring engine

Resolving a prop writes the answer, rescores every pick on it and recomputes
the totals of everyone who picked it, all in one transaction. Totals are
summed from the picks each time rather than adjusted, so re-resolving a prop
or resolving two props at once cannot leave a total out of step with the
picks behind it.
"""

from flask import current_app

from propspals import db
from propspals.errors import (
    AlreadyResolved,
    AlreadyVoided,
    InvalidOption,
    PropVoided,
    require_allowed,
)
from propspals.models import Pick
from propspals.models.pool import STATUS_COMPLETED
from propspals.models.prop import PROP_VOIDED
from propspals.services.pick_service import get_pool_prop
from propspals.utils.cache_utils import invalidate_pool_cache
from propspals.utils.logging_config import ContextualLogger
from propspals.utils.scoring import recalculate_participant_totals


def _points_awarded(picks):
    return [
        {
            "participantId": pick.participant_id,
            "participantName": pick.participant.name,
            "pointsEarned": pick.points_earned,
        }
        for pick in picks
    ]


def resolve_prop(pool, prop_id, correct_option_index):
    """
    Declare a prop's correct option and score it.

    Returns:
        dict with the updated prop, the pool status and the points each
        participant earned on this prop
    """
    require_allowed(pool.check_can_resolve())

    prop = get_pool_prop(pool, prop_id, include_voided=True)
    if prop.is_voided:
        raise PropVoided()
    if not prop.is_valid_option(correct_option_index):
        raise InvalidOption(
            f"correctOptionIndex must be between 0 and {len(prop.options) - 1}"
        )
    if prop.is_resolved and not current_app.config.get("ALLOW_RERESOLVE", True):
        raise AlreadyResolved()

    log = ContextualLogger(__name__, {"pool": pool.invite_code, "prop": prop.id})
    previous = prop.correct_option_index

    try:
        prop.correct_option_index = correct_option_index

        picks = prop.picks.order_by(Pick.created_at).all()
        for pick in picks:
            pick.update_result()
        db.session.flush()

        recalculate_participant_totals([pick.participant_id for pick in picks])

        if (
            current_app.config.get("AUTO_COMPLETE_ON_RESOLVE", False)
            and pool.count_unresolved_props() == 0
        ):
            pool.status = STATUS_COMPLETED
            log.info("All props resolved, pool completed")

        db.session.commit()
    except Exception:
        db.session.rollback()
        log.exception("Resolution failed, rolled back")
        raise

    invalidate_pool_cache(pool.invite_code)

    if previous is None:
        log.info(f"Resolved to option {correct_option_index}, {len(picks)} picks scored")
    else:
        log.info(
            f"Re-resolved from option {previous} to {correct_option_index}, "
            f"{len(picks)} picks rescored"
        )

    return {
        "prop": prop.to_dict(),
        "poolStatus": pool.status,
        "pointsAwarded": _points_awarded(picks),
    }


def void_prop(pool, prop_id):
    """
    Take a prop out of play after locking.

    The prop's answer is cleared, its picks score zero and the affected totals
    are recomputed in the same transaction.
    """
    require_allowed(pool.check_can_resolve())

    prop = get_pool_prop(pool, prop_id, include_voided=True)
    if prop.is_voided:
        raise AlreadyVoided()

    log = ContextualLogger(__name__, {"pool": pool.invite_code, "prop": prop.id})

    try:
        prop.status = PROP_VOIDED
        prop.correct_option_index = None

        picks = prop.picks.all()
        for pick in picks:
            pick.points_earned = 0
        db.session.flush()

        recalculate_participant_totals([pick.participant_id for pick in picks])

        if (
            current_app.config.get("AUTO_COMPLETE_ON_RESOLVE", False)
            and pool.count_active_props() > 0
            and pool.count_unresolved_props() == 0
        ):
            pool.status = STATUS_COMPLETED
            log.info("All remaining props resolved, pool completed")

        db.session.commit()
    except Exception:
        db.session.rollback()
        log.exception("Voiding failed, rolled back")
        raise

    invalidate_pool_cache(pool.invite_code)
    log.info(f"Voided, {len(picks)} picks zeroed")

    return {"prop": prop.to_dict(), "poolStatus": pool.status}


def rescore_pool(pool):
    """
    Recompute every pick and total in a pool from the props' answers.

    Maintenance path for data written before a scoring fix; the result equals
    what resolving each prop again would produce.

    Returns:
        dict mapping participant id to total points
    """
    log = ContextualLogger(__name__, {"pool": pool.invite_code})

    try:
        participant_ids = [participant.id for participant in pool.participants.all()]
        for prop in pool.get_props():
            for pick in prop.picks.all():
                if prop.is_voided:
                    pick.points_earned = 0
                else:
                    pick.update_result()
        db.session.flush()

        totals = recalculate_participant_totals(participant_ids)
        db.session.commit()
    except Exception:
        db.session.rollback()
        log.exception("Rescore failed, rolled back")
        raise

    invalidate_pool_cache(pool.invite_code)
    log.info(f"Rescored {len(totals)} participants")
    return totals
