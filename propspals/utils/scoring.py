"""
Scoring helpers for Props With Pals

Pick scores are a function of the pick and its prop only. Participant totals
are always recomputed as the sum over every pick the participant holds, so
re-resolving a prop or resolving two props concurrently never leaves a stale
or double-counted total behind.
"""

from sqlalchemy import func

from propspals import db


def calculate_pick_score(selected_option_index, correct_option_index, point_value):
    """
    Calculate the score for a single pick.

    Returns:
        None when the prop is unresolved
        point_value when the selected option is the correct one
        0 otherwise
    """
    if correct_option_index is None:
        return None
    if selected_option_index == correct_option_index:
        return point_value
    return 0


def recalculate_participant_totals(participant_ids):
    """
    Recompute total_points for the given participants from their picks.

    Runs inside the caller's transaction; nothing is committed here.

    Returns:
        dict mapping participant id to the new total
    """
    from propspals.models import Participant, Pick

    participant_ids = list(set(participant_ids))
    if not participant_ids:
        return {}

    rows = (
        db.session.query(
            Pick.participant_id,
            func.coalesce(func.sum(Pick.points_earned), 0),
        )
        .filter(Pick.participant_id.in_(participant_ids))
        .group_by(Pick.participant_id)
        .all()
    )
    totals = {participant_id: int(total or 0) for participant_id, total in rows}

    for participant in Participant.query.filter(
        Participant.id.in_(participant_ids)
    ).all():
        participant.total_points = totals.get(participant.id, 0)
        totals[participant.id] = participant.total_points

    return totals
