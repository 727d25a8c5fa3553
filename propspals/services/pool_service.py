"""
Pool lifecycle operations

Every operation checks the pool's status guard before touching anything, so a
rejected request leaves the database exactly as it found it.
"""

import logging

from flask import current_app
from sqlalchemy.exc import IntegrityError

from propspals import db
from propspals.errors import (
    CodeTaken,
    NameTaken,
    PlayerNotFound,
    ValidationError,
    require_allowed,
)
from propspals.models import Participant, Pool
from propspals.models.pool import STATUS_DRAFT, STATUS_OPEN
from propspals.services import auth_service
from propspals.utils.cache_utils import invalidate_pool_cache

logger = logging.getLogger(__name__)


def _is_unique_violation_on(error, *names):
    text = str(getattr(error, "orig", error)).lower()
    return any(name in text for name in names)


def create_pool(name, captain_name, description=None, buy_in_amount=None,
                invite_code_suffix=None, status=None):
    """
    Create a pool and its captain participant in one transaction.

    Returns:
        (pool, captain_secret)
    """
    if invite_code_suffix:
        invite_code = Pool.build_custom_invite_code(captain_name, invite_code_suffix)
        if Pool.query.filter_by(invite_code=invite_code).first():
            raise CodeTaken()
    else:
        invite_code = Pool.generate_invite_code()

    captain_secret = Participant.generate_secret()

    pool = Pool(
        name=name,
        description=description or None,
        invite_code=invite_code,
        buy_in_amount=buy_in_amount or None,
        captain_name=captain_name,
        captain_secret=captain_secret,
        status=status or STATUS_DRAFT,
    )
    db.session.add(pool)
    db.session.flush()  # Get the pool ID

    captain = Participant(pool_id=pool.id, name=captain_name, secret=captain_secret)
    db.session.add(captain)

    try:
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        if _is_unique_violation_on(e, "invite_code"):
            raise CodeTaken("This invite code is already in use. Please try a different one.")
        raise

    logger.info(f"Pool {pool.invite_code} created by {captain_name} ({pool.status})")
    return pool, captain_secret


def update_pool(pool, name=None, description=None, status=None,
                name_provided=False, description_provided=False):
    """
    Edit pool details or move the pool to a new status (captain only).

    A status change and a detail edit may be sent together; the status guard
    is evaluated first and nothing is written if either is rejected.
    """
    if status is not None:
        require_allowed(pool.check_transition(status))
        if pool.status == STATUS_DRAFT and status == STATUS_OPEN:
            if pool.count_active_props() == 0:
                raise ValidationError("Add at least one prop before opening the pool")

    if name_provided or description_provided:
        # Checked against the status before any transition in this call
        require_allowed(pool.check_can_edit())
        if name_provided:
            pool.name = name
        if description_provided:
            pool.description = description or None

    previous_status = pool.status
    if status is not None:
        pool.status = status

    db.session.commit()
    invalidate_pool_cache(pool.invite_code)

    if pool.status != previous_status:
        logger.info(
            f"Pool {pool.invite_code} moved from {previous_status} to {pool.status}"
        )
    return pool


def join_pool(pool, name):
    """
    Add a player to an open pool.

    Returns:
        (participant, secret)
    """
    require_allowed(pool.check_can_join())

    # Removed players still hold their name; the unique constraint covers them
    participant = Participant(pool_id=pool.id, name=name)
    db.session.add(participant)

    try:
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        if _is_unique_violation_on(e, "name", "unique_pool_participant_name"):
            raise NameTaken()
        raise

    invalidate_pool_cache(pool.invite_code)
    logger.info(f"{name} joined pool {pool.invite_code}")
    return participant, participant.secret


def list_players(pool, base_url):
    """
    Captain's view of the active players with shareable recovery links.

    Secrets never leave the server; each link carries an opaque single-use
    token instead.
    """
    players = pool.get_active_participants()
    tokens = auth_service.get_or_create_tokens_for_pool(
        pool,
        [player.id for player in players],
        current_app.config.get("RECOVERY_TOKEN_EXPIRY_HOURS", 168),
    )
    db.session.commit()

    base_url = base_url.rstrip("/")
    result = []
    for player in players:
        data = player.to_dict()
        page = "captain" if data["isCaptain"] else "picks"
        data["recoveryUrl"] = (
            f"{base_url}/pool/{pool.invite_code}/{page}?token={tokens[player.id]}"
        )
        result.append(data)
    return result


def remove_player(pool, participant_id):
    """Soft-remove a player (captain only); the captain cannot be removed"""
    require_allowed(pool.check_can_manage_players())

    participant = Participant.query.filter_by(id=participant_id, pool_id=pool.id).first()
    if participant is None or not participant.is_active:
        raise PlayerNotFound()
    if participant.is_captain:
        raise ValidationError("The captain cannot be removed from the pool")

    participant.remove()
    db.session.commit()
    invalidate_pool_cache(pool.invite_code)

    logger.info(f"Removed {participant.name} from pool {pool.invite_code}")
    return participant
