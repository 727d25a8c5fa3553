"""
Secret and recovery token authority

Participants authenticate by presenting their raw secret for a pool. The
captain is the participant whose secret equals the pool's captain secret.
Recovery tokens are single-use stand-ins for a raw secret that can be shared
in a link; redeeming one hands back the participant and their secret.
"""

import logging
from datetime import datetime, timezone

from propspals import db
from propspals.errors import InvalidToken, PoolNotFound, Unauthorized
from propspals.models import Participant, Pool, RecoveryToken
from propspals.models.participant import PARTICIPANT_ACTIVE

logger = logging.getLogger(__name__)


def get_pool_by_code(code):
    """Find a pool by invite code or raise POOL_NOT_FOUND"""
    pool = Pool.query.filter_by(invite_code=code).first() if code else None
    if pool is None:
        raise PoolNotFound()
    return pool


def find_participant(pool, secret):
    """
    Return the active participant holding ``secret`` in ``pool``, or None.

    Every active participant is compared in constant time; the lookup never
    short-circuits on a database equality match.
    """
    if not secret:
        return None

    match = None
    for participant in pool.participants.filter_by(status=PARTICIPANT_ACTIVE).all():
        if participant.matches_secret(secret):
            match = participant
    return match


def authenticate(code, secret, require_captain=False):
    """
    Resolve the caller for a pool.

    Args:
        code: pool invite code
        secret: the secret presented by the caller, may be None
        require_captain: reject anyone but the captain

    Returns:
        (pool, participant)

    Raises:
        PoolNotFound, Unauthorized
    """
    pool = get_pool_by_code(code)

    if not secret:
        raise Unauthorized("Missing secret")

    participant = find_participant(pool, secret)
    if participant is None:
        raise Unauthorized("Invalid secret")

    if require_captain and not pool.is_captain_secret(participant.secret):
        raise Unauthorized("Captain access required")

    return pool, participant


def identify(code, secret):
    """Like authenticate(), but anonymous callers get (pool, None)"""
    pool = get_pool_by_code(code)
    return pool, find_participant(pool, secret)


def get_or_create_tokens_for_pool(pool, participant_ids, expires_hours):
    """
    Make sure each participant has a usable recovery token.

    Reuses a still-valid unused token where one exists, otherwise issues a
    new one. Nothing is committed here.

    Returns:
        dict mapping participant id to token string
    """
    tokens = {}
    if not participant_ids:
        return tokens

    existing = (
        RecoveryToken.query.filter(
            RecoveryToken.pool_id == pool.id,
            RecoveryToken.participant_id.in_(participant_ids),
            RecoveryToken.used_at.is_(None),
        )
        .order_by(RecoveryToken.expires_at.desc())
        .all()
    )
    for token in existing:
        if token.participant_id not in tokens and token.is_valid:
            tokens[token.participant_id] = token.token

    for participant_id in participant_ids:
        if participant_id in tokens:
            continue
        token = RecoveryToken(
            pool_id=pool.id,
            participant_id=participant_id,
            expires_hours=expires_hours,
        )
        db.session.add(token)
        tokens[participant_id] = token.token

    return tokens


def redeem_recovery_token(pool, token_value):
    """
    Exchange a recovery token for its participant.

    Marks the token used. Unknown, expired, used and cross-pool tokens, and
    tokens of removed participants, all fail the same way.

    Returns:
        (participant, secret)

    Raises:
        InvalidToken
    """
    token = RecoveryToken.query.filter_by(token=token_value).first()

    if token is None or token.pool_id != pool.id or not token.is_valid:
        logger.info(f"Rejected recovery token for pool {pool.invite_code}")
        raise InvalidToken()

    participant = db.session.get(Participant, token.participant_id)
    if participant is None or not participant.is_active:
        raise InvalidToken()

    # Claim the token with a conditional update so two concurrent
    # redemptions cannot both succeed
    claimed = RecoveryToken.query.filter(
        RecoveryToken.id == token.id, RecoveryToken.used_at.is_(None)
    ).update(
        {RecoveryToken.used_at: datetime.now(timezone.utc)},
        synchronize_session=False,
    )
    if claimed != 1:
        db.session.rollback()
        raise InvalidToken()
    db.session.commit()

    logger.info(
        f"Recovered session for participant {participant.id} in pool {pool.invite_code}"
    )
    return participant, participant.secret


def purge_expired_tokens():
    """Delete expired or used recovery tokens; returns the number removed"""
    removed = 0
    for token in RecoveryToken.query.all():
        if token.is_used or token.is_expired:
            db.session.delete(token)
            removed += 1
    db.session.commit()
    return removed
