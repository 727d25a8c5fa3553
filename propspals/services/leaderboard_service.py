"""Loads a pool's rows and hands them to the pure leaderboard aggregator"""

from propspals.models import Pick
from propspals.services.auth_service import get_pool_by_code
from propspals.utils.cache_utils import cached_pool_view, leaderboard_cache_key
from propspals.utils.leaderboard import build_leaderboard


@cached_pool_view(leaderboard_cache_key)
def get_leaderboard_payload(code):
    """
    Ranked standings and pick stats for a pool.

    Removed players and voided props are left out. The payload is cached per
    pool and dropped by every write to the pool.
    """
    pool = get_pool_by_code(code)

    participants = pool.get_active_participants()
    props = pool.get_props(include_voided=False)

    participant_ids = [participant.id for participant in participants]
    prop_ids = [prop.id for prop in props]
    picks = []
    if participant_ids and prop_ids:
        picks = Pick.query.filter(
            Pick.participant_id.in_(participant_ids), Pick.prop_id.in_(prop_ids)
        ).all()

    payload = build_leaderboard(
        [participant.to_dict(include_joined=False) for participant in participants],
        [prop.to_dict() for prop in props],
        [pick.to_dict() for pick in picks],
    )
    payload.update(
        {"poolId": pool.id, "poolName": pool.name, "poolStatus": pool.status}
    )
    return payload
