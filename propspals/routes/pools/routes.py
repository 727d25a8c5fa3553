import logging

from flask import current_app, jsonify, request

from propspals import limiter
from propspals.forms import parse_payload
from propspals.forms.pools import CreatePoolForm, JoinPoolForm, RecoverForm, UpdatePoolForm
from propspals.routes.pools import bp
from propspals.services import auth_service, pick_service, pool_service
from propspals.services.leaderboard_service import get_leaderboard_payload
from propspals.utils.session_carrier import get_pool_secret, set_pool_secret

logger = logging.getLogger(__name__)


def _join_limit():
    return current_app.config.get("JOIN_RATE_LIMIT", "30 per minute")


def _recover_limit():
    return current_app.config.get("RECOVER_RATE_LIMIT", "10 per minute")


def _base_url():
    return current_app.config.get("PUBLIC_BASE_URL") or request.host_url


@bp.route("", methods=["POST"])
def create_pool():
    """Create a pool; the caller becomes its captain"""
    form = parse_payload(CreatePoolForm, request.get_json(silent=True))

    pool, captain_secret = pool_service.create_pool(
        name=form.name.data,
        captain_name=form.captain_name.data,
        description=form.description.data,
        buy_in_amount=form.buy_in_amount.data,
        invite_code_suffix=form.invite_code.data,
        status=form.status.data,
    )
    set_pool_secret(pool.invite_code, captain_secret)

    return (
        jsonify({"pool": pool.to_dict(is_captain=True), "secret": captain_secret}),
        201,
    )


@bp.route("/<code>")
def get_pool(code):
    """Public pool view, with the caller's identity when they have one"""
    pool, participant = auth_service.identify(code, get_pool_secret(code))

    is_captain = participant is not None and participant.is_captain
    data = pool.to_dict(is_captain=is_captain)
    data["participantCount"] = len(pool.get_active_participants())
    data["propCount"] = pool.count_active_props()
    data["participant"] = participant.to_dict() if participant else None
    return jsonify(data)


@bp.route("/<code>", methods=["PATCH"])
def update_pool(code):
    """Edit pool details or move it through its lifecycle (captain only)"""
    pool, _ = auth_service.authenticate(code, get_pool_secret(code), require_captain=True)
    form = parse_payload(UpdatePoolForm, request.get_json(silent=True))

    pool = pool_service.update_pool(
        pool,
        name=form.name.data,
        description=form.description.data,
        status=form.status.data,
        name_provided=form.provided("name"),
        description_provided=form.provided("description"),
    )
    return jsonify(pool.to_dict(is_captain=True))


@bp.route("/<code>/join", methods=["POST"])
@limiter.limit(_join_limit)
def join_pool(code):
    pool = auth_service.get_pool_by_code(code)
    form = parse_payload(JoinPoolForm, request.get_json(silent=True))

    participant, secret = pool_service.join_pool(pool, form.name.data)
    set_pool_secret(pool.invite_code, secret)

    return jsonify({"participant": participant.to_dict(), "secret": secret}), 201


@bp.route("/<code>/recover", methods=["POST"])
@limiter.limit(_recover_limit)
def recover(code):
    """Exchange a recovery token for the participant's session"""
    pool = auth_service.get_pool_by_code(code)
    form = parse_payload(RecoverForm, request.get_json(silent=True))

    participant, secret = auth_service.redeem_recovery_token(pool, form.token.data)
    set_pool_secret(pool.invite_code, secret)

    return jsonify(
        {
            "participant": participant.to_dict(),
            "isCaptain": participant.is_captain,
            "secret": secret,
        }
    )


@bp.route("/<code>/players")
def list_players(code):
    """Captain's player list with recovery links"""
    pool, _ = auth_service.authenticate(code, get_pool_secret(code), require_captain=True)
    return jsonify({"players": pool_service.list_players(pool, _base_url())})


@bp.route("/<code>/players/<participant_id>", methods=["DELETE"])
def remove_player(code, participant_id):
    pool, _ = auth_service.authenticate(code, get_pool_secret(code), require_captain=True)
    participant = pool_service.remove_player(pool, participant_id)
    return jsonify({"participant": participant.to_dict()})


@bp.route("/<code>/players/<participant_id>/picks")
def player_picks(code, participant_id):
    """Another player's picks; hidden until the pool locks"""
    pool = auth_service.get_pool_by_code(code)
    return jsonify(pick_service.get_player_picks(pool, participant_id))


@bp.route("/<code>/leaderboard")
def leaderboard(code):
    """Rankings and pick stats; readable by anyone holding the invite code"""
    return jsonify(get_leaderboard_payload(code))
