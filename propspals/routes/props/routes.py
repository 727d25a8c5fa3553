from flask import current_app, jsonify, request

from propspals.forms import parse_payload
from propspals.forms.props import (
    CreatePropForm,
    ReorderPropsForm,
    ResolvePropForm,
    SubmitPickForm,
    UpdatePropForm,
)
from propspals.routes.props import bp
from propspals.services import auth_service, pick_service, prop_service, resolution_service
from propspals.utils.session_carrier import get_pool_secret

UPDATABLE_PROP_FIELDS = ("question_text", "options", "point_value", "category")


def _captain_pool(code):
    pool, _ = auth_service.authenticate(code, get_pool_secret(code), require_captain=True)
    return pool


@bp.route("/<code>/props")
def list_props(code):
    """Props in display order; voided props are included with their status"""
    pool = auth_service.get_pool_by_code(code)
    return jsonify({"props": [prop.to_dict() for prop in prop_service.list_props(pool)]})


@bp.route("/<code>/props", methods=["POST"])
def create_prop(code):
    pool = _captain_pool(code)
    form = parse_payload(CreatePropForm, request.get_json(silent=True))

    prop = prop_service.create_prop(
        pool,
        question_text=form.question_text.data,
        options=form.options.data,
        point_value=form.point_value.data,
        category=form.category.data,
    )
    return jsonify(prop.to_dict()), 201


@bp.route("/<code>/props/<prop_id>", methods=["PATCH"])
def update_prop(code, prop_id):
    pool = _captain_pool(code)
    form = parse_payload(UpdatePropForm, request.get_json(silent=True))

    changes = {
        name: getattr(form, name).data
        for name in UPDATABLE_PROP_FIELDS
        if form.provided(name)
    }
    prop = prop_service.update_prop(pool, prop_id, changes)
    return jsonify(prop.to_dict())


@bp.route("/<code>/props/<prop_id>", methods=["DELETE"])
def delete_prop(code, prop_id):
    pool = _captain_pool(code)
    prop_service.delete_prop(pool, prop_id)
    return jsonify({"success": True, "propId": prop_id})


@bp.route("/<code>/props/reorder", methods=["POST"])
def reorder_props(code):
    pool = _captain_pool(code)
    form = parse_payload(ReorderPropsForm, request.get_json(silent=True))

    props = prop_service.reorder_props(pool, form.prop_ids.data)
    return jsonify({"props": [prop.to_dict() for prop in props]})


@bp.route("/<code>/props/<prop_id>/resolve", methods=["POST"])
def resolve_prop(code, prop_id):
    """Set or change a prop's correct answer and rescore it"""
    pool = _captain_pool(code)
    form = parse_payload(ResolvePropForm, request.get_json(silent=True))

    result = resolution_service.resolve_prop(
        pool, prop_id, form.correct_option_index.data
    )
    return jsonify(result)


@bp.route("/<code>/props/<prop_id>/void", methods=["POST"])
def void_prop(code, prop_id):
    pool = _captain_pool(code)
    return jsonify(resolution_service.void_prop(pool, prop_id))


@bp.route("/<code>/picks")
def list_picks(code):
    """The caller's own picks"""
    _, participant = auth_service.authenticate(code, get_pool_secret(code))
    picks = pick_service.list_picks(participant)
    return jsonify({"picks": [pick.to_dict() for pick in picks]})


@bp.route("/<code>/picks", methods=["POST"])
def submit_pick(code):
    """Create (201) or overwrite (200) the caller's pick on a prop"""
    pool, participant = auth_service.authenticate(code, get_pool_secret(code))
    form = parse_payload(SubmitPickForm, request.get_json(silent=True))

    pick, created = pick_service.submit_pick(
        pool,
        participant,
        form.prop_id.data,
        form.selected_option_index.data,
        allow_when_locked=current_app.config.get("ALLOW_PICKS_WHEN_LOCKED", False),
    )
    return jsonify({"pick": pick.to_dict(), "created": created}), 201 if created else 200


@bp.route("/<code>/props/<prop_id>/picks-count")
def prop_pick_count(code, prop_id):
    """How many players have picked on a prop, shown before editing it"""
    pool = _captain_pool(code)
    return jsonify({"count": pick_service.count_prop_picks(pool, prop_id)})
