"""Captain-side prop management: add, edit, delete and reorder"""

import logging

from flask import current_app
from sqlalchemy import func

from propspals import db
from propspals.errors import ValidationError, require_allowed
from propspals.models import Pick, Prop
from propspals.services.pick_service import get_pool_prop
from propspals.utils.cache_utils import invalidate_pool_cache

logger = logging.getLogger(__name__)


def list_props(pool, include_voided=True):
    return pool.get_props(include_voided=include_voided)


def create_prop(pool, question_text, options, point_value, category=None):
    """Append a prop to the end of the pool's display order"""
    require_allowed(
        pool.check_can_add_prop(current_app.config.get("ALLOW_PROPS_WHEN_OPEN", False))
    )

    next_order = (
        db.session.query(func.coalesce(func.max(Prop.order), -1))
        .filter(Prop.pool_id == pool.id)
        .scalar()
        + 1
    )

    prop = Prop(
        pool_id=pool.id,
        question_text=question_text,
        options=list(options),
        point_value=point_value,
        category=category or None,
        order=next_order,
    )
    db.session.add(prop)
    db.session.commit()
    invalidate_pool_cache(pool.invite_code)

    logger.info(f"Prop {prop.id} added to pool {pool.invite_code}")
    return prop


def update_prop(pool, prop_id, changes):
    """
    Edit a prop while the pool is still draft or open.

    ``changes`` holds only the fields the caller sent, keyed by column name.
    Existing picks keep their index, so shrinking the option list is refused
    once somebody has picked an option that would disappear.
    """
    require_allowed(pool.check_can_edit())
    prop = get_pool_prop(pool, prop_id)

    options = changes.get("options")
    if options is not None:
        highest = (
            db.session.query(func.max(Pick.selected_option_index))
            .filter(Pick.prop_id == prop.id)
            .scalar()
        )
        if highest is not None and highest >= len(options):
            raise ValidationError(
                "options: Players have already picked an option that would be removed"
            )
        prop.options = list(options)

    if "question_text" in changes:
        prop.question_text = changes["question_text"]
    if "point_value" in changes:
        prop.point_value = changes["point_value"]
    if "category" in changes:
        prop.category = changes["category"] or None

    db.session.commit()
    invalidate_pool_cache(pool.invite_code)
    return prop


def delete_prop(pool, prop_id):
    """Delete a prop and its picks"""
    require_allowed(pool.check_can_edit())
    prop = get_pool_prop(pool, prop_id)

    db.session.delete(prop)
    db.session.commit()
    invalidate_pool_cache(pool.invite_code)

    logger.info(f"Prop {prop_id} deleted from pool {pool.invite_code}")


def reorder_props(pool, prop_ids):
    """
    Set the display order from a list of prop ids.

    Every id must belong to the pool and appear once. Props left out keep
    their relative order after the listed ones.
    """
    require_allowed(pool.check_can_edit())

    if len(set(prop_ids)) != len(prop_ids):
        raise ValidationError("propIds: Each prop may only appear once")

    props = {prop.id: prop for prop in pool.get_props()}
    unknown = [prop_id for prop_id in prop_ids if prop_id not in props]
    if unknown:
        raise ValidationError("propIds: Every prop must belong to this pool")

    ordered = [props[prop_id] for prop_id in prop_ids]
    ordered += [prop for prop in props.values() if prop.id not in set(prop_ids)]
    for index, prop in enumerate(ordered):
        prop.order = index

    db.session.commit()
    invalidate_pool_cache(pool.invite_code)
    return ordered
