import pytest

from propspals.models import Pool
from propspals.models.pool import (
    STATUS_COMPLETED,
    STATUS_DRAFT,
    STATUS_LOCKED,
    STATUS_OPEN,
)


def _status(harness):
    return harness.captain.get(harness.base).get_json()["status"]


@pytest.mark.parametrize(
    "current,target,code",
    [
        (STATUS_DRAFT, STATUS_OPEN, None),
        (STATUS_OPEN, STATUS_LOCKED, None),
        (STATUS_LOCKED, STATUS_COMPLETED, None),
        (STATUS_DRAFT, STATUS_LOCKED, "INVALID_TRANSITION"),
        (STATUS_DRAFT, STATUS_COMPLETED, "INVALID_TRANSITION"),
        (STATUS_OPEN, STATUS_COMPLETED, "INVALID_TRANSITION"),
        (STATUS_OPEN, STATUS_DRAFT, "INVALID_TRANSITION"),
        (STATUS_OPEN, STATUS_OPEN, "INVALID_TRANSITION"),
        (STATUS_LOCKED, STATUS_OPEN, "POOL_LOCKED"),
        (STATUS_LOCKED, STATUS_DRAFT, "POOL_LOCKED"),
        (STATUS_COMPLETED, STATUS_LOCKED, "POOL_LOCKED"),
        (STATUS_COMPLETED, STATUS_OPEN, "POOL_LOCKED"),
    ],
)
def test_transition_table(current, target, code):
    pool = Pool(name="p", captain_name="c", captain_secret="s", invite_code="X", status=current)
    assert pool.check_transition(target)[0] == code


def test_pool_starts_in_draft(harness):
    data = harness.create()
    assert data["pool"]["status"] == "draft"
    assert data["pool"]["isCaptain"] is True


def test_full_lifecycle(harness):
    harness.create()
    harness.add_prop()
    for status in ("open", "locked", "completed"):
        resp = harness.set_status(status)
        assert resp.status_code == 200, resp.get_json()
        assert resp.get_json()["status"] == status


def test_opening_requires_a_prop(harness):
    harness.create()
    resp = harness.set_status("open")
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "VALIDATION_ERROR"
    assert _status(harness) == "draft"


def test_backward_transition_leaves_status_unchanged(open_pool):
    open_pool.set_status("locked")
    resp = open_pool.set_status("open")
    assert resp.status_code == 403
    assert resp.get_json()["code"] == "POOL_LOCKED"
    assert _status(open_pool) == "locked"


def test_skip_transition_rejected(harness):
    harness.create()
    harness.add_prop()
    resp = harness.set_status("locked")
    assert resp.status_code == 400
    assert resp.get_json() == {
        "code": "INVALID_TRANSITION",
        "message": "Cannot lock a draft pool. Open it first.",
    }
    assert _status(harness) == "draft"


def test_rejected_status_change_does_not_apply_edits(open_pool):
    open_pool.set_status("locked")
    resp = open_pool.captain.patch(
        open_pool.base, json={"name": "Renamed", "status": "open"}
    )
    assert resp.status_code == 403
    assert open_pool.captain.get(open_pool.base).get_json()["name"] == "Super Bowl Props"


def test_edit_details_while_open(open_pool):
    resp = open_pool.captain.patch(
        open_pool.base, json={"name": "Renamed", "description": "Halftime too"}
    )
    assert resp.status_code == 200
    assert resp.get_json()["name"] == "Renamed"
    assert resp.get_json()["description"] == "Halftime too"


def test_edit_details_after_lock_rejected(open_pool):
    open_pool.set_status("locked")
    resp = open_pool.captain.patch(open_pool.base, json={"name": "Renamed"})
    assert resp.status_code == 403
    assert resp.get_json()["code"] == "POOL_LOCKED"


def test_empty_update_rejected(open_pool):
    resp = open_pool.captain.patch(open_pool.base, json={})
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "VALIDATION_ERROR"


def test_join_requires_open_pool(harness):
    harness.create()
    harness.add_prop()
    player = harness.app.test_client()

    resp = player.post(f"{harness.base}/join", json={"name": "Early"})
    assert resp.status_code == 403
    assert resp.get_json()["code"] == "POOL_LOCKED"

    harness.set_status("open")
    harness.set_status("locked")
    resp = player.post(f"{harness.base}/join", json={"name": "Late"})
    assert resp.status_code == 403
    assert resp.get_json()["code"] == "POOL_LOCKED"


def test_props_only_added_in_draft(open_pool):
    resp = open_pool.captain.post(
        f"{open_pool.base}/props",
        json={"questionText": "Coin toss?", "options": ["Heads", "Tails"], "pointValue": 5},
    )
    assert resp.status_code == 403
    assert resp.get_json()["code"] == "POOL_LOCKED"
    props = open_pool.captain.get(f"{open_pool.base}/props").get_json()["props"]
    assert len(props) == 1


def test_props_added_while_open_when_enabled(app, open_pool):
    app.config["ALLOW_PROPS_WHEN_OPEN"] = True
    prop_id = open_pool.add_prop(question="Coin toss?", options=["Heads", "Tails"])
    props = open_pool.captain.get(f"{open_pool.base}/props").get_json()["props"]
    assert [p["id"] for p in props][-1] == prop_id
    assert props[-1]["order"] == 1


def test_resolve_requires_locked_pool(open_pool):
    resp = open_pool.resolve(open_pool.prop_id, 0)
    assert resp.status_code == 403
    assert resp.get_json()["code"] == "POOL_NOT_LOCKED"


def test_completed_pool_rejects_resolution_and_picks(abc_pool):
    abc_pool.set_status("completed")

    resp = abc_pool.resolve(abc_pool.prop_id, 0)
    assert resp.status_code == 403
    assert resp.get_json()["code"] == "POOL_COMPLETED"

    resp = abc_pool.pick(abc_pool.alice, abc_pool.prop_id, 1)
    assert resp.status_code == 403
    assert resp.get_json()["code"] == "POOL_COMPLETED"


def test_prop_edit_and_delete_blocked_after_lock(open_pool):
    open_pool.set_status("locked")
    resp = open_pool.captain.patch(
        f"{open_pool.base}/props/{open_pool.prop_id}", json={"pointValue": 3}
    )
    assert resp.status_code == 403
    resp = open_pool.captain.delete(f"{open_pool.base}/props/{open_pool.prop_id}")
    assert resp.status_code == 403
    assert len(open_pool.captain.get(f"{open_pool.base}/props").get_json()["props"]) == 1
