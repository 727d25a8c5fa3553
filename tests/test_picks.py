from propspals.models import Participant, Pick


def test_pick_upsert_keeps_one_row(open_pool):
    dana = open_pool.join("Dana")

    first = open_pool.pick(dana, open_pool.prop_id, 0)
    assert first.status_code == 201
    assert first.get_json()["created"] is True
    assert first.get_json()["pick"]["pointsEarned"] is None

    second = open_pool.pick(dana, open_pool.prop_id, 2)
    assert second.status_code == 200
    assert second.get_json()["created"] is False
    assert second.get_json()["pick"]["id"] == first.get_json()["pick"]["id"]

    rows = Pick.query.filter_by(participant_id=dana.participant_id).all()
    assert len(rows) == 1
    assert rows[0].selected_option_index == 2


def test_index_past_the_end_is_invalid_option(open_pool):
    dana = open_pool.join("Dana")
    resp = open_pool.pick(dana, open_pool.prop_id, 3)
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "INVALID_OPTION"


def test_negative_index_is_validation_error(open_pool):
    dana = open_pool.join("Dana")
    resp = open_pool.pick(dana, open_pool.prop_id, -1)
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "VALIDATION_ERROR"


def test_non_integer_index_is_validation_error(open_pool):
    dana = open_pool.join("Dana")
    for value in ("1", 1.0, True, None):
        resp = open_pool.pick(dana, open_pool.prop_id, value)
        assert resp.status_code == 400
        assert resp.get_json()["code"] == "VALIDATION_ERROR"
        assert resp.get_json()["message"].startswith("selectedOptionIndex")


def test_unknown_prop(open_pool):
    dana = open_pool.join("Dana")
    resp = open_pool.pick(dana, "no-such-prop", 0)
    assert resp.status_code == 404
    assert resp.get_json()["code"] == "PROP_NOT_FOUND"


def test_prop_from_another_pool(app, open_pool):
    other = app.test_client()
    resp = other.post("/api/pools", json={"name": "Other", "captainName": "Someone"})
    other_code = resp.get_json()["pool"]["inviteCode"]
    resp = other.post(
        f"/api/pools/{other_code}/props",
        json={"questionText": "Elsewhere?", "options": ["Yes", "No"], "pointValue": 1},
    )
    foreign_prop = resp.get_json()["id"]

    dana = open_pool.join("Dana")
    resp = open_pool.pick(dana, foreign_prop, 0)
    assert resp.status_code == 404
    assert resp.get_json()["code"] == "PROP_NOT_FOUND"


def test_picks_closed_when_locked(open_pool):
    dana = open_pool.join("Dana")
    open_pool.pick(dana, open_pool.prop_id, 0)
    open_pool.set_status("locked")

    resp = open_pool.pick(dana, open_pool.prop_id, 1)
    assert resp.status_code == 403
    assert resp.get_json()["code"] == "POOL_LOCKED"
    assert Pick.query.filter_by(participant_id=dana.participant_id).one().selected_option_index == 0


def test_picks_allowed_when_locked_if_enabled(app, open_pool):
    app.config["ALLOW_PICKS_WHEN_LOCKED"] = True
    dana = open_pool.join("Dana")
    open_pool.set_status("locked")

    assert open_pool.pick(dana, open_pool.prop_id, 1).status_code == 201

    open_pool.resolve(open_pool.prop_id, 1)
    resp = open_pool.pick(dana, open_pool.prop_id, 0)
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "ALREADY_RESOLVED"


def test_picks_closed_in_draft(harness):
    harness.create()
    prop_id = harness.add_prop()
    resp = harness.pick(harness.captain, prop_id, 0)
    assert resp.status_code == 403
    assert resp.get_json()["code"] == "POOL_LOCKED"


def test_captain_can_pick(open_pool):
    resp = open_pool.pick(open_pool.captain, open_pool.prop_id, 1)
    assert resp.status_code == 201


def test_list_own_picks(open_pool):
    dana = open_pool.join("Dana")
    erin = open_pool.join("Erin")
    open_pool.pick(dana, open_pool.prop_id, 0)
    open_pool.pick(erin, open_pool.prop_id, 2)

    picks = dana.get(f"{open_pool.base}/picks").get_json()["picks"]
    assert [(p["propId"], p["selectedOptionIndex"]) for p in picks] == [
        (open_pool.prop_id, 0)
    ]


def test_array_values_rejected(open_pool):
    dana = open_pool.join("Dana")
    resp = dana.post(
        f"{open_pool.base}/picks",
        json={"propId": [open_pool.prop_id, "junk"], "selectedOptionIndex": 2},
    )
    assert resp.status_code == 400
    assert resp.get_json()["message"].startswith("propId")

    resp = dana.post(
        f"{open_pool.base}/picks",
        json={"propId": open_pool.prop_id, "selectedOptionIndex": [2, 9]},
    )
    assert resp.status_code == 400
    assert resp.get_json()["message"].startswith("selectedOptionIndex")
    assert Pick.query.count() == 0


def test_player_picks_hidden_while_open(open_pool, client):
    dana = open_pool.join("Dana")
    open_pool.pick(dana, open_pool.prop_id, 0)

    resp = client.get(f"{open_pool.base}/players/{dana.participant_id}/picks")
    assert resp.status_code == 403
    assert resp.get_json()["code"] == "POOL_NOT_LOCKED"


def test_player_picks_visible_once_locked(harness, client):
    harness.create()
    first = harness.add_prop(question="First?", options=["A", "B"])
    second = harness.add_prop(question="Second?", options=["A", "B"])
    third = harness.add_prop(question="Third?", options=["A", "B"])
    harness.set_status("open")
    dana = harness.join("Dana")
    harness.pick(dana, first, 0)
    harness.pick(dana, second, 1)
    harness.set_status("locked")
    harness.resolve(first, 0)

    resp = client.get(f"{harness.base}/players/{dana.participant_id}/picks")
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["participant"]["name"] == "Dana"
    assert data["participant"]["totalPoints"] == 10
    assert "secret" not in data["participant"]
    assert [(p["id"], p["selectedOptionIndex"], p["pointsEarned"]) for p in data["props"]] == [
        (first, 0, 10),
        (second, 1, None),
        (third, None, None),
    ]
    assert data["stats"] == {"correct": 1, "wrong": 0, "pending": 1, "unanswered": 1}


def test_player_picks_unknown_or_foreign_player(app, abc_pool, client):
    resp = client.get(f"{abc_pool.base}/players/nobody/picks")
    assert resp.status_code == 404
    assert resp.get_json()["code"] == "PLAYER_NOT_FOUND"

    resp = app.test_client().post("/api/pools", json={"name": "Other", "captainName": "Someone"})
    foreign_id = Participant.query.filter_by(pool_id=resp.get_json()["pool"]["id"]).one().id

    resp = client.get(f"{abc_pool.base}/players/{foreign_id}/picks")
    assert resp.status_code == 404
    assert resp.get_json()["code"] == "PLAYER_NOT_FOUND"


def test_prop_pick_count_for_captain(open_pool):
    dana = open_pool.join("Dana")
    erin = open_pool.join("Erin")
    url = f"{open_pool.base}/props/{open_pool.prop_id}/picks-count"
    assert open_pool.captain.get(url).get_json() == {"count": 0}

    open_pool.pick(dana, open_pool.prop_id, 0)
    open_pool.pick(erin, open_pool.prop_id, 1)
    open_pool.pick(erin, open_pool.prop_id, 2)
    assert open_pool.captain.get(url).get_json() == {"count": 2}

    assert dana.get(url).status_code == 401

    resp = open_pool.captain.get(f"{open_pool.base}/props/missing/picks-count")
    assert resp.status_code == 404
    assert resp.get_json()["code"] == "PROP_NOT_FOUND"
