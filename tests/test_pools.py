import pytest

from propspals.models import Participant, Pool


def test_create_pool(harness):
    data = harness.create(description="Big game", buyInAmount="$5")
    pool = data["pool"]
    assert pool["name"] == "Super Bowl Props"
    assert pool["captainName"] == "Captain"
    assert pool["buyInAmount"] == "$5"
    assert len(pool["inviteCode"]) == 6
    assert pool["inviteCode"].isupper() or pool["inviteCode"].isdigit()
    assert data["secret"]

    captain = Participant.query.filter_by(pool_id=pool["id"]).one()
    assert captain.name == "Captain"
    assert captain.is_captain


def test_create_pool_open(harness):
    data = harness.create(status="open")
    assert data["pool"]["status"] == "open"


def test_create_pool_rejects_other_initial_status(client):
    resp = client.post(
        "/api/pools", json={"name": "P", "captainName": "C", "status": "locked"}
    )
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "VALIDATION_ERROR"


def test_custom_invite_code(harness, client):
    data = harness.create(captainName="John Smith", inviteCode="SuperBowl-2026")
    assert data["pool"]["inviteCode"] == "john-smith-superbowl-2026"

    resp = client.post(
        "/api/pools",
        json={"name": "Again", "captainName": "John  Smith!", "inviteCode": "superbowl-2026"},
    )
    assert resp.status_code == 409
    assert resp.get_json()["code"] == "CODE_TAKEN"
    assert Pool.query.count() == 1


@pytest.mark.parametrize(
    "payload,field",
    [
        ({"captainName": "C"}, "name"),
        ({"name": "   ", "captainName": "C"}, "name"),
        ({"name": "x" * 101, "captainName": "C"}, "name"),
        ({"name": "P"}, "captainName"),
        ({"name": "P", "captainName": "c" * 51}, "captainName"),
        ({"name": "P", "captainName": "C", "description": "d" * 501}, "description"),
        ({"name": "P", "captainName": "C", "buyInAmount": "b" * 21}, "buyInAmount"),
        ({"name": "P", "captainName": "C", "inviteCode": "ab"}, "inviteCode"),
        ({"name": "P", "captainName": "C", "inviteCode": "no spaces"}, "inviteCode"),
        ({"name": 42, "captainName": "C"}, "name"),
    ],
)
def test_create_pool_validation(client, payload, field):
    resp = client.post("/api/pools", json=payload)
    assert resp.status_code == 400
    body = resp.get_json()
    assert body["code"] == "VALIDATION_ERROR"
    assert body["message"].startswith(field)


def test_non_object_body_rejected(client):
    resp = client.post("/api/pools", json=["not", "an", "object"])
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "VALIDATION_ERROR"


def test_join_pool(open_pool):
    dana = open_pool.join("Dana")
    resp = dana.get(open_pool.base)
    data = resp.get_json()
    assert data["participant"]["name"] == "Dana"
    assert data["isCaptain"] is False
    assert data["participantCount"] == 2


def test_join_name_taken(open_pool):
    open_pool.join("Dana")
    resp = open_pool.app.test_client().post(f"{open_pool.base}/join", json={"name": "Dana"})
    assert resp.status_code == 409
    assert resp.get_json()["code"] == "NAME_TAKEN"
    assert Participant.query.filter_by(name="Dana").count() == 1


def test_join_with_captain_name_taken(open_pool):
    resp = open_pool.app.test_client().post(
        f"{open_pool.base}/join", json={"name": "Captain"}
    )
    assert resp.status_code == 409
    assert resp.get_json()["code"] == "NAME_TAKEN"


def test_names_are_case_sensitive(open_pool):
    open_pool.join("Dana")
    open_pool.join("dana")
    assert Participant.query.filter(Participant.name.in_(["Dana", "dana"])).count() == 2


def test_join_validation(open_pool, client):
    resp = client.post(f"{open_pool.base}/join", json={"name": "n" * 51})
    assert resp.status_code == 400
    resp = client.post(f"{open_pool.base}/join", json={})
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "VALIDATION_ERROR"


def test_prop_validation(harness):
    harness.create()
    url = f"{harness.base}/props"
    bad_payloads = [
        {"options": ["A", "B"], "pointValue": 1},
        {"questionText": "q" * 501, "options": ["A", "B"], "pointValue": 1},
        {"questionText": "Q?", "options": ["A"], "pointValue": 1},
        {"questionText": "Q?", "options": [str(i) for i in range(11)], "pointValue": 1},
        {"questionText": "Q?", "options": ["A", ""], "pointValue": 1},
        {"questionText": "Q?", "options": ["A", "o" * 201], "pointValue": 1},
        {"questionText": "Q?", "options": ["A", 2], "pointValue": 1},
        {"questionText": "Q?", "options": ["A", "B"], "pointValue": 0},
        {"questionText": "Q?", "options": ["A", "B"], "pointValue": 1001},
        {"questionText": "Q?", "options": ["A", "B"], "pointValue": "5"},
        {"questionText": "Q?", "options": ["A", "B"], "pointValue": 1, "category": "c" * 51},
    ]
    for payload in bad_payloads:
        resp = harness.captain.post(url, json=payload)
        assert resp.status_code == 400, payload
        assert resp.get_json()["code"] == "VALIDATION_ERROR", payload

    assert harness.captain.get(url).get_json()["props"] == []


def test_prop_edit_reorder_and_delete(harness):
    harness.create()
    first = harness.add_prop(question="First?")
    second = harness.add_prop(question="Second?")
    third = harness.add_prop(question="Third?")

    resp = harness.captain.patch(
        f"{harness.base}/props/{second}",
        json={"questionText": "Second, edited?", "options": ["Yes", "No"], "category": "Game"},
    )
    assert resp.status_code == 200
    assert resp.get_json()["options"] == ["Yes", "No"]
    assert resp.get_json()["category"] == "Game"
    assert resp.get_json()["pointValue"] == 10

    resp = harness.captain.post(
        f"{harness.base}/props/reorder", json={"propIds": [third, first, second]}
    )
    assert resp.status_code == 200
    assert [p["id"] for p in resp.get_json()["props"]] == [third, first, second]

    resp = harness.captain.delete(f"{harness.base}/props/{first}")
    assert resp.status_code == 200
    listed = harness.captain.get(f"{harness.base}/props").get_json()["props"]
    assert [p["id"] for p in listed] == [third, second]


def test_reorder_rejects_foreign_ids(harness):
    harness.create()
    first = harness.add_prop()
    resp = harness.captain.post(
        f"{harness.base}/props/reorder", json={"propIds": [first, "elsewhere"]}
    )
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "VALIDATION_ERROR"


def test_shrinking_options_below_existing_picks_rejected(open_pool):
    dana = open_pool.join("Dana")
    open_pool.pick(dana, open_pool.prop_id, 2)
    resp = open_pool.captain.patch(
        f"{open_pool.base}/props/{open_pool.prop_id}", json={"options": ["A", "B"]}
    )
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "VALIDATION_ERROR"


def test_leaderboard_is_public(open_pool, client):
    resp = client.get(f"{open_pool.base}/leaderboard")
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["poolName"] == "Super Bowl Props"
    assert data["poolStatus"] == "open"
    assert data["hasResolvedProps"] is False
    assert [row["name"] for row in data["leaderboard"]] == ["Captain"]


def test_leaderboard_hides_removed_players(open_pool):
    dana = open_pool.join("Dana")
    open_pool.pick(dana, open_pool.prop_id, 0)
    open_pool.captain.delete(f"{open_pool.base}/players/{dana.participant_id}")

    board = open_pool.leaderboard()
    assert [row["name"] for row in board["leaderboard"]] == ["Captain"]
    assert board["perPropStats"][0]["stats"]["totalPicks"] == 0


def test_unknown_route_is_json(client):
    resp = client.get("/api/nothing-here")
    assert resp.status_code == 404
    assert resp.get_json()["code"] == "NOT_FOUND"


def test_missing_field_error_names_json_key(client):
    resp = client.post("/api/pools", json={"name": "P"})
    assert resp.get_json()["message"] == "captainName: Captain name is required"


def test_array_for_string_field_rejected(open_pool, client):
    resp = client.post(f"{open_pool.base}/join", json={"name": ["Alice", "Mallory"]})
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "VALIDATION_ERROR"
    assert resp.get_json()["message"].startswith("name")
    assert Participant.query.filter_by(name="Alice").count() == 0

    resp = client.post(f"{open_pool.base}/join", json={"name": ["Alice"]})
    assert resp.status_code == 400


def test_empty_array_for_optional_field_rejected(open_pool):
    resp = open_pool.captain.patch(open_pool.base, json={"description": []})
    assert resp.status_code == 400
    assert resp.get_json()["message"].startswith("description")
