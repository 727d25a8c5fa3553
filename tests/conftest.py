import pytest

from propspals import create_app, db


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


class PoolHarness:
    """
    Drives a pool through the HTTP API.

    Every identity gets its own test client, so each one carries its own
    session cookie the way separate browsers would.
    """

    def __init__(self, app):
        self.app = app
        self.captain = app.test_client()
        self.code = None
        self.pool_id = None
        self.captain_secret = None

    @property
    def base(self):
        return f"/api/pools/{self.code}"

    def create(self, name="Super Bowl Props", captain_name="Captain", **extra):
        payload = {"name": name, "captainName": captain_name}
        payload.update(extra)
        resp = self.captain.post("/api/pools", json=payload)
        assert resp.status_code == 201, resp.get_json()
        data = resp.get_json()
        self.code = data["pool"]["inviteCode"]
        self.pool_id = data["pool"]["id"]
        self.captain_secret = data["secret"]
        return data

    def add_prop(self, question="Who wins?", options=("A", "B", "C"), point_value=10, **extra):
        payload = {"questionText": question, "options": list(options), "pointValue": point_value}
        payload.update(extra)
        resp = self.captain.post(f"{self.base}/props", json=payload)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()["id"]

    def set_status(self, status):
        return self.captain.patch(self.base, json={"status": status})

    def join(self, name):
        player = self.app.test_client()
        resp = player.post(f"{self.base}/join", json={"name": name})
        assert resp.status_code == 201, resp.get_json()
        player.participant_id = resp.get_json()["participant"]["id"]
        player.secret = resp.get_json()["secret"]
        return player

    def pick(self, player, prop_id, index):
        return player.post(
            f"{self.base}/picks", json={"propId": prop_id, "selectedOptionIndex": index}
        )

    def resolve(self, prop_id, index):
        return self.captain.post(
            f"{self.base}/props/{prop_id}/resolve", json={"correctOptionIndex": index}
        )

    def void(self, prop_id):
        return self.captain.post(f"{self.base}/props/{prop_id}/void")

    def leaderboard(self):
        resp = self.captain.get(f"{self.base}/leaderboard")
        assert resp.status_code == 200, resp.get_json()
        return resp.get_json()

    def totals(self):
        return {
            entry["name"]: entry["totalPoints"]
            for entry in self.leaderboard()["leaderboard"]
        }


@pytest.fixture
def harness(app):
    return PoolHarness(app)


@pytest.fixture
def open_pool(harness):
    """A pool with one three-option prop, open for picks"""
    harness.create()
    harness.prop_id = harness.add_prop()
    assert harness.set_status("open").status_code == 200
    return harness


@pytest.fixture
def abc_pool(open_pool):
    """Alice picks A, Bob and Carol pick B; the pool is locked"""
    h = open_pool
    h.alice = h.join("Alice")
    h.bob = h.join("Bob")
    h.carol = h.join("Carol")
    assert h.pick(h.alice, h.prop_id, 0).status_code == 201
    assert h.pick(h.bob, h.prop_id, 1).status_code == 201
    assert h.pick(h.carol, h.prop_id, 1).status_code == 201
    assert h.set_status("locked").status_code == 200
    return h
