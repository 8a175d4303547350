"""HTTP API under /games/countdown."""

import pytest

from power_countdown import create_app
from power_countdown.games.countdown.services.puzzle_source import LocalPuzzleSource

API = "/games/countdown/api"


def hand_id(state, value):
    return next(c["id"] for c in state["hand"] if c["value"] == value)


def post(client, path, **body):
    return client.post(f"{API}/{path}", json=body)


@pytest.fixture
def game(client):
    """A started target-80 game, returns the state payload."""
    r = post(client, "new", difficulty="EASY")
    assert r.status_code == 200
    return r.get_json()["state"]


def test_health(client):
    assert client.get("/api/health").get_json() == {"status": "healthy"}
    assert client.get("/api/games").get_json() == {"games": ["countdown"]}


def test_state_does_not_start_a_game(app, client, source):
    r = client.get(f"{API}/state")
    data = r.get_json()
    assert data["ok"] is True
    assert data["state"]["started"] is False
    assert data["state"]["hand"] == []
    assert "session_id" in r.headers.get("Set-Cookie", "")
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert source.puzzle_calls == []
    assert len(app.extensions["countdown.sessions"]) == 0


def test_new_then_state_shows_the_game(client, source):
    post(client, "new")
    data = client.get(f"{API}/state").get_json()
    assert data["state"]["started"] is True
    assert data["state"]["target"] == 80
    assert [c["label"] for c in data["state"]["hand"]] == ["2", "5", "16", "243", "343", "512"]
    assert len(source.puzzle_calls) == 1


def test_new_puzzle_uses_difficulty(client, source, game):
    assert source.puzzle_calls == ["EASY"]
    assert game["difficulty"] == "EASY"
    assert game["can_undo"] is False
    assert game["solved"] is False


def test_full_solve(client, game):
    r = post(client, "stage", card_id=hand_id(game, 16), source="hand", slot="slotA")
    assert r.get_json()["changed"] is True
    r = post(client, "stage", card_id=hand_id(game, 5), source="hand", slot="slotB")
    state = r.get_json()["state"]
    assert state["slot_a"]["value"] == 16 and state["slot_b"]["value"] == 5

    r = post(client, "combine", operation="MULTIPLY")
    state = r.get_json()["state"]
    assert state["solved"] is True
    assert state["hand"][-1]["label"] == "80"

    # solved: moves and hints are inert
    r = post(client, "stage", card_id=hand_id(state, 2), source="hand", slot="slotA")
    assert r.get_json()["changed"] is False
    r = post(client, "hint")
    assert r.get_json()["changed"] is False

    r = post(client, "undo")
    state = r.get_json()["state"]
    assert r.get_json()["changed"] is True
    assert state["solved"] is False
    assert sorted(c["value"] for c in state["hand"]) == [2, 5, 16, 243, 343, 512]


def test_stale_drag_is_a_no_op(client, game):
    cid = hand_id(game, 16)
    post(client, "stage", card_id=cid, source="hand", slot="slotA")
    r = post(client, "stage", card_id=cid, source="hand", slot="slotB")
    data = r.get_json()
    assert data["changed"] is False
    assert data["state"]["slot_b"] is None


def test_return_to_hand(client, game):
    cid = hand_id(game, 243)
    post(client, "stage", card_id=cid, source="hand", slot="a")
    r = post(client, "return", card_id=cid, source="slotA")
    state = r.get_json()["state"]
    assert state["slot_a"] is None
    assert state["hand"][-1]["id"] == cid


def test_rejected_combine(client, game):
    post(client, "stage", card_id=hand_id(game, 512), source="hand", slot="slotA")
    post(client, "stage", card_id=hand_id(game, 343), source="hand", slot="slotB")
    r = post(client, "combine", operation="POWER")
    data = r.get_json()
    assert data["changed"] is False
    assert data["state"]["can_undo"] is False
    assert data["state"]["slot_a"]["value"] == 512


def test_hint(client, game, source):
    r = post(client, "hint")
    data = r.get_json()
    assert data["hint"] == source.hint
    assert data["state"]["hint"] == source.hint
    assert source.hint_calls[0][0] == 80


@pytest.mark.parametrize("path,body", [
    ("stage", {"source": "hand", "slot": "slotA"}),
    ("stage", {"card_id": "x", "source": "table", "slot": "slotA"}),
    ("stage", {"card_id": "x", "source": "hand", "slot": "hand"}),
    ("return", {"source": "slotA"}),
    ("combine", {"operation": "DIVIDE"}),
])
def test_bad_requests(client, game, path, body):
    r = post(client, path, **body)
    assert r.status_code == 400
    assert r.get_json()["ok"] is False


def test_client_id_isolates_tabs(app, client, source):
    post(client, "new")
    client.post(f"{API}/new?client_id=tab2", json={})
    assert len(source.puzzle_calls) == 2
    assert len(app.extensions["countdown.sessions"]) == 2


def test_stats(client, game):
    post(client, "stage", card_id=hand_id(game, 16), source="hand", slot="slotA")
    post(client, "stage", card_id=hand_id(game, 5), source="hand", slot="slotB")
    post(client, "combine", operation="multiply")
    stats = client.get(f"{API}/stats").get_json()["stats"]
    assert stats["totals"]["solved"] == 1
    assert stats["totals"]["played"] == 1


def test_default_source_without_key():
    app = create_app({"TESTING": True, "RATELIMIT_ENABLED": False, "GEMINI_API_KEY": None,
                      "PUZZLE_SOURCE": ""})
    assert isinstance(app.extensions["countdown.source"], LocalPuzzleSource)


def test_cli_puzzle(app):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["countdown-puzzle", "--difficulty", "hard"])
    assert result.exit_code == 0
    assert "HARD: target=" in result.output
    assert "numbers=[2, 5, 16, 243, 343, 512]" in result.output


def test_cli_hint(app):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["countdown-hint", "80", "16", "5"])
    assert result.exit_code == 0
    assert result.output.strip()


def test_return_without_source_finds_the_slot(client, game):
    cid = hand_id(game, 5)
    post(client, "stage", card_id=cid, source="hand", slot="slotB")
    r = post(client, "return", card_id=cid)
    data = r.get_json()
    assert data["changed"] is True
    assert data["state"]["slot_b"] is None
    assert data["state"]["hand"][-1]["id"] == cid


def test_exit_forgets_the_session(app, client, game):
    r = post(client, "exit")
    data = r.get_json()
    assert data["ok"] is True
    assert data["stats"]["totals"]["played"] == 1
    assert len(app.extensions["countdown.sessions"]) == 0
    assert client.get(f"{API}/state").get_json()["state"]["started"] is False


def test_exit_without_a_session(client):
    r = post(client, "exit")
    assert r.status_code == 200
    assert r.get_json()["stats"]["totals"]["played"] == 0


def test_registry_is_capped(source):
    app = create_app({"TESTING": True, "RATELIMIT_ENABLED": False, "PUZZLE_SOURCE": "local",
                      "COUNTDOWN_MAX_SESSIONS": 2})
    app.extensions["countdown.source"] = source
    client = app.test_client()
    for tab in ("t1", "t2", "t3"):
        client.post(f"{API}/new?client_id={tab}", json={})
    assert len(app.extensions["countdown.sessions"]) == 2
    # the oldest tab was evicted
    assert client.get(f"{API}/state?client_id=t1").get_json()["state"]["started"] is False
    assert client.get(f"{API}/state?client_id=t3").get_json()["state"]["started"] is True


def test_puzzle_requests_are_rate_limited(source):
    app = create_app({"TESTING": True, "RATELIMIT_ENABLED": True, "PUZZLE_SOURCE": "local",
                      "COUNTDOWN_AI_LIMIT": "2 per minute"})
    app.extensions["countdown.source"] = source

    # fresh visitors reading state neither start games nor call the provider
    for _ in range(20):
        assert app.test_client().get(f"{API}/state").status_code == 200
    assert source.puzzle_calls == []
    assert len(app.extensions["countdown.sessions"]) == 0

    client = app.test_client()
    assert post(client, "new").status_code == 200
    assert post(client, "new").status_code == 200
    assert post(client, "new").status_code == 429
    assert len(source.puzzle_calls) == 2
