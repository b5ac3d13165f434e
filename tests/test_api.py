"""
Tests for the HTTP operator surface
"""
import json
import time

import pytest
import yaml
from fastapi.testclient import TestClient

from jeopardy import state
from jeopardy.main import app

from conftest import make_board


@pytest.fixture()
def client(tmp_path, monkeypatch):
    board_path = tmp_path / "board.json"
    board_path.write_text(json.dumps(make_board([[200, 400], [200, 400]])), encoding="utf-8")
    config_path = tmp_path / "game.yaml"
    config_path.write_text(yaml.safe_dump({
        "board_path": str(board_path),
        "final_offer_delay_ms": 50,
        "cue_history_size": 20,
        "log_level": "DEBUG",
    }), encoding="utf-8")
    monkeypatch.setenv("JEOPARDY_CONFIG", str(config_path))

    with TestClient(app) as c:
        yield c


def play_clue(client, ci, qi, outcome="correct"):
    """Select, confirm if it is a daily double, reveal and judge"""
    data = client.post("/game/select", json={"category_index": ci, "clue_index": qi}).json()
    assert data["applied"], data["reason"]
    if data["state"]["phase"] == "DailyDoubleIntro":
        assert client.post("/game/daily-double/confirm").json()["applied"]
    assert client.post("/game/reveal").json()["applied"]
    return client.post("/game/judge", json={"outcome": outcome}).json()


def wait_for_phase(client, phase, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        current = client.get("/game/state").json()["phase"]
        if current == phase:
            return True
        time.sleep(0.02)
    return False


def test_health(client):
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["board_loaded"] is True
    assert data["board_title"] == "Test Board"
    assert data["phase"] == "TeamSetup"
    assert data["load_error"] is None


def test_start_game(client):
    data = client.post("/game/start", json={"team_count": 3}).json()
    assert data["applied"]
    assert data["state"]["phase"] == "Board"
    assert [t["id"] for t in data["state"]["teams"]] == ["team-1", "team-2", "team-3"]

    again = client.post("/game/start", json={}).json()
    assert not again["applied"]
    assert again["reason"] == "game already started"


def test_start_game_default_and_bounds(client):
    data = client.post("/game/start", json={"team_count": 9}).json()
    assert not data["applied"]
    assert data["state"]["phase"] == "TeamSetup"

    data = client.post("/game/start", json={}).json()
    assert data["applied"]
    assert len(data["state"]["teams"]) == state.SETTINGS.default_team_count


def test_play_clue_scores_active_team(client):
    client.post("/game/start", json={"team_count": 2})
    data = play_clue(client, 0, 0)
    assert data["applied"]
    snapshot = data["state"]
    assert snapshot["phase"] == "Board"
    assert snapshot["teams"][0]["score"] in (200, 400)
    assert snapshot["answered_count"] == 1
    assert snapshot["categories"][0]["clues"][0]["answered"] is True

    # answered cells cannot be reopened
    data = client.post("/game/select", json={"category_index": 0, "clue_index": 0}).json()
    assert not data["applied"]


def test_incorrect_passes_turn(client):
    client.post("/game/start", json={"team_count": 2})
    data = play_clue(client, 0, 0, outcome="incorrect")
    assert data["state"]["active_team_id"] == "team-2"
    assert data["state"]["teams"][0]["score"] == 0


def test_judge_before_reveal_ignored(client):
    client.post("/game/start", json={"team_count": 2})
    client.post("/game/select", json={"category_index": 1, "clue_index": 0})
    client.post("/game/daily-double/confirm")
    data = client.post("/game/judge", json={"outcome": "correct"}).json()
    assert not data["applied"]
    assert data["reason"] == "answer not revealed yet"


def test_bad_payloads(client):
    client.post("/game/start", json={"team_count": 2})
    assert client.post("/game/judge", json={"outcome": "maybe"}).status_code == 422
    assert client.post("/game/select", json={"category_index": 0}).status_code == 422
    data = client.post("/game/select", json={"category_index": 7, "clue_index": 0}).json()
    assert not data["applied"]


def test_full_game_to_standings(client):
    client.post("/game/start", json={"team_count": 2})
    data = client.post("/admin/fast-forward").json()
    assert data["applied"]
    assert data["state"]["answered_count"] == 3

    play_clue(client, 1, 1)
    assert wait_for_phase(client, "FinalIntro")

    data = client.post("/game/final/open").json()
    assert data["applied"]
    assert data["state"]["open_clue"]["is_final"] is True
    assert "answer" not in data["state"]["open_clue"]

    before = {t["id"]: t["score"] for t in data["state"]["teams"]}
    assert client.post("/game/wager", json={"team_id": "team-1", "amount": 300}).json()["applied"]
    assert client.post("/game/wager", json={"team_id": "team-2", "amount": 50}).json()["applied"]
    data = client.post("/game/reveal").json()
    assert data["state"]["open_clue"]["answer"] == "final answer"

    client.post("/game/final/judge", json={"team_id": "team-1", "outcome": "correct"})
    client.post("/game/final/judge", json={"team_id": "team-2", "outcome": "incorrect"})
    data = client.post("/game/final/finish").json()
    assert data["applied"]
    assert data["state"]["phase"] == "FinalStandings"

    standings = client.get("/game/standings").json()
    assert standings["phase"] == "FinalStandings"
    scores = {row["team_id"]: row["score"] for row in standings["standings"]}
    assert scores["team-1"] == before["team-1"] + 300
    assert scores["team-2"] == max(0, before["team-2"] - 50)

    events = [cue["event"] for cue in client.get("/game/cues").json()["cues"]]
    assert "finalIntro" in events
    assert events[-1] == "gameEnd"


def test_markers_and_reset(client):
    client.post("/game/start", json={"team_count": 2})
    data = client.post("/admin/toggle-markers").json()
    cells = [cell for category in data["state"]["categories"] for cell in category["clues"]]
    assert sum(cell["daily_double"] for cell in cells) == 2

    data = client.post("/admin/reset").json()
    assert data["applied"]
    assert data["state"]["phase"] == "TeamSetup"
    assert data["state"]["teams"] == []
    assert data["state"]["title"] == "Test Board"


def test_cues_and_sound(client):
    client.post("/game/start", json={"team_count": 2})
    play_clue(client, 0, 0)
    cues = client.get("/game/cues").json()
    assert cues["muted"] is False
    events = [cue["event"] for cue in cues["cues"]]
    assert "reveal" in events and "correct" in events
    last_seq = cues["cues"][-1]["seq"]

    assert client.post("/game/sound", json={"volume": 5}).json()["volume"] == 1.0
    assert client.post("/game/sound", json={"muted": True}).json()["muted"] is True
    play_clue(client, 0, 1)
    assert client.get("/game/cues", params={"since": last_seq}).json()["cues"] == []


def test_load_board_errors(client, tmp_path):
    response = client.post("/admin/load-board", json={"path": str(tmp_path / "missing.json")})
    assert response.status_code == 404
    assert client.get("/").json()["load_error"] is not None

    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"title": "x", "categories": []}), encoding="utf-8")
    assert client.post("/admin/load-board", json={"path": str(bad)}).status_code == 422


def test_load_board_replaces_board(client, tmp_path):
    other = tmp_path / "other.json"
    other.write_text(json.dumps(make_board([[100]], title="Other Board")), encoding="utf-8")
    client.post("/game/start", json={"team_count": 2})

    data = client.post("/admin/load-board", json={"path": str(other)}).json()
    assert data["applied"]
    assert data["state"]["title"] == "Other Board"
    assert data["state"]["phase"] == "TeamSetup"
    assert client.get("/").json()["load_error"] is None


def test_missing_startup_board(tmp_path, monkeypatch):
    config_path = tmp_path / "game.yaml"
    config_path.write_text(yaml.safe_dump({"board_path": str(tmp_path / "nope.json")}), encoding="utf-8")
    monkeypatch.setenv("JEOPARDY_CONFIG", str(config_path))

    with TestClient(app) as c:
        health = c.get("/").json()
        assert health["board_loaded"] is False
        assert "not found" in health["load_error"]
        data = c.post("/game/start", json={"team_count": 2}).json()
        assert not data["applied"]
        assert data["reason"] == "no board loaded"


def test_load_board_undecodable_then_recover(client, tmp_path):
    latin = tmp_path / "latin.json"
    latin.write_bytes(b'{"title": "\xff\xfe"}')
    assert client.post("/admin/load-board", json={"path": str(latin)}).status_code == 400

    other = tmp_path / "other.json"
    other.write_text(json.dumps(make_board([[100]], title="Other Board")), encoding="utf-8")
    data = client.post("/admin/load-board", json={"path": str(other)}).json()
    assert data["applied"]
    assert data["state"]["title"] == "Other Board"
