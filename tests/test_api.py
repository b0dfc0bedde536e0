"""
Testing API via TestClient
- Trick: temporarily replace fetch_code so free-play secrets are predictable.
- Tool: pytest's "monkeypatch" fixture does that for just one test at a time.
"""

import asyncio

import codebreaker.main as app_main
from codebreaker.repository import ProgressRepository
from codebreaker.levels import get_level, session_for_level
from codebreaker.types import PegColor


def make_fake_fetch_code():
    """
    Returns a function that ignores randomness and gives:
      - length 3 -> red, blue, green            (tutorial)
      - length 4 -> red, red, green, blue       (beginner..advanced)
      - otherwise red repeated
    """
    def fake_fetch_code(cfg):
        if cfg.code_length == 3:
            return (PegColor.RED, PegColor.BLUE, PegColor.GREEN)
        if cfg.code_length == 4 and cfg.allow_duplicates:
            return (PegColor.RED, PegColor.RED, PegColor.GREEN, PegColor.BLUE)
        return tuple(cfg.colors[: cfg.code_length])
    return fake_fetch_code


def _enter(client, game_id, colors):
    for i, color in enumerate(colors):
        r = client.put(f"/games/{game_id}/slots/{i}", json={"color": color})
        assert r.status_code == 200


def _guess(client, game_id, colors):
    _enter(client, game_id, colors)
    return client.post(f"/games/{game_id}/guess")


def test_start_tutorial_and_win_with_fixed_secret(client, monkeypatch):
    monkeypatch.setattr(app_main, "fetch_code", make_fake_fetch_code())

    r = client.post("/games", json={"mode": "free", "tier": "tutorial"})
    assert r.status_code == 200
    game = r.json()
    gid = game["game_id"]
    assert game["config"]["code_length"] == 3
    assert game["secret"] is None

    # Incomplete guess -> 400
    client.put(f"/games/{gid}/slots/0", json={"color": "red"})
    assert client.post(f"/games/{gid}/guess").status_code == 400

    # Inactive color / bad slot -> 400
    assert client.put(f"/games/{gid}/slots/0", json={"color": "cyan"}).status_code == 400
    assert client.put(f"/games/{gid}/slots/7", json={"color": "red"}).status_code == 400

    r = _guess(client, gid, ["blue", "red", "green"])
    assert r.status_code == 200
    body = r.json()
    assert body["feedback"]["black"] == 1
    assert body["feedback"]["white"] == 2
    assert body["game"]["state"]["status"] == "playing"

    r = _guess(client, gid, ["red", "blue", "green"])
    final = r.json()
    assert final["game"]["state"] == {"status": "won", "attempts": 2, "stars": 3}
    assert final["game"]["secret"] == ["red", "blue", "green"]
    assert "No more guesses" in final["note"]

    # Finished games refuse more input
    assert client.post(f"/games/{gid}/guess").status_code == 409

    stats = client.get("/stats").json()
    assert stats["games_started"] == 1
    assert stats["games_won"] == 1


def test_loss_bonus_and_win(client, monkeypatch):
    monkeypatch.setattr(app_main, "fetch_code", make_fake_fetch_code())
    gid = client.post("/games", json={"tier": "advanced"}).json()["game_id"]

    # Bonus is refused while still playing
    assert client.post(f"/games/{gid}/bonus").status_code == 409

    for _ in range(7):
        r = _guess(client, gid, ["yellow"] * 4)
    assert r.json()["game"]["state"]["status"] == "lost"

    r = client.post(f"/games/{gid}/bonus")
    assert r.status_code == 200
    assert r.json()["max_attempts"] == 8
    assert r.json()["secret"] is None

    r = _guess(client, gid, ["red", "red", "green", "blue"])
    assert r.json()["game"]["state"]["status"] == "won"
    assert client.post(f"/games/{gid}/bonus").status_code == 409

    stats = client.get("/stats").json()
    assert stats["games_lost"] == 1
    assert stats["games_won"] == 1
    assert stats["bonus_lives_used"] == 1


def test_hint_and_analysis(client, monkeypatch):
    monkeypatch.setattr(app_main, "fetch_code", make_fake_fetch_code())
    gid = client.post("/games", json={"tier": "tutorial"}).json()["game_id"]

    # Analysis only after the game is over
    assert client.get(f"/games/{gid}/analysis").status_code == 409

    r = client.get(f"/games/{gid}/hint")
    assert r.status_code == 200
    hint = r.json()
    assert hint["remaining_possibilities"] == 24
    assert hint["hints_used"] == 1
    assert len(hint["suggested_guess"]) == 3

    # Follow hints to the end
    for _ in range(10):
        state = client.get(f"/games/{gid}").json()["state"]["status"]
        if state != "playing":
            break
        suggestion = client.get(f"/games/{gid}/hint").json()["suggested_guess"]
        _guess(client, gid, suggestion)

    game = client.get(f"/games/{gid}").json()
    assert game["state"]["status"] == "won"
    assert client.get(f"/games/{gid}/hint").status_code == 409

    r = client.get(f"/games/{gid}/analysis")
    assert r.status_code == 200
    analysis = r.json()
    assert len(analysis) == len(game["history"])
    assert all(a["rating"] == "optimal" for a in analysis)


def test_level_mode_is_locked_until_previous_is_won(client):
    assert client.post("/games", json={"mode": "level", "level_id": 1}).status_code == 403
    assert client.post("/games", json={"mode": "level", "level_id": 999}).status_code == 404

    r = client.post("/games", json={"mode": "level", "level_id": 0})
    assert r.status_code == 200
    gid = r.json()["game_id"]

    secret = [c.value for c in session_for_level(0).secret_code]
    r = _guess(client, gid, secret)
    assert r.json()["game"]["state"]["status"] == "won"

    levels = client.get("/levels", params={"tier": "tutorial"}).json()
    assert levels[0]["stars"] == 3
    assert levels[1]["is_unlocked"] is True
    assert client.post("/games", json={"mode": "level", "level_id": 1}).status_code == 200
    assert get_level(1).tier.name == "tutorial"


def test_daily_game(client):
    r = client.post("/games", json={"mode": "daily"})
    assert r.status_code == 200
    assert r.json()["tier"] == "intermediate"
    assert client.get("/daily").json()["completed"] is False


def test_pause_restart_and_slots(client, monkeypatch):
    monkeypatch.setattr(app_main, "fetch_code", make_fake_fetch_code())
    gid = client.post("/games", json={"tier": "beginner"}).json()["game_id"]

    _enter(client, gid, ["red", "blue"])
    r = client.delete(f"/games/{gid}/slots/1")
    assert r.json()["current_guess"] == ["red", None, None, None]
    r = client.delete(f"/games/{gid}/slots")
    assert r.json()["current_guess"] == [None] * 4

    assert client.post(f"/games/{gid}/pause").status_code == 200
    assert client.put(f"/games/{gid}/slots/0", json={"color": "red"}).status_code == 409
    assert client.post(f"/games/{gid}/pause").status_code == 409
    assert client.post(f"/games/{gid}/resume").status_code == 200

    _guess(client, gid, ["green", "yellow", "purple", "blue"])
    r = client.post(f"/games/{gid}/restart")
    assert r.status_code == 200
    assert r.json()["history"] == []
    assert r.json()["attempts_used"] == 0


def test_unknown_game_is_404(client):
    assert client.get("/games/nope").status_code == 404
    assert client.post("/games/nope/guess").status_code == 404
    assert client.get("/games/nope/hint").status_code == 404


def test_abandoned_game_is_gone(client):
    gid = client.post("/games", json={"tier": "beginner"}).json()["game_id"]
    assert client.delete(f"/games/{gid}").status_code == 200
    assert client.get(f"/games/{gid}").status_code == 404
    assert client.delete(f"/games/{gid}").status_code == 404


def test_hint_bookkeeping_runs_off_the_event_loop(client, monkeypatch):
    seen = []
    original = ProgressRepository.record_hint

    def record_hint(self):
        try:
            asyncio.get_running_loop()
            seen.append("loop")
        except RuntimeError:
            seen.append("thread")
        original(self)

    monkeypatch.setattr(ProgressRepository, "record_hint", record_hint)
    gid = client.post("/games", json={"tier": "tutorial"}).json()["game_id"]
    r = client.get(f"/games/{gid}/hint")
    assert r.status_code == 200
    assert r.json()["hints_used"] == 1
    assert seen == ["thread"]
    assert client.get("/stats").json()["hints_used"] == 1
