"""
Testing the random.org secret source without touching the network.
"""

import requests

import codebreaker.random_client as random_client
from codebreaker.types import PegColor, tier_by_name


class _FakeResponse:
    def __init__(self, text, status=200):
        self.text = text
        self.status_code = status

    def raise_for_status(self):
        if self.status_code != 200:
            raise requests.HTTPError(f"status {self.status_code}")


def test_disabled_uses_local_generator(monkeypatch):
    monkeypatch.setattr(random_client.settings, "RANDOM_ORG_ENABLED", False)

    def _boom(*args, **kwargs):
        raise AssertionError("network must not be used")

    monkeypatch.setattr(random_client.requests, "get", _boom)
    cfg = tier_by_name("advanced").config
    code = random_client.fetch_code(cfg)
    assert len(code) == cfg.code_length


def test_integers_map_to_colors(monkeypatch):
    monkeypatch.setattr(random_client.settings, "RANDOM_ORG_ENABLED", True)
    seen = {}

    def fake_get(url, params, timeout):
        seen["url"] = url
        return _FakeResponse("0\n5\n2\n2\n")

    monkeypatch.setattr(random_client.requests, "get", fake_get)
    code = random_client.fetch_code(tier_by_name("advanced").config)
    assert seen["url"] == random_client.INTEGERS_URL
    assert code == (PegColor.RED, PegColor.ORANGE, PegColor.GREEN, PegColor.GREEN)


def test_no_duplicates_uses_sequences(monkeypatch):
    monkeypatch.setattr(random_client.settings, "RANDOM_ORG_ENABLED", True)
    seen = {}

    def fake_get(url, params, timeout):
        seen["url"] = url
        return _FakeResponse("3\n0\n4\n1\n2\n")

    monkeypatch.setattr(random_client.requests, "get", fake_get)
    code = random_client.fetch_code(tier_by_name("beginner").config)
    assert seen["url"] == random_client.SEQUENCES_URL
    assert code == (PegColor.YELLOW, PegColor.RED, PegColor.PURPLE, PegColor.BLUE)


def test_bad_response_falls_back(monkeypatch):
    monkeypatch.setattr(random_client.settings, "RANDOM_ORG_ENABLED", True)
    monkeypatch.setattr(random_client.requests, "get", lambda *a, **k: _FakeResponse("9\n9\n9\n9\n"))
    cfg = tier_by_name("advanced").config
    code = random_client.fetch_code(cfg)
    assert len(code) == 4
    assert set(code) <= set(cfg.colors)


def test_network_error_falls_back(monkeypatch):
    monkeypatch.setattr(random_client.settings, "RANDOM_ORG_ENABLED", True)

    def fake_get(*args, **kwargs):
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(random_client.requests, "get", fake_get)
    assert len(random_client.fetch_code(tier_by_name("master").config)) == 5
