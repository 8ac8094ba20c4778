from __future__ import annotations

import pytest
import requests

from bouncer.core import api_client as api_module
from bouncer.core.api_client import BouncerAPIClient, BouncerAPIError, GameFinishedError, parse_person
from factories import build_state


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text="", headers=None):
        self.status_code = status_code
        self._payload = payload
        self.text = text
        self.headers = headers or {}

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


@pytest.fixture
def client(monkeypatch):
    monkeypatch.delenv("BOUNCER_BASE_URL", raising=False)
    monkeypatch.delenv("BOUNCER_PLAYER_ID", raising=False)
    sleeps = []
    monkeypatch.setattr(api_module.time, "sleep", lambda seconds: sleeps.append(seconds))
    c = BouncerAPIClient(base_url="http://bouncer.test", player_id="player-1", max_retries=3)
    c.sleeps = sleeps
    return c


def _queue_responses(monkeypatch, responses):
    calls = []

    def fake_get(url, params=None, headers=None, timeout=None):
        calls.append((url, dict(params or {})))
        response = responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(api_module.requests, "get", fake_get)
    return calls


NEW_GAME = {
    "gameId": "abc12345-game",
    "constraints": [{"attribute": "young", "minCount": 600}, {"attribute": "well_dressed", "minCount": 600}],
    "attributeStatistics": {
        "relativeFrequencies": {"young": 0.3225, "well_dressed": 0.3225},
        "correlations": {"young": {"well_dressed": 0.183}},
    },
}


def test_start_new_game_parses_constraints_and_statistics(client, monkeypatch):
    calls = _queue_responses(monkeypatch, [FakeResponse(payload=NEW_GAME)])

    state = client.start_new_game(1)

    assert calls == [("http://bouncer.test/new-game", {"scenario": 1, "playerId": "player-1"})]
    assert state.game_id == "abc12345-game"
    assert [(c.attribute, c.min_count) for c in state.constraints] == [("young", 600), ("well_dressed", 600)]
    assert state.statistics.get_correlation("young", "well_dressed") == 0.183


def test_start_new_game_rejects_malformed_payload(client, monkeypatch):
    _queue_responses(monkeypatch, [FakeResponse(payload={"gameId": "x"})])
    with pytest.raises(BouncerAPIError):
        client.start_new_game(1)


def test_decision_is_sent_as_lowercase_flag(client, monkeypatch):
    calls = _queue_responses(monkeypatch, [FakeResponse(payload={"status": "running", "admittedCount": 1,
                                                                 "rejectedCount": 0, "nextPerson": None})])
    state = build_state([], {})

    client.decide_and_next(state, 4, True)

    assert calls[0][1] == {"gameId": state.game_id, "personIndex": 4, "accept": "true"}


def test_retries_server_errors_then_succeeds(client, monkeypatch):
    calls = _queue_responses(monkeypatch, [
        requests.ConnectionError("reset"),
        FakeResponse(status_code=503, text="unavailable"),
        FakeResponse(payload={"status": "running"}),
    ])

    response = client.decide_and_next(build_state([], {}), 0)

    assert response == {"status": "running"}
    assert len(calls) == 3
    assert len(client.sleeps) == 2


def test_rate_limit_honours_capped_retry_after(client, monkeypatch):
    _queue_responses(monkeypatch, [
        FakeResponse(status_code=429, headers={"Retry-After": "120"}),
        FakeResponse(payload={"status": "running"}),
    ])

    client.decide_and_next(build_state([], {}), 0)

    assert 15.0 in client.sleeps


def test_gives_up_after_max_retries(client, monkeypatch):
    _queue_responses(monkeypatch, [FakeResponse(status_code=500) for _ in range(3)])
    with pytest.raises(BouncerAPIError, match="after retries"):
        client.decide_and_next(build_state([], {}), 0)


def test_finished_game_is_terminal_and_not_retried(client, monkeypatch):
    calls = _queue_responses(monkeypatch, [FakeResponse(status_code=400, text="Game already finished")])
    with pytest.raises(GameFinishedError):
        client.decide_and_next(build_state([], {}), 0, False)
    assert len(calls) == 1


def test_other_client_errors_are_not_retried(client, monkeypatch):
    calls = _queue_responses(monkeypatch, [FakeResponse(status_code=404, text="no such game")])
    with pytest.raises(BouncerAPIError) as excinfo:
        client.decide_and_next(build_state([], {}), 0)
    assert not isinstance(excinfo.value, GameFinishedError)
    assert len(calls) == 1


def test_missing_status_and_bad_json_are_errors(client, monkeypatch):
    _queue_responses(monkeypatch, [FakeResponse(payload={"nextPerson": None}), FakeResponse(payload=None)])
    with pytest.raises(BouncerAPIError, match="missing status"):
        client.decide_and_next(build_state([], {}), 0)
    with pytest.raises(BouncerAPIError, match="Malformed JSON"):
        client.decide_and_next(build_state([], {}), 0)


def test_environment_overrides_base_url(monkeypatch):
    monkeypatch.setenv("BOUNCER_BASE_URL", "http://override.test/")
    assert BouncerAPIClient(base_url="http://ignored.test").base_url == "http://override.test"


def test_parse_person():
    assert parse_person(None) is None
    parsed = parse_person({"personIndex": 3, "attributes": {"young": True}})
    assert parsed.index == 3 and parsed.has_attribute("young")
    with pytest.raises(BouncerAPIError):
        parse_person({"attributes": {}})
