import pytest
import requests

import tools.weather as weather


class FakeResponse:
    def __init__(self, status_code: int = 200, payload=None) -> None:
        self.status_code = status_code
        self._payload = payload

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload


class FakeSession:
    def __init__(self, outcome) -> None:
        self.outcome = outcome
        self.calls = []
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, *_exc):
        self.closed = True
        return False

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


def _install(monkeypatch, outcome) -> FakeSession:
    session = FakeSession(outcome)
    monkeypatch.setattr(weather.requests, "Session", lambda: session)
    return session


def test_fetch_converts_kelvin_to_celsius(monkeypatch):
    session = _install(
        monkeypatch,
        FakeResponse(payload={"weather": [{"main": "Clouds"}], "main": {"temp": 300.15}}),
    )
    client = weather.WeatherClient("secret", base_url="http://weather.test/current")

    reading = client.fetch("Prague")

    assert reading is not None
    assert reading.condition_summary == "Clouds"
    assert reading.temperature_celsius == pytest.approx(27.0)
    assert session.calls[0]["url"] == "http://weather.test/current"
    assert session.calls[0]["params"] == {"q": "Prague", "appid": "secret"}
    assert session.closed


def test_fetch_returns_none_on_error_status(monkeypatch):
    _install(monkeypatch, FakeResponse(status_code=404, payload={"cod": "404", "message": "city not found"}))

    assert weather.WeatherClient("secret").fetch("Atlantis") is None


def test_fetch_returns_none_when_connection_fails(monkeypatch):
    _install(monkeypatch, requests.ConnectionError("down"))

    assert weather.WeatherClient("secret").fetch("Prague") is None


def test_fetch_returns_none_for_malformed_body(monkeypatch):
    _install(monkeypatch, FakeResponse(payload={"weather": [], "main": {}}))

    assert weather.WeatherClient("secret").fetch("Prague") is None


def test_format_weather_summary_uses_two_decimals():
    reading = weather.WeatherReading(condition_summary="Clear", temperature_celsius=20.0)

    assert weather.format_weather_summary(reading) == "Clear (20.00 °C)"
