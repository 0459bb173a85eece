import json

import pytest

from app import main
from core.activity import Activity, ActivityTypes, ChannelAccount
from core.bot import WeatherBot
from core.service_registry import ConfigurationError


def _bot_file(tmp_path):
    path = tmp_path / "weather.bot"
    path.write_text(
        json.dumps(
            {
                "services": [
                    {
                        "type": "luis",
                        "name": "WeatherBot",
                        "appId": "app-1",
                        "authoringKey": "key-1",
                        "region": "westus",
                    }
                ]
            }
        ),
        encoding="utf-8",
    )
    return path


def test_build_bot_wires_configuration(monkeypatch, tmp_path):
    monkeypatch.setenv("BOT_CONFIG_PATH", str(_bot_file(tmp_path)))
    monkeypatch.setenv("OPENWEATHERMAP_API_KEY", "weather-key")
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))

    bot = main.build_bot()

    assert isinstance(bot, WeatherBot)
    sent = main.run_turn(
        bot,
        Activity(
            type=ActivityTypes.CONVERSATION_UPDATE,
            recipient=ChannelAccount(id="bot"),
            members_added=[ChannelAccount(id="u1", name="Alice")],
        ),
    )
    assert [activity.text for activity in sent] == ["Welcome to WeatherBotv4 Alice!"]


def test_build_bot_fails_without_weather_key(monkeypatch, tmp_path):
    monkeypatch.setenv("BOT_CONFIG_PATH", str(_bot_file(tmp_path)))
    monkeypatch.delenv("OPENWEATHERMAP_API_KEY", raising=False)

    with pytest.raises(ConfigurationError):
        main.build_bot()


def test_build_bot_fails_for_unknown_service_name(monkeypatch, tmp_path):
    monkeypatch.setenv("BOT_CONFIG_PATH", str(_bot_file(tmp_path)))
    monkeypatch.setenv("OPENWEATHERMAP_API_KEY", "weather-key")
    monkeypatch.setenv("LUIS_SERVICE_NAME", "Missing")

    with pytest.raises(ConfigurationError):
        main.build_bot()


def test_render_activity_describes_typing_and_delay():
    assert main.render_activity(Activity(type="typing")) == "(typing...)"
    assert main.render_activity(Activity(type="delay", value=5000)) == "(pause 5000 ms)"
    assert main.render_activity(Activity(type="message", text="hi")) == "hi"


def test_weather_client_keeps_default_timeout(monkeypatch, tmp_path):
    monkeypatch.setenv("BOT_CONFIG_PATH", str(_bot_file(tmp_path)))
    monkeypatch.setenv("OPENWEATHERMAP_API_KEY", "weather-key")
    monkeypatch.setenv("HTTP_TIMEOUT_SECONDS", "3")
    monkeypatch.delenv("OPENWEATHERMAP_URL", raising=False)
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    built = []

    class CapturingWeatherClient:
        def __init__(self, api_key, **kwargs):
            built.append({"api_key": api_key, **kwargs})

        def fetch(self, city):
            return None

    monkeypatch.setattr(main, "WeatherClient", CapturingWeatherClient)

    main.build_bot()

    assert built == [{"api_key": "weather-key", "base_url": "http://api.openweathermap.org/data/2.5/weather"}]
