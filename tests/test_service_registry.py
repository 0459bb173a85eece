import json
from pathlib import Path

import pytest

from core.recognizer import LuisRecognizer
from core.service_registry import (
    ConfigurationError,
    LuisServiceDescriptor,
    ServiceRegistry,
    UnknownServiceDescriptor,
    load_bot_configuration,
    parse_service_descriptor,
)


LUIS_ENTRY = {
    "type": "luis",
    "name": "WeatherBot",
    "appId": "app-123",
    "authoringKey": "authoring-key",
    "region": "westeurope",
}


def _write_bot_file(path: Path, services) -> Path:
    path.write_text(json.dumps({"name": "WeatherBot", "services": services}), encoding="utf-8")
    return path


def test_luis_entry_builds_recognizer(tmp_path):
    bot_file = _write_bot_file(
        tmp_path / "weather.bot",
        [{"type": "endpoint", "name": "development", "endpoint": "http://localhost:3978"}, LUIS_ENTRY],
    )

    registry = ServiceRegistry.from_file(bot_file)

    assert list(registry.recognizers) == ["WeatherBot"]
    recognizer = registry.get_recognizer("WeatherBot")
    assert isinstance(recognizer, LuisRecognizer)
    assert recognizer.application.endpoint == "https://westeurope.api.cognitive.microsoft.com"
    assert recognizer.application.endpoint_key == "authoring-key"


def test_subscription_key_preferred_over_authoring_key():
    descriptor = parse_service_descriptor({**LUIS_ENTRY, "subscriptionKey": "runtime-key"})

    recognizer = descriptor.build_recognizer()

    assert recognizer.application.endpoint_key == "runtime-key"


def test_explicit_endpoint_overrides_region():
    descriptor = LuisServiceDescriptor.from_dict({**LUIS_ENTRY, "endpoint": "https://luis.example.test"})

    assert descriptor.get_endpoint() == "https://luis.example.test"


def test_yaml_configuration_is_accepted(tmp_path):
    bot_file = tmp_path / "weather.yml"
    bot_file.write_text(
        "services:\n"
        "  - type: luis\n"
        "    name: Weather\n"
        "    appId: app-1\n"
        "    authoringKey: key-1\n"
        "    region: westus\n",
        encoding="utf-8",
    )

    descriptors = load_bot_configuration(bot_file)

    assert descriptors == (
        LuisServiceDescriptor(name="Weather", app_id="app-1", authoring_key="key-1", region="westus"),
    )


def test_unknown_service_types_are_ignored():
    descriptor = parse_service_descriptor({"type": "blob", "name": "storage"})
    registry = ServiceRegistry([descriptor])

    assert isinstance(descriptor, UnknownServiceDescriptor)
    assert len(registry.recognizers) == 0


@pytest.mark.parametrize("missing", ["appId", "authoringKey", "name"])
def test_malformed_luis_entry_fails_fast(tmp_path, missing):
    entry = dict(LUIS_ENTRY)
    entry.pop(missing)
    bot_file = _write_bot_file(tmp_path / "weather.bot", [entry])

    with pytest.raises(ConfigurationError):
        ServiceRegistry.from_file(bot_file)


def test_luis_entry_without_region_or_endpoint_fails():
    entry = dict(LUIS_ENTRY)
    entry.pop("region")

    with pytest.raises(ConfigurationError):
        parse_service_descriptor(entry)


def test_duplicate_names_rejected():
    descriptor = LuisServiceDescriptor.from_dict(LUIS_ENTRY)

    with pytest.raises(ConfigurationError):
        ServiceRegistry([descriptor, descriptor])


def test_missing_file_and_services_list(tmp_path):
    with pytest.raises(ConfigurationError):
        load_bot_configuration(tmp_path / "absent.bot")

    bot_file = tmp_path / "empty.bot"
    bot_file.write_text(json.dumps({"name": "WeatherBot"}), encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_bot_configuration(bot_file)


def test_registry_is_read_only_and_validates_names():
    registry = ServiceRegistry([LuisServiceDescriptor.from_dict(LUIS_ENTRY)])

    with pytest.raises(TypeError):
        registry.recognizers["Other"] = registry.get_recognizer("WeatherBot")  # type: ignore[index]
    with pytest.raises(KeyError):
        registry.get_recognizer("Other")
    with pytest.raises(ConfigurationError):
        registry.require_recognizer("Other")
