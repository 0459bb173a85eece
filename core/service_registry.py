"""Build the named NLU recognizers listed in the bot configuration file.

The configuration is a ``.bot``-style document with a ``services`` list. Each
entry carries a ``type`` tag; LUIS entries become ``LuisServiceDescriptor``
instances and produce one recognizer each, anything else is kept as an
``UnknownServiceDescriptor`` and ignored. The registry is built once at
startup and is read-only afterwards, so turns may look recognizers up
concurrently.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

import yaml

from core.recognizer import LuisApplication, LuisRecognizer

logger = logging.getLogger(__name__)

LUIS_SERVICE_TYPE = "luis"


class ConfigurationError(RuntimeError):
    """Raised when the bot configuration is missing or malformed."""


@dataclass(frozen=True)
class LuisServiceDescriptor:
    name: str
    app_id: str
    authoring_key: str
    subscription_key: Optional[str] = None
    region: Optional[str] = None
    endpoint: Optional[str] = None
    version: Optional[str] = None

    type = LUIS_SERVICE_TYPE

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LuisServiceDescriptor":
        name = str(data.get("name") or "").strip()
        app_id = str(data.get("appId") or "").strip()
        authoring_key = str(data.get("authoringKey") or "").strip()
        region = str(data.get("region") or "").strip() or None
        endpoint = str(data.get("endpoint") or "").strip() or None

        missing = [
            label
            for label, value in (("name", name), ("appId", app_id), ("authoringKey", authoring_key))
            if not value
        ]
        if not region and not endpoint:
            missing.append("region")
        if missing:
            raise ConfigurationError(
                f"The LUIS service '{name or '<unnamed>'}' is not configured correctly: "
                f"missing {', '.join(missing)}."
            )

        return cls(
            name=name,
            app_id=app_id,
            authoring_key=authoring_key,
            subscription_key=str(data.get("subscriptionKey") or "").strip() or None,
            region=region,
            endpoint=endpoint,
            version=str(data.get("version") or "").strip() or None,
        )

    def get_endpoint(self) -> str:
        if self.endpoint:
            return self.endpoint
        return f"https://{self.region}.api.cognitive.microsoft.com"

    def build_recognizer(self, *, timeout: Optional[float] = None) -> LuisRecognizer:
        application = LuisApplication(
            application_id=self.app_id,
            endpoint_key=self.subscription_key or self.authoring_key,
            endpoint=self.get_endpoint(),
        )
        if timeout is None:
            return LuisRecognizer(application)
        return LuisRecognizer(application, timeout=timeout)


@dataclass(frozen=True)
class UnknownServiceDescriptor:
    type: str
    name: str


ServiceDescriptor = Union[LuisServiceDescriptor, UnknownServiceDescriptor]


def parse_service_descriptor(data: Mapping[str, Any]) -> ServiceDescriptor:
    if not isinstance(data, Mapping):
        raise ConfigurationError("Service entries must be mappings.")
    kind = str(data.get("type") or "").strip().lower()
    if kind == LUIS_SERVICE_TYPE:
        return LuisServiceDescriptor.from_dict(data)
    return UnknownServiceDescriptor(type=kind, name=str(data.get("name") or ""))


def load_bot_configuration(path: Path | str) -> Tuple[ServiceDescriptor, ...]:
    """Read a JSON or YAML ``.bot`` document and return its service descriptors."""
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigurationError(f"Bot configuration file not found: {config_path}")
    try:
        raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Unable to read bot configuration {config_path}: {exc}") from exc

    if not isinstance(raw, Mapping) or not isinstance(raw.get("services"), list):
        raise ConfigurationError(f"Bot configuration {config_path} must define a 'services' list.")
    return tuple(parse_service_descriptor(entry) for entry in raw["services"])


class ServiceRegistry:
    """Immutable name -> recognizer mapping built from service descriptors."""

    def __init__(
        self,
        descriptors: Iterable[ServiceDescriptor],
        *,
        timeout: Optional[float] = None,
    ) -> None:
        recognizers: Dict[str, LuisRecognizer] = {}
        for descriptor in descriptors:
            if not isinstance(descriptor, LuisServiceDescriptor):
                logger.debug("Skipping service '%s' of type '%s'", descriptor.name, descriptor.type)
                continue
            if descriptor.name in recognizers:
                raise ConfigurationError(f"Duplicate LUIS service name '{descriptor.name}'.")
            recognizers[descriptor.name] = descriptor.build_recognizer(timeout=timeout)
            logger.info("Registered LUIS recognizer '%s'", descriptor.name)
        self._recognizers: Mapping[str, LuisRecognizer] = MappingProxyType(recognizers)

    @classmethod
    def from_file(cls, path: Path | str, *, timeout: Optional[float] = None) -> "ServiceRegistry":
        return cls(load_bot_configuration(path), timeout=timeout)

    @property
    def recognizers(self) -> Mapping[str, LuisRecognizer]:
        return self._recognizers

    def get_recognizer(self, name: str) -> LuisRecognizer:
        try:
            return self._recognizers[name]
        except KeyError as exc:
            raise KeyError(f"Recognizer '{name}' is not registered") from exc

    def require_recognizer(self, name: str) -> LuisRecognizer:
        """Startup check: raise ``ConfigurationError`` for unknown names."""
        if name not in self._recognizers:
            raise ConfigurationError(
                f"Invalid configuration: no LUIS service named '{name}' in the bot file."
            )
        return self._recognizers[name]


__all__ = [
    "ConfigurationError",
    "LuisServiceDescriptor",
    "ServiceDescriptor",
    "ServiceRegistry",
    "UnknownServiceDescriptor",
    "load_bot_configuration",
    "parse_service_descriptor",
]
