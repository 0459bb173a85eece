"""Client for the hosted language-understanding (LUIS) prediction endpoint.

The recognizer is a black box from the bot's point of view: it accepts the
user's text and returns ranked intents plus entity groups. ``RecognizerResult``
mirrors the shape the bot framework produces so the entity extractor can read
both normalized values and the original utterance spans.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

import requests

from core.turn_context import TurnContext

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 8


class RecognizerError(RuntimeError):
    """Raised when the NLU service cannot be reached or returns garbage."""


@dataclass(frozen=True)
class EntityInstance:
    text: str
    start_index: int
    end_index: int
    score: Optional[float] = None


@dataclass(frozen=True)
class RecognizerResult:
    """Read-only recognition output for one utterance."""

    text: str
    intents: Mapping[str, float] = field(default_factory=dict)
    entities: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    instances: Mapping[str, Tuple[EntityInstance, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "intents", MappingProxyType(dict(self.intents)))
        object.__setattr__(
            self, "entities", MappingProxyType({k: tuple(v) for k, v in self.entities.items()})
        )
        object.__setattr__(
            self, "instances", MappingProxyType({k: tuple(v) for k, v in self.instances.items()})
        )

    def get_top_scoring_intent(self) -> Optional[Tuple[str, float]]:
        """Return ``(intent, score)`` for the best intent, or ``None`` when empty."""
        if not self.intents:
            return None
        name = max(self.intents, key=lambda key: self.intents[key])
        return name, self.intents[name]

    @classmethod
    def from_luis_response(cls, payload: Mapping[str, Any]) -> "RecognizerResult":
        """Build a result from a LUIS v2 prediction payload."""
        query = str(payload.get("query") or "")

        intents: Dict[str, float] = {}
        for item in payload.get("intents") or []:
            name = item.get("intent")
            if name:
                intents[name] = float(item.get("score") or 0.0)
        top = payload.get("topScoringIntent") or {}
        if top.get("intent") and top["intent"] not in intents:
            intents[top["intent"]] = float(top.get("score") or 0.0)

        entities: Dict[str, List[str]] = {}
        instances: Dict[str, List[EntityInstance]] = {}
        for item in payload.get("entities") or []:
            group = item.get("type")
            if not group:
                continue
            start = item.get("startIndex")
            end = item.get("endIndex")
            if isinstance(start, int) and isinstance(end, int) and 0 <= start <= end < len(query):
                # endIndex is inclusive in the LUIS payload.
                span = query[start : end + 1]
            else:
                span = str(item.get("entity") or "")
                start, end = -1, -1
            value = str(item.get("entity") or span)
            entities.setdefault(group, []).append(value)
            instances.setdefault(group, []).append(
                EntityInstance(text=span, start_index=start, end_index=end, score=item.get("score"))
            )

        return cls(text=query, intents=intents, entities=entities, instances=instances)


@dataclass(frozen=True)
class LuisApplication:
    application_id: str
    endpoint_key: str
    endpoint: str

    @property
    def prediction_url(self) -> str:
        return f"{self.endpoint.rstrip('/')}/luis/v2.0/apps/{self.application_id}"


class LuisRecognizer:
    """Send utterances to a LUIS application and parse the prediction."""

    def __init__(self, application: LuisApplication, *, timeout: float = _DEFAULT_TIMEOUT) -> None:
        self._application = application
        self._timeout = timeout

    @property
    def application(self) -> LuisApplication:
        return self._application

    def recognize(self, turn_context: TurnContext) -> RecognizerResult:
        text = (turn_context.activity.text or "").strip()
        if not text:
            return RecognizerResult(text="")

        try:
            response = requests.get(
                self._application.prediction_url,
                params={
                    "subscription-key": self._application.endpoint_key,
                    "q": text,
                    "verbose": "true",
                },
                timeout=self._timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as exc:
            raise RecognizerError(f"LUIS request failed: {exc}") from exc
        except ValueError as exc:
            raise RecognizerError("LUIS returned a non-JSON body.") from exc

        if not isinstance(payload, dict):
            raise RecognizerError("LUIS returned an unexpected payload.")

        try:
            result = RecognizerResult.from_luis_response(payload)
        except (TypeError, ValueError, AttributeError) as exc:
            raise RecognizerError(f"LUIS returned a malformed prediction: {exc}") from exc
        logger.debug("Recognized %r as %s", text, result.get_top_scoring_intent())
        return result


__all__ = [
    "EntityInstance",
    "LuisApplication",
    "LuisRecognizer",
    "RecognizerError",
    "RecognizerResult",
]
