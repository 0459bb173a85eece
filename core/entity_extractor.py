"""Pull the city the user asked about out of a recognizer result."""

from __future__ import annotations

from core.recognizer import RecognizerResult

LOCATION_LABEL = "Location"
LOCATION_PATTERN_LABEL = "Location_PatternAny"


def _first_value(result: RecognizerResult, label: str) -> str:
    # Prefer the utterance span so "Prague" keeps the user's casing.
    for instance in result.instances.get(label, ()):
        text = (instance.text or "").strip()
        if text:
            return text
    for value in result.entities.get(label, ()):
        text = (value or "").strip()
        if text:
            return text
    return ""


def get_entity_value(result: RecognizerResult) -> str:
    """Return the location entity, or ``""`` when none was recognized.

    The labeled ``Location`` group wins; the ``Location_PatternAny`` group is
    only consulted when the labeled one is absent or empty.
    """
    return _first_value(result, LOCATION_LABEL) or _first_value(result, LOCATION_PATTERN_LABEL)


__all__ = ["LOCATION_LABEL", "LOCATION_PATTERN_LABEL", "get_entity_value"]
