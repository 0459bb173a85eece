from core.entity_extractor import get_entity_value
from core.recognizer import EntityInstance, RecognizerResult


def _result(entities=None, instances=None) -> RecognizerResult:
    return RecognizerResult(
        text="What's the weather in Prague",
        intents={"GetWeather": 0.97},
        entities=entities or {},
        instances=instances or {},
    )


def test_labeled_location_wins_over_pattern_fallback():
    result = _result(
        entities={"Location": ["prague"], "Location_PatternAny": ["in prague"]},
        instances={
            "Location": [EntityInstance(text="Prague", start_index=22, end_index=27)],
            "Location_PatternAny": [EntityInstance(text="in Prague", start_index=19, end_index=27)],
        },
    )

    assert get_entity_value(result) == "Prague"


def test_pattern_fallback_used_when_label_missing():
    result = _result(
        entities={"Location_PatternAny": ["new york"]},
        instances={"Location_PatternAny": [EntityInstance(text="New York", start_index=22, end_index=29)]},
    )

    assert get_entity_value(result) == "New York"


def test_pattern_fallback_used_when_label_is_blank():
    result = _result(entities={"Location": ["  "], "Location_PatternAny": ["oslo"]})

    assert get_entity_value(result) == "oslo"


def test_normalized_value_used_without_instances():
    result = _result(entities={"Location": ["berlin"]})

    assert get_entity_value(result) == "berlin"


def test_empty_string_when_no_location_entities():
    result = _result(entities={"Date": ["tomorrow"]})

    assert get_entity_value(result) == ""
