"""Turn handling for the weather bot.

Every inbound activity is handled on its own: message activities go through
recognition, location extraction, the weather lookup and reply composition;
conversation updates greet new members; anything else is acknowledged by type.
The bot keeps no state between turns beyond the read-only service registry it
was constructed with.
"""

from __future__ import annotations

import logging
from time import perf_counter
from typing import Optional, Protocol

from core.activity import ActivityTypes, delay_activity, message_activity, typing_activity
from core.entity_extractor import get_entity_value
from core.recognizer import RecognizerError, RecognizerResult
from core.turn_context import TurnCancelledError, TurnContext
from core.turn_logger import TurnLogger, TurnRecord
from tools.weather import WeatherReading, format_weather_summary

logger = logging.getLogger(__name__)

DEFAULT_RECOGNIZER_NAME = "WeatherBot"
DEFAULT_TYPING_DELAY_MS = 5000
NONE_INTENT = "None"

HELP_MESSAGE = (
    "No LUIS intents were found.\n"
    "This sample is about identifying a city and an intent:\n"
    "'Find the current weather in a city'\n"
    "Try typing 'What's the weather in Prague'"
)
NOT_UNDERSTOOD_MESSAGE = "==>Can't understand you, sorry!"
CLOSING_MESSAGE = "Thanks for using our service!"
WEATHER_UNAVAILABLE_TEMPLATE = (
    "Sorry, I couldn't get the weather for {location} right now. Please try again later."
)
WELCOME_TEMPLATE = "Welcome to WeatherBotv4 {name}!"


class Recognizer(Protocol):
    def recognize(self, turn_context: TurnContext) -> RecognizerResult:
        ...


class RecognizerServices(Protocol):
    def require_recognizer(self, name: str) -> Recognizer:
        ...


class WeatherLookup(Protocol):
    def fetch(self, city: str) -> Optional[WeatherReading]:
        ...


class WeatherBot:
    """Answers "what's the weather in <city>" style messages."""

    def __init__(
        self,
        services: RecognizerServices,
        weather_client: WeatherLookup,
        *,
        recognizer_name: str = DEFAULT_RECOGNIZER_NAME,
        typing_delay_ms: int = DEFAULT_TYPING_DELAY_MS,
        turn_logger: Optional[TurnLogger] = None,
    ) -> None:
        if services is None:
            raise ValueError("services is required")
        if weather_client is None:
            raise ValueError("weather_client is required")
        # Unknown recognizer names fail here, before any turn is served.
        self._recognizer = services.require_recognizer(recognizer_name)
        self._weather = weather_client
        self._typing_delay_ms = typing_delay_ms
        self._turn_logger = turn_logger

    # WHAT: entry point for one inbound activity.
    # HOW: dispatch on activity type, then write the turn record with the replies sent.
    def on_turn(self, turn_context: TurnContext) -> None:
        started = perf_counter()
        activity = turn_context.activity
        record = TurnRecord.new(activity_type=activity.type, user_text=activity.text or "")
        try:
            turn_context.cancellation.raise_if_cancelled()
            if activity.type == ActivityTypes.MESSAGE:
                self._handle_message(turn_context, record)
            elif activity.type == ActivityTypes.CONVERSATION_UPDATE:
                self._send_welcome_messages(turn_context, record)
            else:
                turn_context.send_activity(f"{activity.type} event detected")
                record.resolution_status = "event_acknowledged"
        except TurnCancelledError:
            record.resolution_status = "cancelled"
            raise
        finally:
            record.latency_ms = int((perf_counter() - started) * 1000)
            record.replies = [sent.text for sent in turn_context.sent_activities if sent.text]
            self._log_turn(record)

    def _handle_message(self, turn_context: TurnContext, record: TurnRecord) -> None:
        cancellation = turn_context.cancellation
        try:
            result = self._recognizer.recognize(turn_context)
        except RecognizerError as exc:
            logger.warning("Recognizer failed for %r: %s", record.user_text, exc)
            cancellation.raise_if_cancelled()
            turn_context.send_activity(NOT_UNDERSTOOD_MESSAGE)
            record.resolution_status = "recognizer_error"
            return
        cancellation.raise_if_cancelled()

        top_intent = result.get_top_scoring_intent() if result is not None else None
        if top_intent:
            record.intent, record.score = top_intent
        if not top_intent or not top_intent[0] or top_intent[0] == NONE_INTENT:
            turn_context.send_activity(HELP_MESSAGE)
            record.resolution_status = "no_intent"
            return

        location = get_entity_value(result)
        if not location:
            turn_context.send_activity(NOT_UNDERSTOOD_MESSAGE)
            record.resolution_status = "no_location"
            return
        record.location = location

        reading = self._weather.fetch(location)
        cancellation.raise_if_cancelled()
        record.weather_success = reading is not None
        if reading is None:
            turn_context.send_activity(WEATHER_UNAVAILABLE_TEMPLATE.format(location=location))
            record.resolution_status = "weather_unavailable"
            return

        turn_context.send_activities(
            [
                typing_activity(),
                delay_activity(self._typing_delay_ms),
                message_activity(f"Weather of {location} is: {format_weather_summary(reading)}"),
                message_activity(CLOSING_MESSAGE),
            ]
        )
        record.resolution_status = "weather_reported"

    def _send_welcome_messages(self, turn_context: TurnContext, record: TurnRecord) -> None:
        activity = turn_context.activity
        record.resolution_status = "conversation_update"
        if not activity.members_added:
            return
        bot_id = activity.recipient.id if activity.recipient else None
        for member in activity.members_added:
            if member is None or member.id == bot_id:
                continue
            turn_context.send_activity(WELCOME_TEMPLATE.format(name=member.name or member.id))
            record.resolution_status = "welcomed"

    def _log_turn(self, record: TurnRecord) -> None:
        if not self._turn_logger:
            return
        try:
            self._turn_logger.log_turn(record)
        except OSError as exc:
            logger.warning("Failed to write turn log: %s", exc)


__all__ = [
    "CLOSING_MESSAGE",
    "DEFAULT_RECOGNIZER_NAME",
    "DEFAULT_TYPING_DELAY_MS",
    "HELP_MESSAGE",
    "NOT_UNDERSTOOD_MESSAGE",
    "WEATHER_UNAVAILABLE_TEMPLATE",
    "WELCOME_TEMPLATE",
    "WeatherBot",
]
