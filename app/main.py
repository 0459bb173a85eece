"""Assemble the weather bot and run the interactive CLI emulator."""

from __future__ import annotations

import logging
from typing import List, Optional

from app.config import (
    get_bot_config_path,
    get_http_timeout,
    get_log_backup_count,
    get_log_level,
    get_log_max_bytes,
    get_luis_service_name,
    get_openweathermap_api_key,
    get_openweathermap_url,
    get_turn_log_path,
    get_typing_delay_ms,
    is_logging_enabled,
)
from core.activity import Activity, ActivityTypes, ChannelAccount, ConversationAccount
from core.bot import WeatherBot
from core.service_registry import ServiceRegistry
from core.turn_context import TurnContext
from core.turn_logger import TurnLogger
from tools.weather import WeatherClient

logger = logging.getLogger(__name__)

_CLI_USER = ChannelAccount(id="cli-user", name="User")
_CLI_BOT = ChannelAccount(id="weatherbot", name="WeatherBot")
_CLI_CONVERSATION = ConversationAccount(id="cli")


def configure_logging(level: Optional[int] = None) -> None:
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=level if level is not None else get_log_level(),
    )


# -- Bot construction ----------------------------------------------------------
def build_bot(services: Optional[ServiceRegistry] = None) -> WeatherBot:
    """Wire configuration, the service registry and the weather client into a bot.

    Configuration problems (missing ``.bot`` file, malformed LUIS entry,
    unknown recognizer name, missing weather key) raise ``ConfigurationError``
    here so the process never starts serving turns.
    """
    timeout = get_http_timeout()
    registry = services or ServiceRegistry.from_file(get_bot_config_path(), timeout=timeout)
    # The weather lookup keeps the HTTP client's default timeout.
    weather = WeatherClient(get_openweathermap_api_key(), base_url=get_openweathermap_url())
    turn_logger = TurnLogger(
        turn_log_path=get_turn_log_path(),
        enabled=is_logging_enabled(),
        max_bytes=get_log_max_bytes(),
        backup_count=get_log_backup_count(),
    )
    return WeatherBot(
        registry,
        weather,
        recognizer_name=get_luis_service_name(),
        typing_delay_ms=get_typing_delay_ms(),
        turn_logger=turn_logger,
    )


def run_turn(bot: WeatherBot, activity: Activity) -> List[Activity]:
    """Run one activity through ``bot`` and return the replies in send order."""
    context = TurnContext(activity)
    bot.on_turn(context)
    return context.sent_activities


def render_activity(activity: Activity) -> Optional[str]:
    if activity.type == ActivityTypes.TYPING:
        return "(typing...)"
    if activity.type == ActivityTypes.DELAY:
        return f"(pause {activity.value} ms)"
    return activity.text


# -- Interactive CLI loop ------------------------------------------------------
def main() -> None:
    """Minimal channel emulator: greet the user, then forward each line as a message."""
    configure_logging()
    bot = build_bot()

    join = Activity(
        type=ActivityTypes.CONVERSATION_UPDATE,
        from_property=_CLI_USER,
        recipient=_CLI_BOT,
        conversation=_CLI_CONVERSATION,
        members_added=[_CLI_BOT, _CLI_USER],
    )
    for reply in run_turn(bot, join):
        print(f"Bot: {render_activity(reply)}")
    print("Type 'quit' or 'exit' to stop.")

    while True:
        try:
            message = input("You: ")
        except (EOFError, KeyboardInterrupt):
            print("\nExiting.")
            break

        if message.strip().lower() in {"quit", "exit"}:
            print("Goodbye!")
            break

        activity = Activity(
            type=ActivityTypes.MESSAGE,
            text=message,
            from_property=_CLI_USER,
            recipient=_CLI_BOT,
            conversation=_CLI_CONVERSATION,
        )
        for reply in run_turn(bot, activity):
            rendered = render_activity(reply)
            if rendered:
                print(f"Bot: {rendered}")
        print()


if __name__ == "__main__":
    main()
