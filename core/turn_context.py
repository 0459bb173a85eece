"""Per-turn context handed to the bot by the transport.

The context owns the inbound activity and collects every outbound activity in
send order. Transports drain ``sent_activities`` once the turn finishes; nothing
here outlives a single turn.
"""

from __future__ import annotations

import threading
from typing import Iterable, List, Optional, Union

from core.activity import Activity, message_activity


class TurnCancelledError(RuntimeError):
    """Raised when the transport cancels a turn before it completes."""


class CancellationToken:
    """Cooperative cancellation flag checked between suspension points."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise TurnCancelledError("Turn was cancelled by the transport.")


class TurnContext:
    """Inbound activity plus the ordered list of replies sent during the turn."""

    def __init__(self, activity: Activity, cancellation: Optional[CancellationToken] = None) -> None:
        self._activity = activity
        self._cancellation = cancellation or CancellationToken()
        self._sent: List[Activity] = []

    @property
    def activity(self) -> Activity:
        return self._activity

    @property
    def cancellation(self) -> CancellationToken:
        return self._cancellation

    @property
    def sent_activities(self) -> List[Activity]:
        return list(self._sent)

    def send_activity(self, activity_or_text: Union[Activity, str]) -> Activity:
        if isinstance(activity_or_text, str):
            activity = message_activity(activity_or_text)
        else:
            activity = activity_or_text
        self._sent.append(activity)
        return activity

    def send_activities(self, activities: Iterable[Activity]) -> List[Activity]:
        return [self.send_activity(activity) for activity in activities]


__all__ = ["CancellationToken", "TurnCancelledError", "TurnContext"]
