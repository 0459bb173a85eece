"""Activity models exchanged with the chat channel.

An activity is one unit of conversational exchange: a user message, a typing
indicator, a delay hint, or a system event such as members joining. The models
accept the camelCase names used on the wire (``membersAdded``, ``from``) and
serialize back to them so transports can forward replies untouched.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ActivityTypes:
    MESSAGE = "message"
    CONVERSATION_UPDATE = "conversationUpdate"
    TYPING = "typing"
    DELAY = "delay"
    EVENT = "event"


class ChannelAccount(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = ""
    name: Optional[str] = None


class ConversationAccount(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = ""
    name: Optional[str] = None


class Activity(BaseModel):
    """Inbound or outbound activity; unknown wire fields are ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: str
    id: Optional[str] = None
    text: Optional[str] = None
    value: Optional[Any] = None
    channel_id: Optional[str] = Field(default=None, alias="channelId")
    service_url: Optional[str] = Field(default=None, alias="serviceUrl")
    from_property: Optional[ChannelAccount] = Field(default=None, alias="from")
    recipient: Optional[ChannelAccount] = None
    conversation: Optional[ConversationAccount] = None
    members_added: Optional[List[ChannelAccount]] = Field(default=None, alias="membersAdded")
    members_removed: Optional[List[ChannelAccount]] = Field(default=None, alias="membersRemoved")

    def to_wire(self) -> Dict[str, Any]:
        """Serialize with channel field names, dropping unset values."""
        return self.model_dump(by_alias=True, exclude_none=True)


def message_activity(text: str) -> Activity:
    return Activity(type=ActivityTypes.MESSAGE, text=text)


def typing_activity() -> Activity:
    return Activity(type=ActivityTypes.TYPING)


def delay_activity(milliseconds: int) -> Activity:
    # Channels read ``value`` as the pause length in milliseconds.
    return Activity(type=ActivityTypes.DELAY, value=int(milliseconds))


__all__ = [
    "Activity",
    "ActivityTypes",
    "ChannelAccount",
    "ConversationAccount",
    "delay_activity",
    "message_activity",
    "typing_activity",
]
