"""
Stanza handling for RoomBot.

Provides:
- StanzaNode tree used by transports
- Normalized message/presence events
- StanzaParser
"""

from roombot.stanza.models import (
    StanzaNode,
    MessageEvent,
    PresenceEvent,
    Event,
    find_child,
)
from roombot.stanza.parser import (
    StanzaParser,
    parse_from_username,
    parse_message,
    parse_presence,
)

__all__ = [
    "StanzaNode",
    "MessageEvent",
    "PresenceEvent",
    "Event",
    "find_child",
    "StanzaParser",
    "parse_from_username",
    "parse_message",
    "parse_presence",
]
