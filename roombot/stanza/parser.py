"""
Stanza parsing for RoomBot.

Turns raw ``message`` and ``presence`` stanzas into MessageEvent and
PresenceEvent records. Parsing a message also consults the rate limiter,
which stamps the sender's command log.
"""

import time
from typing import Callable

from loguru import logger

from roombot.errors import MalformedStanza
from roombot.policy.rate_limit import RateLimiter
from roombot.stanza.models import (
    Event,
    MessageEvent,
    PresenceEvent,
    StanzaNode,
)


def now_ms() -> int:
    """Current wall clock time in milliseconds."""
    return int(time.time() * 1000)


def parse_from_username(stanza: StanzaNode) -> str:
    """
    Extract the sender's nickname from ``room@host/nickname``.

    Raises:
        MalformedStanza: No ``from`` attribute, or it has no nickname part.
    """
    from_jid = stanza.attrs.get("from")
    if not from_jid or "/" not in from_jid:
        raise MalformedStanza(f"Cannot read nickname from {from_jid!r}", stanza)

    username = from_jid[from_jid.index("/") + 1:]
    if not username:
        raise MalformedStanza(f"Empty nickname in {from_jid!r}", stanza)
    return username


def parse_body(stanza: StanzaNode) -> str:
    """Text of the ``body`` child with every backslash removed."""
    body = stanza.require_child("body")
    return body.text.replace("\\", "")


def parse_role(stanza: StanzaNode) -> str | None:
    """Role from the ``x/item`` child chain, or None if it is absent."""
    x = stanza.find_child("x")
    item = x.find_child("item") if x is not None else None
    if item is None:
        return None
    return item.attrs.get("role")


def parse_message(stanza: StanzaNode, rate_limiter: RateLimiter, now: int) -> MessageEvent:
    from_username = parse_from_username(stanza)
    body = parse_body(stanza)
    rate_limited = rate_limiter.check_and_record(from_username, now)
    return MessageEvent(from_username=from_username, body=body, rate_limited=rate_limited)


def parse_presence(stanza: StanzaNode) -> PresenceEvent:
    return PresenceEvent(
        from_username=parse_from_username(stanza),
        status=stanza.attrs.get("type") or "available",
        role=parse_role(stanza),
    )


class StanzaParser:
    """
    Normalizes incoming stanzas.

    Only ``message`` and ``presence`` are understood; anything else
    parses to None and should be ignored by the caller.
    """

    def __init__(self, rate_limiter: RateLimiter, clock: Callable[[], int] | None = None):
        self.rate_limiter = rate_limiter
        self.clock = clock or now_ms

    def parse(self, stanza: StanzaNode) -> Event | None:
        """
        Parse a stanza into an event.

        Args:
            stanza: Raw stanza from the transport.

        Returns:
            The normalized event, or None for unhandled stanza kinds.

        Raises:
            MalformedStanza: A required element or attribute is missing.
        """
        if stanza.name == "message":
            return parse_message(stanza, self.rate_limiter, self.clock())
        if stanza.name == "presence":
            return parse_presence(stanza)

        logger.debug(f"Ignoring <{stanza.name}> stanza")
        return None
