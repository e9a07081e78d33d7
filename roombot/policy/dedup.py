"""
Outgoing message flood protection.

Identical text is only sent once per cooldown window. The check is keyed
by an MD5 digest of the text, so different messages never block each other.
"""

import hashlib
from dataclasses import dataclass

from loguru import logger

from roombot.brain.store import PersistentStore
from roombot.policy.rate_limit import COOLDOWN_MS

MESSAGES_KEY = "messages"


def content_hash(text: str) -> str:
    """MD5 hex digest of the message text."""
    return hashlib.md5(text.encode("utf-8")).hexdigest()


@dataclass
class SendRecord:
    """Last time a given text was sent."""
    message: str
    time: int

    def to_dict(self) -> dict:
        return {"message": self.message, "time": self.time}


class MessageDeduplicator:
    """Suppresses repeats of the same text inside the cooldown window."""

    def __init__(self, store: PersistentStore, window_ms: int = COOLDOWN_MS):
        self.store = store
        self.window_ms = window_ms

    def should_send(self, text: str, now: int) -> bool:
        """
        Decide whether text may be sent and record the attempt.

        The record is overwritten even when the send is suppressed.

        Args:
            text: Outgoing message text.
            now: Current time in milliseconds.

        Returns:
            True if no identical message was sent in the last window.
        """
        key = content_hash(text)

        with self.store.lock:
            records = self.store.get(MESSAGES_KEY) or {}
            previous = records.get(key)

            allowed = not previous or now - int(previous.get("time", 0)) > self.window_ms

            records[key] = SendRecord(message=text, time=now).to_dict()
            self.store.set(MESSAGES_KEY, records)

        if not allowed:
            logger.debug(f"Duplicate message {key} suppressed")
        return allowed
