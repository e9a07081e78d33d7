"""
Per-user command throttling.

Every message a user sends stamps their command log, so a burst of
messages keeps the user limited until they pause for a full window.
"""

from dataclasses import dataclass

from loguru import logger

from roombot.brain.store import PersistentStore

COOLDOWN_MS = 5000
USER_MESSAGES_KEY = "userMessages"


@dataclass
class CommandRecord:
    """Most recent command time for one user."""
    last_command_time: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"lastCommandTime": self.last_command_time}

    @classmethod
    def from_dict(cls, data: dict | None) -> "CommandRecord":
        if not data:
            return cls()
        return cls(last_command_time=int(data.get("lastCommandTime") or 0))


class RateLimiter:
    """
    Decides whether a user's command falls inside their cooldown window.

    State lives in the store under ``userMessages`` as
    ``{username: {"lastCommandTime": millis}}``.
    """

    def __init__(self, store: PersistentStore, window_ms: int = COOLDOWN_MS):
        self.store = store
        self.window_ms = window_ms

    def _load(self) -> dict[str, dict]:
        return self.store.get(USER_MESSAGES_KEY) or {}

    def last_command_time(self, username: str) -> int:
        """Get the user's last recorded command time, or 0 if none."""
        with self.store.lock:
            return CommandRecord.from_dict(self._load().get(username)).last_command_time

    def check_and_record(self, username: str, now: int) -> bool:
        """
        Check the user's cooldown and stamp their log with ``now``.

        The log is overwritten whatever the outcome, so the window slides
        from the latest message rather than the first one that was limited.

        Args:
            username: Room nickname of the sender.
            now: Current time in milliseconds.

        Returns:
            True if the user is rate limited.
        """
        with self.store.lock:
            records = self._load()
            last = CommandRecord.from_dict(records.get(username)).last_command_time

            rate_limited = last > 0 and now - last < self.window_ms

            records[username] = CommandRecord(last_command_time=now).to_dict()
            self.store.set(USER_MESSAGES_KEY, records)

        if rate_limited:
            logger.debug(f"{username} is rate limited ({now - last}ms since last command)")
        return rate_limited

    def update_latest_command_log(self, username: str, now: int) -> None:
        """Re-stamp the user's last command time after a command ran."""
        with self.store.lock:
            records = self._load()
            record = CommandRecord.from_dict(records.get(username))
            record.last_command_time = now
            records[username] = record.to_dict()
            self.store.set(USER_MESSAGES_KEY, records)
