"""
Chat room client for RoomBot.

Joins a multi-user room and provides:
- Flood-protected sending and replies
- Raw stanza listeners
- Stanza parsing with per-user rate limiting
- Settings and leaderboard access backed by the brain
"""

from typing import Any, Callable

from loguru import logger

from roombot.brain.store import PersistentStore
from roombot.config.schema import Config
from roombot.policy.dedup import MessageDeduplicator
from roombot.policy.rate_limit import RateLimiter
from roombot.stanza.models import Event, StanzaNode
from roombot.stanza.parser import StanzaParser, now_ms
from roombot.transport.base import Transport

LEADERBOARD_KEY = "leaderboard"


def get_user(store: PersistentStore, username: str) -> dict[str, Any]:
    """Look up a leaderboard record, tolerating a missing leaderboard."""
    leaderboard = store.get(LEADERBOARD_KEY) or {}
    return leaderboard.get(username) or {}


class ChatClient:
    """
    Room client wiring a transport to the message policies.

    Incoming stanzas are handed to listeners untouched; listeners call
    ``parse_stanza`` themselves to get a normalized event.
    """

    def __init__(
        self,
        config: Config,
        transport: Transport,
        store: PersistentStore,
        clock: Callable[[], int] | None = None,
    ):
        """
        Initialize the client.

        Args:
            config: RoomBot configuration.
            transport: Connection to the chat server.
            store: Persistent key-value store.
            clock: Millisecond clock, wall time by default.
        """
        self.config = config
        self.transport = transport
        self.store = store
        self.clock = clock or now_ms

        self.deduplicator = MessageDeduplicator(store, config.policy.message_cooldown_ms)
        self.rate_limiter = RateLimiter(store, config.policy.command_cooldown_ms)
        self.parser = StanzaParser(self.rate_limiter, self.clock)

        self.transport.on_connected(self._on_connected)

    @property
    def debug(self) -> bool:
        return self.config.debug

    def _on_connected(self) -> None:
        logger.info("Connected to server")
        self.send_presence()

    def send_presence(self) -> None:
        """Announce the bot's presence in the room under its nickname."""
        self.transport.send("presence", {"to": self.config.room_occupant_jid})

    def send_message(self, text: str) -> bool:
        """
        Send a groupchat message to the room.

        Args:
            text: Message text.

        Returns:
            True if the message was handed to the transport. False in debug
            mode or when the same text went out within the cooldown window.
        """
        if self.debug:
            logger.info(f"DEBUGGING: {text}")
            return False

        if not self.deduplicator.should_send(text, self.clock()):
            logger.info(
                f"Skipping send_message - previous message sent within "
                f"{self.deduplicator.window_ms}ms"
            )
            return False

        self.transport.send(
            "message",
            {"to": self.config.xmpp.room_jid, "type": "groupchat"},
            body=text,
        )
        return True

    def reply_to(self, username: str, text: str) -> bool:
        """Send a message addressed to a room occupant."""
        return self.send_message(f"@{username}: {text}")

    def listen(self, handler: Callable[[StanzaNode], None]) -> None:
        """Call handler with every raw stanza the transport receives."""
        self.transport.on_stanza(handler)

    def parse_stanza(self, stanza: StanzaNode) -> Event | None:
        """Normalize a raw stanza. See StanzaParser.parse."""
        return self.parser.parse(stanza)

    def update_latest_command_log(self, username: str) -> None:
        """Stamp the user's command log after running one of their commands."""
        self.rate_limiter.update_latest_command_log(username, self.clock())

    def get_user(self, username: str) -> dict[str, Any]:
        """Get the user's leaderboard record, or an empty record."""
        return get_user(self.store, username)

    def get_setting(self, key: str) -> Any | None:
        return self.store.get(key) or None

    def save_setting(self, key: str, value: Any) -> None:
        self.store.set(key, value)
