"""
Pytest configuration and shared fixtures for RoomBot tests.
"""

import pytest
import sys
from pathlib import Path

# Add the project root to the path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from roombot.brain.store import MemoryStore
from roombot.config.schema import Config, XmppConfig
from roombot.stanza.models import StanzaNode


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now: int = 1_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeTransport:
    """Records sent stanzas and lets tests push inbound ones."""

    def __init__(self):
        self.sent: list[tuple[str, dict, str | None]] = []
        self._connected = []
        self._stanza = []

    def on_connected(self, callback):
        self._connected.append(callback)

    def on_stanza(self, callback):
        self._stanza.append(callback)

    def send(self, name, attrs, body=None):
        self.sent.append((name, attrs, body))

    async def run(self):
        self.connect()

    def disconnect(self):
        pass

    def connect(self):
        for callback in self._connected:
            callback()

    def receive(self, stanza):
        for callback in self._stanza:
            callback(stanza)

    @property
    def messages(self) -> list[str | None]:
        return [body for name, _, body in self.sent if name == "message"]


def make_message(from_jid: str, *fragments: str) -> StanzaNode:
    """Build a groupchat message stanza with a body split into fragments."""
    return StanzaNode(
        name="message",
        attrs={"from": from_jid, "type": "groupchat"},
        children=[StanzaNode(name="body", children=list(fragments))],
    )


def make_presence(from_jid: str, role: str | None = None, type_: str | None = None) -> StanzaNode:
    """Build a room presence stanza, optionally carrying an x/item role."""
    attrs = {"from": from_jid}
    if type_:
        attrs["type"] = type_
    children = []
    if role is not None:
        children.append(
            StanzaNode(
                name="x",
                attrs={"xmlns": "http://jabber.org/protocol/muc#user"},
                children=[StanzaNode(name="item", attrs={"affiliation": "none", "role": role})],
            )
        )
    return StanzaNode(name="presence", attrs=attrs, children=children)


@pytest.fixture
def store():
    """Empty in-memory store."""
    return MemoryStore()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def config():
    """Config pointing at a test room."""
    return Config(
        xmpp=XmppConfig(
            jid="bot@example.com",
            password="secret",
            room_jid="lobby@conf.example.com",
            username="roombot",
        ),
    )


@pytest.fixture
def brain_dir(tmp_path):
    """Create a temporary brain directory."""
    brain = tmp_path / "brain"
    brain.mkdir()
    return brain


@pytest.fixture
def config_dir(tmp_path):
    """Create a temporary config directory."""
    config = tmp_path / "config"
    config.mkdir()
    return config
