"""
Tests for the CLI.

Tests:
- Version flag
- Settings get/set against a brain directory
- User lookup
- The room stanza handler
"""

import json

import pytest
from loguru import logger
from typer.testing import CliRunner

from conftest import make_message, make_presence
from roombot import __version__
from roombot.cli.commands import app, handle_stanza
from roombot.client import ChatClient
from roombot.stanza.models import StanzaNode

runner = CliRunner()


@pytest.fixture
def config_file(config_dir, brain_dir):
    """Config file whose brain lives in a temporary directory."""
    path = config_dir / "config.json"
    path.write_text(json.dumps({"brain": {"directory": str(brain_dir)}}))
    return path


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


class TestSettingsCommands:
    def test_set_then_get(self, config_file):
        """Test a value written by set is printed by get."""
        result = runner.invoke(app, ["settings", "set", "greeting", '{"text": "hi"}', "-c", str(config_file)])
        assert result.exit_code == 0

        result = runner.invoke(app, ["settings", "get", "greeting", "-c", str(config_file)])
        assert result.exit_code == 0
        assert json.loads(result.output) == {"text": "hi"}

    def test_set_rejects_invalid_json(self, config_file):
        result = runner.invoke(app, ["settings", "set", "k", "{oops", "-c", str(config_file)])
        assert result.exit_code == 1
        assert "Invalid JSON" in result.output

    def test_get_missing(self, config_file):
        result = runner.invoke(app, ["settings", "get", "nope", "-c", str(config_file)])
        assert result.exit_code == 0
        assert result.output.strip() == "null"


class TestUserCommand:
    def test_known_user(self, config_file):
        runner.invoke(
            app,
            ["settings", "set", "leaderboard", '{"alice": {"points": 7}}', "-c", str(config_file)],
        )
        result = runner.invoke(app, ["user", "alice", "-c", str(config_file)])
        assert result.exit_code == 0
        assert "points" in result.output

    def test_unknown_user(self, config_file):
        result = runner.invoke(app, ["user", "bob", "-c", str(config_file)])
        assert result.exit_code == 0
        assert "No record for bob" in result.output


class TestHandleStanza:
    """Tests for the room handler used by ``roombot run``."""

    @pytest.fixture
    def client(self, config, transport, store, clock):
        return ChatClient(config, transport, store, clock=clock)

    def test_ping_gets_pong(self, client, transport):
        handle_stanza(client, make_message("lobby@conf.example.com/alice", "!ping"))
        assert transport.messages == ["@alice: pong"]

    def test_rate_limited_ping_ignored(self, client, transport, clock):
        """Test a second ping inside the window gets no reply."""
        handle_stanza(client, make_message("lobby@conf.example.com/alice", "!ping"))
        clock.advance(2000)
        handle_stanza(client, make_message("lobby@conf.example.com/alice", "!ping"))
        assert transport.messages == ["@alice: pong"]

    def test_own_messages_ignored(self, client, transport):
        handle_stanza(client, make_message("lobby@conf.example.com/roombot", "!ping"))
        assert transport.messages == []

    def test_malformed_stanza_dropped(self, client, transport):
        """Test malformed stanzas are logged, not raised."""
        handle_stanza(client, make_message("lobby@conf.example.com", "!ping"))
        assert transport.sent == []

    def test_message_without_body_skipped_quietly(self, client, transport, store):
        """Test subject changes and chat states are not reported as malformed."""
        warnings = []
        sink = logger.add(warnings.append, level="WARNING")
        try:
            subject = StanzaNode(
                name="message",
                attrs={"from": "lobby@conf.example.com/alice", "type": "groupchat"},
                children=[StanzaNode(name="subject", children=["Welcome"])],
            )
            handle_stanza(client, subject)
        finally:
            logger.remove(sink)

        assert warnings == []
        assert transport.sent == []
        assert store.get("userMessages") is None

    def test_presence_ignored(self, client, transport):
        handle_stanza(client, make_presence("lobby@conf.example.com/alice", role="participant"))
        assert transport.sent == []

    def test_wired_through_listen(self, client, transport):
        """Test the handler works when registered as a listener."""
        client.listen(lambda stanza: handle_stanza(client, stanza))
        transport.receive(make_message("lobby@conf.example.com/bob", "!ping"))
        assert transport.messages == ["@bob: pong"]


def test_run_requires_room(config_file):
    """Test run refuses to start without an account and room."""
    result = runner.invoke(app, ["run", "-c", str(config_file)])
    assert result.exit_code == 1
    assert "must be configured" in result.output
