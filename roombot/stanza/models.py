"""Stanza tree and normalized event types."""

from dataclasses import dataclass, field
from typing import Any, Literal, Union

from roombot.errors import MalformedStanza


@dataclass
class StanzaNode:
    """
    A protocol element: name, attributes and ordered children.

    Children are either nested nodes or text fragments (plain strings),
    in document order.
    """
    name: str
    attrs: dict[str, str] = field(default_factory=dict)
    children: list[Union["StanzaNode", str]] = field(default_factory=list)

    @property
    def text(self) -> str:
        """Concatenated text fragments that are direct children."""
        return "".join(c for c in self.children if isinstance(c, str))

    def find_child(self, name: str) -> "StanzaNode | None":
        return find_child(name, self.children)

    def require_child(self, name: str) -> "StanzaNode":
        """Like find_child, but a missing child is a MalformedStanza."""
        child = self.find_child(name)
        if child is None:
            raise MalformedStanza(f"<{self.name}> has no <{name}> child", self)
        return child


def find_child(name: str, children: list) -> StanzaNode | None:
    """Return the first child node called name, or None."""
    for child in children:
        if isinstance(child, StanzaNode) and child.name == name:
            return child
    return None


@dataclass(frozen=True)
class MessageEvent:
    """A groupchat message from a room occupant."""
    from_username: str
    body: str
    rate_limited: bool = False
    kind: Literal["message"] = "message"

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            "fromUsername": self.from_username,
            "message": self.body,
            "rateLimited": self.rate_limited,
        }


@dataclass(frozen=True)
class PresenceEvent:
    """
    A presence update from a room occupant.

    ``role`` is None when the stanza carries no ``x/item`` role.
    """
    from_username: str
    status: str = "available"
    role: str | None = None
    kind: Literal["presence"] = "presence"

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            "fromUsername": self.from_username,
            "message": self.status,
            "role": self.role,
        }


Event = MessageEvent | PresenceEvent
