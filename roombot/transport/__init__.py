"""Chat transports for RoomBot."""

from roombot.transport.base import Transport
from roombot.transport.xmpp import XmppTransport, node_from_element

__all__ = ["Transport", "XmppTransport", "node_from_element"]
