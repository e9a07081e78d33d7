"""
XMPP transport for RoomBot.

Uses slixmpp for the connection. Inbound stanzas are converted from
their XML elements into StanzaNode trees before reaching callbacks.
"""

from xml.etree.ElementTree import Element

from loguru import logger

from roombot.stanza.models import StanzaNode
from roombot.transport.base import ConnectedCallback, StanzaCallback

try:
    from slixmpp import ClientXMPP
    from slixmpp.xmlstream.handler import Callback
    from slixmpp.xmlstream.matcher import MatchXPath
    SLIXMPP_AVAILABLE = True
except ImportError:
    SLIXMPP_AVAILABLE = False
    ClientXMPP = None


def local_name(tag: str) -> str:
    """Strip an ElementTree ``{namespace}`` prefix."""
    return tag.rsplit("}", 1)[-1]


def node_from_element(element: Element) -> StanzaNode:
    """Convert an XML element into a StanzaNode, keeping text in order."""
    children: list[StanzaNode | str] = []
    if element.text:
        children.append(element.text)
    for child in element:
        children.append(node_from_element(child))
        if child.tail:
            children.append(child.tail)

    return StanzaNode(
        name=local_name(element.tag),
        attrs={local_name(k): v for k, v in element.attrib.items()},
        children=children,
    )


class XmppTransport:
    """
    slixmpp-backed transport.

    Args:
        jid: Account JID.
        password: Account password.
    """

    def __init__(self, jid: str, password: str):
        if not SLIXMPP_AVAILABLE:
            raise ImportError(
                "slixmpp not installed. Install with: pip install slixmpp"
            )

        self.jid = jid
        self._connected_callbacks: list[ConnectedCallback] = []
        self._stanza_callbacks: list[StanzaCallback] = []

        self._client = ClientXMPP(jid, password)
        self._client.add_event_handler("session_start", self._on_session_start)

        ns = self._client.default_ns
        for kind in ("message", "presence"):
            self._client.register_handler(
                Callback(
                    f"roombot {kind}",
                    MatchXPath(f"{{{ns}}}{kind}"),
                    self._on_stanza,
                )
            )

    def on_connected(self, callback: ConnectedCallback) -> None:
        self._connected_callbacks.append(callback)

    def on_stanza(self, callback: StanzaCallback) -> None:
        self._stanza_callbacks.append(callback)

    def _on_session_start(self, event) -> None:
        self._client.send_presence()

        for callback in self._connected_callbacks:
            callback()

    def _on_stanza(self, stanza) -> None:
        node = node_from_element(stanza.xml)
        for callback in self._stanza_callbacks:
            try:
                callback(node)
            except Exception as e:
                logger.exception(f"Stanza handler failed on <{node.name}>: {e}")

    def send(self, name: str, attrs: dict[str, str], body: str | None = None) -> None:
        """
        Send a ``message`` or ``presence`` stanza.

        Args:
            name: Stanza element name.
            attrs: Stanza attributes (``to``, ``type``).
            body: Message body text.
        """
        if name == "message":
            self._client.send_message(
                mto=attrs["to"],
                mbody=body,
                mtype=attrs.get("type", "chat"),
            )
        elif name == "presence":
            self._client.send_presence(pto=attrs["to"], ptype=attrs.get("type"))
        else:
            raise ValueError(f"Cannot send <{name}> stanza")

    async def run(self) -> None:
        """Connect and block until the stream is closed."""
        logger.info(f"Connecting to XMPP as {self.jid}")
        self._client.connect()
        await self._client.disconnected

    def disconnect(self) -> None:
        logger.info("Disconnecting from XMPP")
        self._client.disconnect()

