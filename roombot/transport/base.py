"""Transport interface for RoomBot."""

from typing import Callable, Protocol

from roombot.stanza.models import StanzaNode

ConnectedCallback = Callable[[], None]
StanzaCallback = Callable[[StanzaNode], None]


class Transport(Protocol):
    """
    A chat protocol connection.

    Implementations deliver every inbound ``message`` and ``presence``
    stanza to the registered stanza callbacks as a StanzaNode.
    """

    def on_connected(self, callback: ConnectedCallback) -> None: ...

    def on_stanza(self, callback: StanzaCallback) -> None: ...

    def send(self, name: str, attrs: dict[str, str], body: str | None = None) -> None: ...

    async def run(self) -> None: ...

    def disconnect(self) -> None: ...
