"""Exception types raised by RoomBot."""


class RoomBotError(Exception):
    """Base class for RoomBot errors."""


class MalformedStanza(RoomBotError, ValueError):
    """A stanza is missing an element or attribute it is required to carry."""

    def __init__(self, message: str, stanza=None):
        super().__init__(message)
        self.stanza = stanza


class StoreError(RoomBotError):
    """A read or write against the persistent store failed."""


class StoreUnavailable(StoreError):
    """The persistent store could not be opened."""
