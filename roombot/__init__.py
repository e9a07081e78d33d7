"""
RoomBot - a small multi-user chat room client.
"""

__version__ = "0.1.0"
__logo__ = "💬"
