"""
Message policies for RoomBot.

Provides:
- Per-user command rate limiting
- Duplicate outgoing message suppression
"""

from roombot.policy.rate_limit import (
    COOLDOWN_MS,
    CommandRecord,
    RateLimiter,
)
from roombot.policy.dedup import (
    MessageDeduplicator,
    SendRecord,
    content_hash,
)

__all__ = [
    "COOLDOWN_MS",
    "CommandRecord",
    "RateLimiter",
    "MessageDeduplicator",
    "SendRecord",
    "content_hash",
]
