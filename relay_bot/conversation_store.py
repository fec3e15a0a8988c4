"""
Conversation State Store - message id to prompt text map for reply chaining.

Every processed message records the prompt it was answered with; a reply
to that message looks the prompt up and extends it. Entries live for the
lifetime of the process.
"""

import asyncio
import logging
from collections import OrderedDict
from typing import Optional, Tuple

logger = logging.getLogger(__name__)


class ConversationStore:
    """In-memory prompt store guarded by a single asyncio lock"""

    def __init__(self, max_entries: Optional[int] = None):
        """
        Args:
            max_entries: Optional retention cap. When set, the least recently
                used entries are evicted beyond this size. None keeps every
                entry for the lifetime of the process.
        """
        if max_entries is not None and max_entries <= 0:
            raise ValueError(f"max_entries must be positive, got {max_entries}")

        self.max_entries = max_entries
        self._entries: "OrderedDict[str, str]" = OrderedDict()
        self._lock = asyncio.Lock()

    async def get(self, message_id: str) -> Tuple[str, bool]:
        """
        Look up the prompt recorded for a message.

        Returns:
            (text, found) - text is "" when found is False
        """
        async with self._lock:
            if message_id not in self._entries:
                return "", False
            if self.max_entries is not None:
                self._entries.move_to_end(message_id)
            return self._entries[message_id], True

    async def set(self, message_id: str, text: str) -> None:
        """Record (or overwrite) the prompt for a message."""
        async with self._lock:
            self._entries[message_id] = text
            if self.max_entries is None:
                return
            self._entries.move_to_end(message_id)
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"Evicted conversation entry {evicted}")

    def __len__(self) -> int:
        return len(self._entries)
