"""Message persistence for a small chat application."""

from chatstore.exceptions import (
    ChatStoreError,
    InvalidStatusError,
    StorageIOError,
    StorageParseError,
)
from chatstore.models import Message, MessageStatus
from chatstore.storage import MessageStore

__all__ = [
    "ChatStoreError",
    "InvalidStatusError",
    "Message",
    "MessageStatus",
    "MessageStore",
    "StorageIOError",
    "StorageParseError",
]

__version__ = "1.0.0"
