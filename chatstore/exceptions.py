"""
Error taxonomy for the message store.

- StorageIOError: the messages file could not be read or written
- StorageParseError: the file content is not a valid array of message records
- InvalidStatusError: a status outside Created/Sent/Stored/Discarded
"""

from typing import Optional


class ChatStoreError(Exception):
    """Base class for all message store errors."""


class StorageIOError(ChatStoreError):
    """Reading or writing the messages file failed."""

    def __init__(self, message: str, path: Optional[str] = None, first_run: bool = False):
        super().__init__(message)
        self.path = path
        # A missing file on load is the expected first-run state
        self.first_run = first_run


class StorageParseError(ChatStoreError):
    """The messages file is malformed or a record is incomplete."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class InvalidStatusError(ChatStoreError, ValueError):
    """A status value is not one of the known message statuses."""

    def __init__(self, status: object):
        super().__init__(f"invalid message status: {status!r}")
        self.status = status
