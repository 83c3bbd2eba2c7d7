"""
Domain models for chat messages.

This module contains the Message entity and its status enumeration.
For the on-disk record format, see schemas.py.
"""

import logging
from enum import Enum
from typing import Callable, Optional, Union

from chatstore.exceptions import InvalidStatusError
from chatstore.utils import (
    compute_content_hash,
    generate_message_id,
    hash_preview,
    truncate_content,
)

logger = logging.getLogger(__name__)


class MessageStatus(str, Enum):
    CREATED = "Created"
    SENT = "Sent"
    STORED = "Stored"
    DISCARDED = "Discarded"

    @classmethod
    def parse(cls, value: Union["MessageStatus", str]) -> "MessageStatus":
        """
        Convert a status or its string value to a MessageStatus.

        Raises:
            InvalidStatusError: value is not one of the known statuses
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidStatusError(value) from None


class Message:
    """
    A single chat message.

    Every field except status is fixed at construction. Content longer than
    250 characters is truncated, and content_hash is always the SHA-256 of the
    content actually kept.
    """

    __slots__ = (
        "_message_id",
        "_message_number",
        "_recipient",
        "_content",
        "_content_hash",
        "_status",
    )

    def __init__(
        self,
        message_id: str,
        message_number: int,
        recipient: str,
        content: str,
        status: MessageStatus = MessageStatus.CREATED,
    ):
        self._message_id = message_id
        self._message_number = message_number
        self._recipient = recipient
        self._content = truncate_content(content)
        self._content_hash = compute_content_hash(self._content)
        self._status = MessageStatus.parse(status)

    @classmethod
    def create(
        cls,
        message_number: int,
        recipient: str,
        content: str,
        id_factory: Optional[Callable[[], str]] = None,
    ) -> "Message":
        """
        Create a new message with status Created and a fresh random id.

        Args:
            message_number: Ordering number, normally from the store
            recipient: Who the message is sent to
            content: Message text, truncated to 250 characters
            id_factory: Returns a new 10-digit id, generate_message_id when None
        """
        message_id = id_factory() if id_factory is not None else generate_message_id()
        message = cls(message_id, message_number, recipient, content)
        logger.debug(f"Message created: id={message_id}, number={message_number}")
        return message

    @classmethod
    def restore(
        cls,
        message_id: str,
        message_number: int,
        recipient: str,
        content: str,
        status: Union[MessageStatus, str],
    ) -> "Message":
        """Rebuild a persisted message, keeping its id and status."""
        return cls(message_id, message_number, recipient, content, MessageStatus.parse(status))

    @property
    def message_id(self) -> str:
        return self._message_id

    @property
    def message_number(self) -> int:
        return self._message_number

    @property
    def recipient(self) -> str:
        return self._recipient

    @property
    def content(self) -> str:
        return self._content

    @property
    def content_hash(self) -> str:
        return self._content_hash

    @property
    def status(self) -> MessageStatus:
        return self._status

    def set_status(self, status: Union[MessageStatus, str]) -> None:
        """
        Change the message status.

        Raises:
            InvalidStatusError: status is not Created, Sent, Stored or Discarded
        """
        new_status = MessageStatus.parse(status)
        logger.debug(f"Message {self._message_id} status: {self._status.value} -> {new_status.value}")
        self._status = new_status

    def verify_integrity(self) -> bool:
        """Check that content_hash still matches the content."""
        return compute_content_hash(self._content) == self._content_hash

    def render(self) -> str:
        """Human-readable summary used by reports and dialogs."""
        return (
            f"Message #{self._message_number}\n"
            f"ID: {self._message_id}\n"
            f"To: {self._recipient}\n"
            f"Content: {self._content}\n"
            f"Status: {self._status.value}\n"
            f"Content Hash: {hash_preview(self._content_hash)}"
        )

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return (
            f"Message(message_id={self._message_id!r}, message_number={self._message_number!r}, "
            f"recipient={self._recipient!r}, status={self._status.value!r})"
        )
