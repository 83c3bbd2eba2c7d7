import logging
import os
import random
import stat
import tempfile
from contextlib import suppress
from threading import RLock
from typing import Iterator, List, Optional, Tuple, Union

from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from chatstore.config import get_settings
from chatstore.exceptions import (
    ChatStoreError,
    InvalidStatusError,
    StorageIOError,
    StorageParseError,
)
from chatstore.logging_utils import operation_context
from chatstore.metrics import record_collection_size
from chatstore.models import Message, MessageStatus
from chatstore.schemas import MessageRecord, MessageRecordList, MessageStats
from chatstore.utils import generate_message_id

logger = logging.getLogger(__name__)

# Attempts at drawing a message id not already held by the store
MAX_ID_ATTEMPTS = 10


class MessageStore:
    """
    Ordered in-memory collection of messages backed by a JSON file.

    - Keeps all messages in memory, insertion order is display order.
    - save() writes the whole collection, replacing the file atomically.
    - load() replaces the collection with the file content; it runs once
      at construction, so a new store starts with whatever was saved.

    Load and save never raise: they return False and keep the failure
    in last_error. A missing file is the normal first-run state.
    """

    def __init__(
        self,
        file_path: Optional[Union[str, os.PathLike]] = None,
        rng: Optional[random.Random] = None,
    ):
        settings = get_settings()
        self.file_path = os.fspath(file_path) if file_path is not None else settings.MESSAGES_FILE
        self.json_indent = settings.JSON_INDENT
        self.last_error: Optional[ChatStoreError] = None

        self._messages: List[Message] = []
        self._rng = rng if rng is not None else random.Random()
        self._lock = RLock()
        # Highest sequence number handed out by reserve_sequence_number()
        self._highest_reserved = 0

        logger.debug(f"Initializing message store with file: {self.file_path}")
        self.load()

    # =========================================================================
    # Collection
    # =========================================================================

    def add(self, message: Message) -> None:
        """
        Append a message to the in-memory collection.
        Nothing is written to disk until save() is called.
        """
        with self._lock:
            self._messages.append(message)
            size = len(self._messages)
        record_collection_size(size)
        logger.debug(f"Message added: id={message.message_id}, number={message.message_number}")

    @property
    def messages(self) -> Tuple[Message, ...]:
        """Snapshot of all messages in insertion order."""
        with self._lock:
            return tuple(self._messages)

    def __len__(self) -> int:
        with self._lock:
            return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self.messages)

    # =========================================================================
    # Persistence
    # =========================================================================

    def save(self) -> bool:
        """
        Write every message in memory to the messages file.

        The array is written to a temporary file next to the target and
        moved over it, so a failed save leaves the previous file intact.

        Returns:
            True if saved successfully, False otherwise
        """
        with self._lock, operation_context("save") as outcome:
            outcome.log_data["message_count"] = len(self._messages)
            try:
                payload = self._serialize()
                self._write_atomic(payload)
            except StorageParseError as e:
                outcome.result = "parse_error"
                self.last_error = e
                logger.error(f"Failed to serialize messages: {e}")
                return False
            except StorageIOError as e:
                outcome.result = "io_error"
                self.last_error = e
                logger.error(f"Failed to save messages to {self.file_path}: {e}")
                return False

            self.last_error = None
            logger.info(f"Saved {len(self._messages)} messages to {self.file_path}")
            return True

    def load(self) -> bool:
        """
        Replace the in-memory collection with the content of the messages file.

        The whole file is validated before anything changes: if it is
        missing, unreadable, not a JSON array, or any record is incomplete,
        the collection is left as it was.

        Returns:
            True if loaded successfully, False otherwise
        """
        with self._lock, operation_context("load") as outcome:
            try:
                messages = self._read_messages()
            except StorageIOError as e:
                self.last_error = e
                if e.first_run:
                    outcome.result = "first_run"
                    logger.info(f"No messages file at {self.file_path} (this is normal on first run)")
                else:
                    outcome.result = "io_error"
                    logger.error(f"Could not read messages file {self.file_path}: {e}")
                return False
            except StorageParseError as e:
                outcome.result = "parse_error"
                self.last_error = e
                logger.error(f"Could not parse messages file {self.file_path}: {e}")
                return False

            self._messages = messages
            self.last_error = None
            outcome.log_data["message_count"] = len(messages)
            record_collection_size(len(messages))
            logger.info(f"Loaded {len(messages)} messages from {self.file_path}")
            return True

    def _serialize(self) -> bytes:
        try:
            records = [
                MessageRecord(
                    message_id=m.message_id,
                    message_number=m.message_number,
                    recipient=m.recipient,
                    content=m.content,
                    content_hash=m.content_hash,
                    status=m.status,
                )
                for m in self._messages
            ]
        except ValidationError as e:
            raise StorageParseError(
                f"{e.error_count()} invalid value(s) in messages", path=self.file_path
            ) from e
        try:
            return MessageRecordList.dump_json(records, by_alias=True, indent=self.json_indent or None)
        except PydanticSerializationError as e:
            raise StorageParseError(f"Messages could not be encoded: {e}", path=self.file_path) from e

    def _write_atomic(self, payload: bytes) -> None:
        directory = os.path.dirname(os.path.abspath(self.file_path))
        try:
            fd, tmp_path = tempfile.mkstemp(prefix=".messages-", suffix=".tmp", dir=directory)
        except OSError as e:
            raise StorageIOError(str(e), path=self.file_path) from e

        try:
            with os.fdopen(fd, "wb") as tmp_file:
                tmp_file.write(payload)
                tmp_file.flush()
                os.fsync(tmp_file.fileno())
            # mkstemp creates 0600, keep the permissions the target had or would get
            os.chmod(tmp_path, self._file_mode())
            os.replace(tmp_path, self.file_path)
        except OSError as e:
            with suppress(FileNotFoundError):
                os.unlink(tmp_path)
            raise StorageIOError(str(e), path=self.file_path) from e

    def _file_mode(self) -> int:
        try:
            return stat.S_IMODE(os.stat(self.file_path).st_mode)
        except FileNotFoundError:
            umask = os.umask(0)
            os.umask(umask)
            return 0o666 & ~umask

    def _read_messages(self) -> List[Message]:
        try:
            with open(self.file_path, "rb") as f:
                raw = f.read()
        except FileNotFoundError as e:
            raise StorageIOError(str(e), path=self.file_path, first_run=True) from e
        except OSError as e:
            raise StorageIOError(str(e), path=self.file_path) from e

        try:
            records = MessageRecordList.validate_json(raw)
        except ValidationError as e:
            raise StorageParseError(
                f"{e.error_count()} invalid value(s): {e.errors()[0]['msg']}", path=self.file_path
            ) from e

        messages = []
        for record in records:
            # Persisted id and status are restored, the hash is recomputed
            message = Message.restore(
                message_id=record.message_id,
                message_number=record.message_number,
                recipient=record.recipient,
                content=record.content,
                status=record.status,
            )
            if message.content_hash != record.content_hash:
                logger.warning(
                    f"Content hash mismatch for message {record.message_id}, "
                    f"stored={record.content_hash[:15]} computed={message.content_hash[:15]}"
                )
            messages.append(message)
        return messages

    # =========================================================================
    # Sequence Numbers
    # =========================================================================

    def next_sequence_number(self) -> int:
        """
        Next message number: 1 when empty, otherwise highest number + 1.
        Recomputed on every call, nothing is reserved.
        """
        with self._lock:
            if not self._messages:
                return 1
            return max(m.message_number for m in self._messages) + 1

    def reserve_sequence_number(self) -> int:
        """
        Hand out a message number no other caller of this method has received.
        """
        with self._lock:
            number = max(self.next_sequence_number(), self._highest_reserved + 1)
            self._highest_reserved = number
            return number

    def new_message(self, recipient: str, content: str) -> Message:
        """
        Create a message with a reserved number and an id not used in this store.

        The message is not added; call add() when it should be kept.
        """
        with self._lock:
            number = self.reserve_sequence_number()
            message_id = self._unique_message_id()
        return Message.create(number, recipient, content, id_factory=lambda: message_id)

    def _unique_message_id(self) -> str:
        existing = {m.message_id for m in self._messages}
        for attempt in range(1, MAX_ID_ATTEMPTS + 1):
            candidate = generate_message_id(self._rng)
            if candidate not in existing:
                return candidate
            logger.debug(f"Message id collision on attempt {attempt}: {candidate}")
        raise ChatStoreError(f"Could not generate a unique message id in {MAX_ID_ATTEMPTS} attempts")

    # =========================================================================
    # Queries
    # =========================================================================

    def filter_by_status(self, status: Union[MessageStatus, str]) -> List[Message]:
        """
        Messages whose status equals the given one, in collection order.
        An unknown status matches nothing.
        """
        try:
            wanted = MessageStatus.parse(status)
        except InvalidStatusError:
            logger.debug(f"Unknown status filter {status!r}, no messages match")
            return []

        with self._lock:
            result = [m for m in self._messages if m.status is wanted]
        logger.debug(f"Status filter {wanted.value}: {len(result)} messages")
        return result

    def filter_by_recipient(self, text: str) -> List[Message]:
        """Messages whose recipient contains text, ignoring case, in collection order."""
        needle = text.casefold()
        with self._lock:
            result = [m for m in self._messages if needle in m.recipient.casefold()]
        logger.debug(f"Recipient filter {text!r}: {len(result)} messages")
        return result

    def get_stats(self) -> MessageStats:
        """
        Summarize the in-memory collection.

        Computes:
        - total_messages: count of all messages
        - recipients_count: number of distinct recipients
        - messages_per_status: count for each status
        - first_message_number / last_message_number: lowest and highest numbers
        """
        with self._lock:
            messages = list(self._messages)

        per_status = {status: 0 for status in MessageStatus}
        for message in messages:
            per_status[message.status] += 1

        numbers = [m.message_number for m in messages]
        return MessageStats(
            total_messages=len(messages),
            recipients_count=len({m.recipient for m in messages}),
            messages_per_status=per_status,
            first_message_number=min(numbers) if numbers else None,
            last_message_number=max(numbers) if numbers else None,
        )
