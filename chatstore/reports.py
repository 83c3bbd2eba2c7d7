"""
Plain-text message reports.

Each report starts with a "=== TITLE ===" banner and separates messages
with a dashed rule, ready for a text area or a terminal. Every report
reads from a MessageStore.
"""

from typing import Sequence

from chatstore.models import Message, MessageStatus
from chatstore.storage import MessageStore
from chatstore.utils import hash_preview

SEPARATOR = "-" * 28
NO_MESSAGES = "No messages found."

# Characters of content shown by the hash report
CONTENT_PREVIEW_LENGTH = 30


def _banner(title: str) -> str:
    return f"=== {title} ===\n\n"


def _report(title: str, messages: Sequence[Message], lines) -> str:
    if not messages:
        return _banner(title) + NO_MESSAGES + "\n"
    parts = [_banner(title)]
    for message in messages:
        parts.extend(f"{line}\n" for line in lines(message))
        parts.append(SEPARATOR + "\n")
    return "".join(parts)


def _content_preview(content: str) -> str:
    if len(content) > CONTENT_PREVIEW_LENGTH:
        return content[:CONTENT_PREVIEW_LENGTH] + "..."
    return content


def render_all_messages(store: MessageStore) -> str:
    """Every message with number, id, recipient, content, status and hash preview."""
    return _report("ALL MESSAGES", store.messages, lambda m: [
        f"Message #{m.message_number}",
        f"ID: {m.message_id}",
        f"To: {m.recipient}",
        f"Content: {m.content}",
        f"Status: {m.status.value}",
        f"Hash: {hash_preview(m.content_hash)}",
    ])


def render_messages_by_status(store: MessageStore, status: MessageStatus) -> str:
    """Messages in one status; the status line is left out since it is in the title."""
    status = MessageStatus.parse(status)
    return _report(f"{status.value.upper()} MESSAGES", store.filter_by_status(status), lambda m: [
        f"Message #{m.message_number}",
        f"ID: {m.message_id}",
        f"To: {m.recipient}",
        f"Content: {m.content}",
        f"Hash: {hash_preview(m.content_hash)}",
    ])


def render_messages_by_recipient(store: MessageStore, recipient: str) -> str:
    return _report(f"MESSAGES FOR: {recipient.upper()}", store.filter_by_recipient(recipient), lambda m: [
        f"Message #{m.message_number}",
        f"ID: {m.message_id}",
        f"To: {m.recipient}",
        f"Content: {m.content}",
        f"Status: {m.status.value}",
    ])


def render_message_hashes(store: MessageStore) -> str:
    """Full content hashes with a short content preview."""
    return _report("MESSAGE HASHES", store.messages, lambda m: [
        f"Message #{m.message_number}",
        f"To: {m.recipient}",
        f"Content Preview: {_content_preview(m.content)}",
        f"Full Hash: {m.content_hash}",
    ])
