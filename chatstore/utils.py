"""
Helpers for message content and identifiers.
"""

import hashlib
import logging
import random
from typing import Optional

logger = logging.getLogger(__name__)

# Longest content a message keeps, longer input is cut
MAX_CONTENT_LENGTH = 250

# Message ids are drawn from this range, so every id has exactly 10 digits
MESSAGE_ID_MIN = 1_000_000_000
MESSAGE_ID_MAX = 1_999_999_999

# Number of hash characters shown in previews
HASH_PREVIEW_LENGTH = 15


def truncate_content(content: str) -> str:
    """Cut content to the first MAX_CONTENT_LENGTH characters."""
    if len(content) > MAX_CONTENT_LENGTH:
        logger.debug(f"Truncating content from {len(content)} to {MAX_CONTENT_LENGTH} characters")
        return content[:MAX_CONTENT_LENGTH]
    return content


def compute_content_hash(content: str) -> str:
    """
    Compute the SHA-256 digest of message content.

    Args:
        content: Message text, hashed as UTF-8 bytes

    Returns:
        64 lowercase hex characters
    """
    # Lone surrogates are hashed as "?"
    return hashlib.sha256(content.encode("utf-8", errors="replace")).hexdigest()


def generate_message_id(rng: Optional[random.Random] = None) -> str:
    """
    Draw a random 10-digit message id.

    The id is a display identifier: no uniqueness check is made here.

    Args:
        rng: Random generator to draw from, the module generator when None

    Returns:
        Decimal string in [1000000000, 1999999999]
    """
    source = rng if rng is not None else random
    return str(source.randint(MESSAGE_ID_MIN, MESSAGE_ID_MAX))


def hash_preview(content_hash: str) -> str:
    """Shorten a content hash for display."""
    return content_hash[:HASH_PREVIEW_LENGTH] + "..."
