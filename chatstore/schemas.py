"""
Pydantic schemas for the messages file and store statistics.

This module contains:
- The record model for one message in the JSON array on disk
- The stats model returned by MessageStore.get_stats()
"""

from typing import Optional

from pydantic import BaseModel, Field, TypeAdapter

from chatstore.models import MessageStatus


# =============================================================================
# On-disk Record Models
# =============================================================================

class MessageRecord(BaseModel):
    """
    One element of the top-level JSON array in the messages file.

    Every key is required. Unknown keys are ignored. contentHash is written
    for readers of the file but never trusted on load.
    """
    message_id: str = Field(
        ...,
        alias="messageId",
        strict=True,
        description="10-digit message identifier"
    )
    message_number: int = Field(
        ...,
        alias="messageNumber",
        strict=True,
        description="Ordering number assigned when the message was created"
    )
    recipient: str = Field(..., strict=True, description="Message recipient")
    content: str = Field(..., strict=True, description="Message text, at most 250 characters")
    content_hash: str = Field(
        ...,
        alias="contentHash",
        strict=True,
        description="SHA-256 hex digest of content"
    )
    status: MessageStatus = Field(..., description="Created, Sent, Stored or Discarded")

    model_config = {
        "populate_by_name": True,  # Allow both 'messageId' and 'message_id'
        "extra": "ignore",
        "json_schema_extra": {
            "examples": [
                {
                    "messageId": "1482735510",
                    "messageNumber": 1,
                    "recipient": "+27831234567",
                    "content": "abc",
                    "contentHash": "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad",
                    "status": "Sent"
                }
            ]
        }
    }


# Adapter for the whole file: a JSON array of records
MessageRecordList = TypeAdapter(list[MessageRecord])


# =============================================================================
# Stats Models
# =============================================================================

class MessageStats(BaseModel):
    """
    Summary of the in-memory collection.

    Provides:
    - total_messages: count of all messages
    - recipients_count: number of distinct recipients
    - messages_per_status: count for every status, zero included
    - first_message_number: lowest message number (null if no messages)
    - last_message_number: highest message number (null if no messages)
    """
    total_messages: int = Field(..., ge=0, description="Total number of messages")
    recipients_count: int = Field(..., ge=0, description="Number of distinct recipients")
    messages_per_status: dict[MessageStatus, int] = Field(
        default_factory=dict,
        description="Message count per status"
    )
    first_message_number: Optional[int] = Field(
        None,
        description="Lowest message number (null if no messages)"
    )
    last_message_number: Optional[int] = Field(
        None,
        description="Highest message number (null if no messages)"
    )
