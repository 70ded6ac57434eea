from __future__ import annotations

from datetime import datetime
from typing import TypedDict


# PUBLIC_INTERFACE
class TaskEntity(TypedDict):
    """
    A task document as stored in the ``tasks`` collection.

    Keys are camelCase because they are the stored field names.

    Fields:
    - id: Store-assigned document id
    - title: Non-empty title
    - description: Non-empty description
    - status: Completion flag, False on creation
    - createdAt: Creation timestamp, never rewritten
    - updatedAt: Last write timestamp
    """

    id: str
    title: str
    description: str
    status: bool
    createdAt: datetime
    updatedAt: datetime


# PUBLIC_INTERFACE
class ChatMessageEntity(TypedDict):
    """A chat message child under ``chats``; ``id`` is its push key and ``timestamp`` is epoch millis."""

    id: str
    username: str
    message: str
    timestamp: int
