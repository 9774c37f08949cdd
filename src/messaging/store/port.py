"""Message store port (abstract interface).

Defines the contract every message store adapter implements. Each
participant has their own view of a conversation (last message, unread
state), while the messages themselves are shared by both participants.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Message:
    id: str
    conversation_id: str
    sender_id: str
    recipient_id: str
    content: str
    timestamp: datetime
    read: bool = False


@dataclass(frozen=True)
class Conversation:
    """One participant's view of a conversation."""

    id: str
    owner_id: str
    other_participant_id: str
    last_message: str
    timestamp: datetime
    unread: bool = False
    unread_count: int = 0


class MessageStore(ABC):
    """Abstract message store interface."""

    @abstractmethod
    def start(
        self,
        conversation_id: str,
        initiator_id: str,
        recipient_id: str,
        opening: Message | None,
        started_at: datetime,
    ) -> Conversation:
        """Create both participants' views; ``AlreadyExists`` if the initiator has one."""
        ...

    @abstractmethod
    def append(self, message: Message) -> Message:
        """Store ``message`` and refresh both views, creating them when missing."""
        ...

    @abstractmethod
    def conversations_for(self, account_id: str) -> list[Conversation]:
        """The account's conversation views, most recent first."""
        ...

    @abstractmethod
    def messages(self, conversation_id: str) -> list[Message]:
        """Messages of a conversation in the order they were sent."""
        ...

    @abstractmethod
    def mark_read(self, conversation_id: str, reader_id: str) -> None:
        """Clear the reader's unread state and flag messages sent to them as read."""
        ...

    @abstractmethod
    def delete(self, conversation_id: str, account_id: str) -> None:
        """Drop the account's view and the conversation's messages."""
        ...
