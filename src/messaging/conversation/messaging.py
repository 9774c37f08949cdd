"""Direct messages between marketplace accounts."""

from datetime import UTC, datetime
from uuid import uuid4

import structlog

from identity.account.repository import AccountRepository
from identity.auth.tokens import Principal
from messaging.store.port import Conversation, Message, MessageStore
from shared.database import Database
from shared.errors import Forbidden, NotFound, ValidationFailed

logger = structlog.get_logger(__name__)

MAX_MESSAGE_LENGTH = 1000


def conversation_id_for(first: str, second: str) -> str:
    """Both participants derive the same id regardless of who writes first."""
    return "_".join(sorted((str(first), str(second))))


def _check_content(content, field="content"):
    if content is None or not content.strip():
        raise ValidationFailed({field: ["Message content is required"]})
    if len(content) > MAX_MESSAGE_LENGTH:
        raise ValidationFailed({field: [f"Message cannot exceed {MAX_MESSAGE_LENGTH} characters"]})


class MessagingService:
    def __init__(self, database: Database, store: MessageStore):
        self._database = database
        self._store = store

    def _check_recipient(self, principal: Principal, recipient_id: str) -> None:
        if recipient_id == principal.account_id:
            raise ValidationFailed({"recipient_id": ["You cannot message yourself"]})
        with self._database.unit_of_work() as session:
            try:
                AccountRepository(session).get(recipient_id)
            except NotFound:
                raise NotFound("Recipient", recipient_id) from None

    @staticmethod
    def _assert_participant(principal: Principal, conversation_id: str) -> None:
        if principal.account_id not in conversation_id.split("_"):
            raise Forbidden("Not a participant in this conversation")

    def send_message(self, principal: Principal, recipient_id: str, content: str) -> Message:
        _check_content(content)
        self._check_recipient(principal, recipient_id)

        message = Message(
            id=str(uuid4()),
            conversation_id=conversation_id_for(principal.account_id, recipient_id),
            sender_id=principal.account_id,
            recipient_id=recipient_id,
            content=content,
            timestamp=datetime.now(UTC),
        )
        self._store.append(message)
        logger.info("message_sent", conversation_id=message.conversation_id, message_id=message.id)
        return message

    def start_conversation(
        self, principal: Principal, recipient_id: str, initial_message: str | None = None
    ) -> Conversation:
        if initial_message is not None:
            _check_content(initial_message, field="initial_message")
        self._check_recipient(principal, recipient_id)

        conversation_id = conversation_id_for(principal.account_id, recipient_id)
        now = datetime.now(UTC)
        opening = None
        if initial_message:
            opening = Message(
                id=str(uuid4()),
                conversation_id=conversation_id,
                sender_id=principal.account_id,
                recipient_id=recipient_id,
                content=initial_message,
                timestamp=now,
            )
        conversation = self._store.start(conversation_id, principal.account_id, recipient_id, opening, now)
        logger.info("conversation_started", conversation_id=conversation_id)
        return conversation

    def list_conversations(self, principal: Principal) -> list[Conversation]:
        return self._store.conversations_for(principal.account_id)

    def get_messages(self, principal: Principal, conversation_id: str) -> list[Message]:
        """Return the conversation's messages and mark them read for the caller."""
        self._assert_participant(principal, conversation_id)
        self._store.mark_read(conversation_id, principal.account_id)
        return self._store.messages(conversation_id)

    def mark_read(self, principal: Principal, conversation_id: str) -> None:
        self._assert_participant(principal, conversation_id)
        self._store.mark_read(conversation_id, principal.account_id)

    def delete_conversation(self, principal: Principal, conversation_id: str) -> None:
        self._assert_participant(principal, conversation_id)
        self._store.delete(conversation_id, principal.account_id)
        logger.info("conversation_deleted", conversation_id=conversation_id)

    def unread_count(self, principal: Principal) -> int:
        return sum(view.unread_count for view in self._store.conversations_for(principal.account_id))

    def participants(self, account_ids) -> dict:
        with self._database.unit_of_work() as session:
            return AccountRepository(session).summaries(account_ids)
