"""In-process message store.

Conversations live only as long as the application instance that owns the
store. A single lock serializes every mutation so both participants' views
always agree with the shared message list.
"""

import threading
from dataclasses import replace

from messaging.store.port import Conversation, Message, MessageStore
from shared.errors import AlreadyExists


class InMemoryMessageStore(MessageStore):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._views: dict[str, dict[str, Conversation]] = {}
        self._messages: dict[str, list[Message]] = {}

    def start(self, conversation_id, initiator_id, recipient_id, opening, started_at):
        last_message = opening.content if opening else "Conversation started"
        with self._lock:
            mine = self._views.setdefault(initiator_id, {})
            if conversation_id in mine:
                raise AlreadyExists("Conversation already exists", conversation_id=conversation_id)

            view = Conversation(
                id=conversation_id,
                owner_id=initiator_id,
                other_participant_id=recipient_id,
                last_message=last_message,
                timestamp=started_at,
            )
            mine[conversation_id] = view
            self._views.setdefault(recipient_id, {})[conversation_id] = Conversation(
                id=conversation_id,
                owner_id=recipient_id,
                other_participant_id=initiator_id,
                last_message=last_message,
                timestamp=started_at,
                unread=opening is not None,
                unread_count=1 if opening is not None else 0,
            )
            if opening is not None:
                self._messages.setdefault(conversation_id, []).append(opening)
            return view

    def append(self, message):
        with self._lock:
            sender_views = self._views.setdefault(message.sender_id, {})
            current = sender_views.get(message.conversation_id)
            sender_views[message.conversation_id] = Conversation(
                id=message.conversation_id,
                owner_id=message.sender_id,
                other_participant_id=message.recipient_id,
                last_message=message.content,
                timestamp=message.timestamp,
                unread=current.unread if current else False,
                unread_count=current.unread_count if current else 0,
            )

            recipient_views = self._views.setdefault(message.recipient_id, {})
            current = recipient_views.get(message.conversation_id)
            recipient_views[message.conversation_id] = Conversation(
                id=message.conversation_id,
                owner_id=message.recipient_id,
                other_participant_id=message.sender_id,
                last_message=message.content,
                timestamp=message.timestamp,
                unread=True,
                unread_count=(current.unread_count if current else 0) + 1,
            )

            self._messages.setdefault(message.conversation_id, []).append(message)
            return message

    def conversations_for(self, account_id):
        with self._lock:
            views = list(self._views.get(account_id, {}).values())
        return sorted(views, key=lambda view: view.timestamp, reverse=True)

    def messages(self, conversation_id):
        with self._lock:
            return list(self._messages.get(conversation_id, []))

    def mark_read(self, conversation_id, reader_id):
        with self._lock:
            views = self._views.get(reader_id, {})
            if conversation_id in views:
                views[conversation_id] = replace(views[conversation_id], unread=False, unread_count=0)
            if conversation_id in self._messages:
                self._messages[conversation_id] = [
                    replace(m, read=True) if m.recipient_id == reader_id else m
                    for m in self._messages[conversation_id]
                ]

    def delete(self, conversation_id, account_id):
        with self._lock:
            self._views.get(account_id, {}).pop(conversation_id, None)
            self._messages.pop(conversation_id, None)
