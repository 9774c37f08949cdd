"""Message store adapters.

The application builds one store per instance and hands it to the messaging
service; nothing in this package is a module-level singleton.
"""

from messaging.store.memory_adapter import InMemoryMessageStore
from messaging.store.port import Conversation, Message, MessageStore

__all__ = ["Conversation", "InMemoryMessageStore", "Message", "MessageStore"]
