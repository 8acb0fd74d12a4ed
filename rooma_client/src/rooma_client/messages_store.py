# src/rooma_client/messages_store.py

from datetime import datetime
from typing import Any, Callable, List, Mapping

from .local_storage import LocalStorage
from .optimistic_store import OptimisticStore, StoredEntity
from .token_storage import utc_now

MESSAGES_STORAGE_KEY = "rooma_messages"
CONVERSATIONS_STORAGE_KEY = "rooma_conversations"


class Message(StoredEntity):
    conversation_id: str
    sender_id: str
    receiver_id: str
    property_id: str = ""
    content: str
    read: bool = False


class Conversation(StoredEntity):
    property_id: str
    property_title: str = ""
    property_image: str = ""
    participant1_id: str
    participant1_name: str = ""
    participant1_initials: str = ""
    participant2_id: str
    participant2_name: str = ""
    participant2_initials: str = ""
    last_message: str = ""
    last_message_time: str = ""
    unread_count: int = 0

    def is_between(self, user_a: str, user_b: str) -> bool:
        return {self.participant1_id, self.participant2_id} == {user_a, user_b}

    def has_participant(self, user_id: str) -> bool:
        return user_id in (self.participant1_id, self.participant2_id)


class MessageLog(OptimisticStore[Message]):
    entity_model = Message
    storage_key = MESSAGES_STORAGE_KEY
    id_prefix = "msg"

    def send(self, data: Mapping[str, Any]) -> Message:
        message = self._build(data, read=False)
        self._commit(self._items + [message])
        return message

    def mark_read(self, conversation_id: str, receiver_id: str) -> None:
        self._commit([
            message.model_copy(update={"read": True})
            if message.conversation_id == conversation_id and message.receiver_id == receiver_id
            else message
            for message in self._items
        ])

    def for_conversation(self, conversation_id: str) -> List[Message]:
        messages = self.filter(lambda message: message.conversation_id == conversation_id)
        return sorted(messages, key=lambda message: message.created_at)


class ConversationList(OptimisticStore[Conversation]):
    entity_model = Conversation
    storage_key = CONVERSATIONS_STORAGE_KEY
    id_prefix = "conv"

    def open(self, data: Mapping[str, Any]) -> str:
        """Returns the matching conversation's id, creating the conversation only if needed."""
        candidate = self._build(data, last_message="", unread_count=0)
        for existing in self._items:
            if existing.property_id == candidate.property_id and existing.is_between(
                    candidate.participant1_id, candidate.participant2_id
            ):
                return existing.id
        conversation = candidate.model_copy(update={"last_message_time": candidate.created_at})
        self._commit(self._items + [conversation])
        return conversation.id

    def record_message(self, message: Message) -> None:
        conversation = self.get(message.conversation_id)
        if conversation is None:
            return
        self.update(
            conversation.id,
            last_message=message.content,
            last_message_time=message.created_at,
            unread_count=conversation.unread_count + 1,
        )

    def for_user(self, user_id: str) -> List[Conversation]:
        """Most recent activity first; ISO-8601 times from one clock sort correctly as strings."""
        conversations = self.filter(lambda conversation: conversation.has_participant(user_id))
        return sorted(conversations, key=lambda conversation: conversation.last_message_time, reverse=True)


class MessagesStore:
    """
    Local conversations and their messages, kept in two slots that load and degrade
    independently. A message's `createdAt` is its send time.
    """

    def __init__(self, storage: LocalStorage, clock: Callable[[], datetime] = utc_now):
        self.messages = MessageLog(storage, clock=clock)
        self.conversations = ConversationList(storage, clock=clock)

    def load(self) -> None:
        self.messages.load()
        self.conversations.load()

    def send_message(self, data: Mapping[str, Any]) -> Message:
        """Appends an unread message and bumps its conversation's preview and unread count."""
        message = self.messages.send(data)
        self.conversations.record_message(message)
        return message

    def mark_as_read(self, conversation_id: str, user_id: str) -> None:
        self.messages.mark_read(conversation_id, user_id)
        self.conversations.update(conversation_id, unread_count=0)

    def create_conversation(self, data: Mapping[str, Any]) -> str:
        return self.conversations.open(data)

    def get_user_conversations(self, user_id: str) -> List[Conversation]:
        return self.conversations.for_user(user_id)

    def get_conversation_messages(self, conversation_id: str) -> List[Message]:
        return self.messages.for_conversation(conversation_id)
