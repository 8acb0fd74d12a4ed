# src/rooma_client/messages_api.py

from typing import Any, Dict, Mapping

from .api_client import ApiClient
from .results import unwrap


class MessagesApi:
    """Conversations and the messages inside them."""

    def __init__(self, client: ApiClient):
        self.client = client

    async def get_conversations(self) -> Dict[str, Any]:
        return unwrap(await self.client.get("/conversations"))

    async def get_conversation(self, conversation_id: str) -> Dict[str, Any]:
        return unwrap(await self.client.get(f"/conversations/{conversation_id}"))

    async def create_conversation(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        return unwrap(await self.client.post("/conversations", json=dict(data)))

    async def get_messages(self, conversation_id: str) -> Dict[str, Any]:
        return unwrap(await self.client.get(f"/conversations/{conversation_id}/messages"))

    async def send_message(self, conversation_id: str, content: str) -> Dict[str, Any]:
        return unwrap(await self.client.post(
            f"/conversations/{conversation_id}/messages", json={"content": content}
        ))

    async def mark_as_read(self, conversation_id: str) -> Dict[str, Any]:
        return unwrap(await self.client.patch(f"/conversations/{conversation_id}/read"))

    async def delete_conversation(self, conversation_id: str) -> Dict[str, Any]:
        return unwrap(await self.client.delete(f"/conversations/{conversation_id}"))
