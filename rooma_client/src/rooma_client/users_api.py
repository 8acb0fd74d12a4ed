# src/rooma_client/users_api.py

from typing import Any, BinaryIO, Dict, Mapping, Optional

from .api_client import ApiClient
from .results import unwrap


class UsersApi:
    def __init__(self, client: ApiClient):
        self.client = client

    async def get_profile(self) -> Dict[str, Any]:
        return unwrap(await self.client.get("/users/profile"))

    async def get_user(self, user_id: str) -> Dict[str, Any]:
        return unwrap(await self.client.get(f"/users/{user_id}"))

    async def update_profile(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        return unwrap(await self.client.put("/users/profile", json=dict(data)))

    async def upload_profile_photo(
            self, filename: str, content: BinaryIO, content_type: Optional[str] = None
    ) -> Dict[str, Any]:
        """Sends the photo as multipart form data under the `photo` field."""
        file_spec = (filename, content, content_type) if content_type else (filename, content)
        return unwrap(await self.client.post("/upload/profile-photo", files={"photo": file_spec}))

    async def change_password(self, current_password: str, new_password: str) -> Dict[str, Any]:
        body = {"current_password": current_password, "new_password": new_password}
        return unwrap(await self.client.post("/users/change-password", json=body))

    async def become_host(self) -> Dict[str, Any]:
        return unwrap(await self.client.post("/users/become-host"))
