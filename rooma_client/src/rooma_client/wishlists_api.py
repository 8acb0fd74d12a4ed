# src/rooma_client/wishlists_api.py

from typing import Any, Dict, Mapping, Optional

from .api_client import ApiClient
from .results import unwrap


class WishlistsApi:
    def __init__(self, client: ApiClient):
        self.client = client

    async def get_my_wishlists(self) -> Dict[str, Any]:
        return unwrap(await self.client.get("/wishlists"))

    async def get_wishlist(self, wishlist_id: str) -> Dict[str, Any]:
        return unwrap(await self.client.get(f"/wishlists/{wishlist_id}"))

    async def create_wishlist(
            self, name: str, description: Optional[str] = None, is_public: Optional[bool] = None
    ) -> Dict[str, Any]:
        data = {"name": name, "description": description, "is_public": is_public}
        body = {key: value for key, value in data.items() if value is not None}
        return unwrap(await self.client.post("/wishlists", json=body))

    async def update_wishlist(self, wishlist_id: str, data: Mapping[str, Any]) -> Dict[str, Any]:
        return unwrap(await self.client.put(f"/wishlists/{wishlist_id}", json=dict(data)))

    async def delete_wishlist(self, wishlist_id: str) -> Dict[str, Any]:
        return unwrap(await self.client.delete(f"/wishlists/{wishlist_id}"))

    async def add_to_wishlist(self, wishlist_id: str, property_id: str) -> Dict[str, Any]:
        return unwrap(await self.client.post(f"/wishlists/{wishlist_id}/items", json={"property_id": property_id}))

    async def remove_from_wishlist(self, wishlist_id: str, item_id: str) -> Dict[str, Any]:
        return unwrap(await self.client.delete(f"/wishlists/{wishlist_id}/items/{item_id}"))
