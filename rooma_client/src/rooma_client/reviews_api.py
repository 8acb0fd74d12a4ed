# src/rooma_client/reviews_api.py

from typing import Any, Dict, Mapping

from .api_client import ApiClient
from .results import unwrap


class ReviewsApi:
    def __init__(self, client: ApiClient):
        self.client = client

    async def get_property_reviews(self, property_id: str) -> Dict[str, Any]:
        return unwrap(await self.client.get(f"/reviews/property/{property_id}"))

    async def get_user_reviews(self, user_id: str) -> Dict[str, Any]:
        return unwrap(await self.client.get(f"/reviews/user/{user_id}"))

    async def create_review(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        return unwrap(await self.client.post("/reviews", json=dict(data)))

    async def update_review(self, review_id: str, data: Mapping[str, Any]) -> Dict[str, Any]:
        return unwrap(await self.client.put(f"/reviews/{review_id}", json=dict(data)))

    async def delete_review(self, review_id: str) -> Dict[str, Any]:
        return unwrap(await self.client.delete(f"/reviews/{review_id}"))
