# src/rooma_client/properties_api.py

from typing import Any, Dict, Mapping, Optional

from .api_client import ApiClient
from .results import unwrap


class PropertiesApi:
    def __init__(self, client: ApiClient):
        self.client = client

    async def get_properties(self, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """Listing search; filters such as city, min_price or bedrooms go in `params`."""
        return unwrap(await self.client.get("/properties", params=params))

    async def get_property(self, property_id: str) -> Dict[str, Any]:
        return unwrap(await self.client.get(f"/properties/{property_id}"))

    async def create_property(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        return unwrap(await self.client.post("/properties", json=dict(data)))

    async def update_property(self, property_id: str, data: Mapping[str, Any]) -> Dict[str, Any]:
        return unwrap(await self.client.put(f"/properties/{property_id}", json=dict(data)))

    async def delete_property(self, property_id: str) -> Dict[str, Any]:
        return unwrap(await self.client.delete(f"/properties/{property_id}"))

    async def get_host_properties(self, host_id: str) -> Dict[str, Any]:
        return unwrap(await self.client.get(f"/properties/host/{host_id}"))

    async def search_properties(self, query: str) -> Dict[str, Any]:
        return unwrap(await self.client.get("/properties/search", params={"q": query}))
