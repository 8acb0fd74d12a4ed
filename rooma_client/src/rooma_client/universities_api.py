# src/rooma_client/universities_api.py

from typing import Any, Dict

from .api_client import ApiClient
from .results import unwrap


class UniversitiesApi:
    def __init__(self, client: ApiClient):
        self.client = client

    async def get_universities(self) -> Dict[str, Any]:
        return unwrap(await self.client.get("/universities"))

    async def search_universities(self, query: str) -> Dict[str, Any]:
        return unwrap(await self.client.get("/universities/search", params={"q": query}))
