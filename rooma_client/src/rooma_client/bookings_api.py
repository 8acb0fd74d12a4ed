# src/rooma_client/bookings_api.py

from typing import Any, Dict, Mapping

from .api_client import ApiClient
from .results import unwrap

SERVER_SETTABLE_STATUSES = ("confirmed", "cancelled")


class BookingsApi:
    def __init__(self, client: ApiClient):
        self.client = client

    async def get_my_bookings(self) -> Dict[str, Any]:
        return unwrap(await self.client.get("/bookings/my-bookings"))

    async def get_booking(self, booking_id: str) -> Dict[str, Any]:
        return unwrap(await self.client.get(f"/bookings/{booking_id}"))

    async def create_booking(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        return unwrap(await self.client.post("/bookings", json=dict(data)))

    async def update_booking_status(self, booking_id: str, status: str) -> Dict[str, Any]:
        if status not in SERVER_SETTABLE_STATUSES:
            raise ValueError(f"Booking status must be one of {SERVER_SETTABLE_STATUSES}, got {status!r}")
        return unwrap(await self.client.patch(f"/bookings/{booking_id}/status", json={"status": status}))

    async def cancel_booking(self, booking_id: str) -> Dict[str, Any]:
        return unwrap(await self.client.delete(f"/bookings/{booking_id}"))

    async def get_property_bookings(self, property_id: str) -> Dict[str, Any]:
        return unwrap(await self.client.get(f"/bookings/property/{property_id}"))

    async def check_availability(self, property_id: str, check_in: str, check_out: str) -> Dict[str, Any]:
        params = {"property_id": property_id, "check_in": check_in, "check_out": check_out}
        return unwrap(await self.client.get("/bookings/check-availability", params=params))
