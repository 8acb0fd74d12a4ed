# src/rooma_client/bookings_store.py

from typing import Any, Dict, Literal, Mapping, Optional

from pydantic import Field

from .optimistic_store import OptimisticStore, StoredEntity

BOOKINGS_STORAGE_KEY = "rooma_bookings"

# "confirmed" is reserved for a server-confirmed booking; nothing in this layer sets it
BookingStatus = Literal["pending", "confirmed", "cancelled"]


class Booking(StoredEntity):
    property_id: int
    # Snapshot of the listing as shown when the booking was made
    listing: Optional[Dict[str, Any]] = Field(default=None, alias="property")
    check_in: str
    check_out: str
    guests: int
    total_price: float
    status: BookingStatus = "pending"


class BookingsStore(OptimisticStore[Booking]):
    entity_model = Booking
    storage_key = BOOKINGS_STORAGE_KEY
    id_prefix = "booking"

    def add(self, data: Mapping[str, Any]) -> None:
        """New bookings always start out pending, whatever status the caller passed."""
        entity = self._build(data, status="pending")
        self._commit(self._items + [entity])

    def cancel(self, booking_id: str) -> None:
        self.update(booking_id, status="cancelled")

    def get_booking(self, booking_id: str) -> Optional[Booking]:
        return self.get(booking_id)
