import json
import re

import pytest

from rooma_client.bookings_store import BOOKINGS_STORAGE_KEY, BookingsStore
from rooma_client.favorites_store import PROPERTY_FAVORITES_KEY, FavoritesStore
from rooma_client.optimistic_store import generate_local_id
from rooma_client.reviews_store import REVIEWS_STORAGE_KEY, ReviewsStore

BOOKING_INPUT = {"propertyId": 7, "checkIn": "2024-06-01", "checkOut": "2024-06-05", "guests": 2, "totalPrice": 400}


def _persisted(storage, key):
    return json.loads(storage.get_item(key))


def _review(property_id, rating, user_id=1):
    return {"propertyId": property_id, "userId": user_id, "userName": "Ada L", "userInitials": "AL",
            "rating": rating, "comment": "Lovely stay"}


def test_generated_ids_have_prefix_timestamp_and_suffix():
    local_id = generate_local_id("booking")
    assert re.fullmatch(r"booking_\d{13}_[0-9a-z]{9}", local_id)
    assert generate_local_id("booking") != local_id


class TestBookingsStore:
    def test_add_then_cancel(self, storage):
        store = BookingsStore(storage)
        store.add(BOOKING_INPUT)

        assert len(store) == 1
        booking = store.items[0]
        assert booking.status == "pending"
        assert booking.id.startswith("booking_")
        assert booking.property_id == 7
        persisted = _persisted(storage, BOOKINGS_STORAGE_KEY)
        assert len(persisted) == 1
        assert persisted[0]["status"] == "pending"
        assert persisted[0]["propertyId"] == 7
        assert persisted[0]["checkIn"] == "2024-06-01"
        assert persisted[0]["id"] == booking.id

        store.cancel(booking.id)

        assert len(store) == 1
        assert store.get_booking(booking.id).status == "cancelled"
        persisted = _persisted(storage, BOOKINGS_STORAGE_KEY)
        assert len(persisted) == 1
        assert persisted[0]["status"] == "cancelled"

    def test_add_ignores_caller_status_and_id(self, storage):
        store = BookingsStore(storage)
        store.add({**BOOKING_INPUT, "status": "confirmed", "id": "mine"})
        assert store.items[0].status == "pending"
        assert store.items[0].id != "mine"

    def test_cancel_is_idempotent(self, storage):
        store = BookingsStore(storage)
        store.add(BOOKING_INPUT)
        booking_id = store.items[0].id

        store.cancel(booking_id)
        store.cancel(booking_id)

        assert store.get_booking(booking_id).status == "cancelled"
        assert _persisted(storage, BOOKINGS_STORAGE_KEY)[0]["status"] == "cancelled"

    def test_cancel_unknown_id_changes_nothing(self, storage):
        store = BookingsStore(storage)
        store.add(BOOKING_INPUT)
        before = store.items

        store.cancel("booking_0_missing")

        assert store.items == before
        assert [b["status"] for b in _persisted(storage, BOOKINGS_STORAGE_KEY)] == ["pending"]

    def test_load_round_trips_through_storage(self, storage):
        first = BookingsStore(storage)
        first.add({**BOOKING_INPUT, "property": {"title": "Loft near campus"}})
        first.add({**BOOKING_INPUT, "propertyId": 8})

        second = BookingsStore(storage)
        second.load()

        assert [b.property_id for b in second.items] == [7, 8]
        assert second.items[0].listing == {"title": "Loft near campus"}
        assert second.items == first.items

    def test_load_with_missing_slot_stays_empty(self, storage):
        store = BookingsStore(storage)
        store.load()
        assert store.items == []

    @pytest.mark.parametrize("stored", ["{not json", '{"a": 1}', '[{"id": "x"}]', "null"])
    def test_load_with_corrupt_slot_degrades_to_empty(self, storage, stored):
        storage.set_item(BOOKINGS_STORAGE_KEY, stored)
        store = BookingsStore(storage)
        store.add(BOOKING_INPUT)

        store.load()

        assert store.items == []

    def test_failed_write_leaves_memory_untouched(self, storage, monkeypatch):
        store = BookingsStore(storage)
        store.add(BOOKING_INPUT)

        def broken_write(key, value):
            raise OSError("disk full")

        monkeypatch.setattr(storage, "set_item", broken_write)
        with pytest.raises(OSError):
            store.add(BOOKING_INPUT)
        assert len(store) == 1

    def test_items_is_a_copy(self, storage):
        store = BookingsStore(storage)
        store.add(BOOKING_INPUT)
        store.items.clear()
        assert len(store) == 1


class TestReviewsStore:
    def test_average_rating_without_reviews_is_zero(self, storage):
        assert ReviewsStore(storage).get_average_rating(7) == 0

    @pytest.mark.parametrize("ratings, expected", [([4, 5], 4.5), ([3, 4, 4], 3.7), ([5], 5.0), ([1, 2], 1.5)])
    def test_average_rating_rounds_to_one_decimal(self, storage, ratings, expected):
        store = ReviewsStore(storage)
        for rating in ratings:
            store.add(_review(7, rating))
        store.add(_review(8, 1))

        assert store.get_average_rating(7) == expected

    def test_property_reviews_and_persistence(self, storage):
        store = ReviewsStore(storage)
        store.add(_review(7, 4))
        store.add(_review(9, 5, user_id=2))

        reviews = store.get_property_reviews(7)
        assert len(reviews) == 1
        assert reviews[0].id.startswith("review_")
        assert reviews[0].user_initials == "AL"
        persisted = _persisted(storage, REVIEWS_STORAGE_KEY)
        assert [r["propertyId"] for r in persisted] == [7, 9]
        assert "createdAt" in persisted[0]

    def test_corrupt_slot_loads_empty(self, storage):
        storage.set_item(REVIEWS_STORAGE_KEY, "{not json")
        store = ReviewsStore(storage)
        store.load()
        assert store.items == []
        assert store.get_average_rating(7) == 0


class TestFavoritesStore:
    def test_add_remove_and_query(self, storage):
        store = FavoritesStore(storage)
        store.add_favorite(7)
        store.add_favorite(7)
        store.add_roommate_favorite("rm_1")

        assert store.favorites == [7]
        assert store.is_favorite(7)
        assert store.is_roommate_favorite("rm_1")
        assert _persisted(storage, PROPERTY_FAVORITES_KEY) == [7]

        store.remove_favorite(7)
        assert not store.is_favorite(7)
        assert _persisted(storage, PROPERTY_FAVORITES_KEY) == []

    def test_load_restores_all_lists(self, storage):
        first = FavoritesStore(storage)
        first.add_favorite(3)
        first.add_guest_request_favorite("gr_1")

        second = FavoritesStore(storage)
        second.load()
        assert second.favorites == [3]
        assert second.guest_request_favorites == ["gr_1"]
        assert second.roommate_favorites == []

    def test_corrupt_slot_resets_everything(self, storage):
        storage.set_item(PROPERTY_FAVORITES_KEY, "[1, 2]")
        storage.set_item("nestquarter_roommate_favorites", "{not json")
        store = FavoritesStore(storage)
        store.load()
        assert store.favorites == []
        assert store.roommate_favorites == []
