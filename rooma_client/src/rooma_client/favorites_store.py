# src/rooma_client/favorites_store.py

import json
import logging
from typing import Dict, List, Union

from .local_storage import LocalStorage

logger = logging.getLogger(__name__)

PROPERTY_FAVORITES_KEY = "nestquarter_favorites"
GUEST_REQUEST_FAVORITES_KEY = "nestquarter_guest_request_favorites"
ROOMMATE_FAVORITES_KEY = "nestquarter_roommate_favorites"

FavoriteId = Union[int, str]


class FavoritesStore:
    """
    Saved property, guest request and roommate listing ids, one storage slot per kind.
    Same contract as the optimistic stores: full-list writes, corrupt slots load empty.
    """

    SLOTS = (PROPERTY_FAVORITES_KEY, GUEST_REQUEST_FAVORITES_KEY, ROOMMATE_FAVORITES_KEY)

    def __init__(self, storage: LocalStorage):
        self.storage = storage
        self._lists: Dict[str, List[FavoriteId]] = {key: [] for key in self.SLOTS}

    def load(self) -> None:
        loaded = {}
        try:
            for key in self.SLOTS:
                stored = self.storage.get_item(key)
                if stored is None:
                    continue
                ids = json.loads(stored)
                if not isinstance(ids, list):
                    raise ValueError(f"'{key}' does not hold a list")
                loaded[key] = ids
        except ValueError as e:
            logger.error(f"FavoritesStore: Failed to load favorites, starting empty: {e}")
            self._lists = {key: [] for key in self.SLOTS}
            return
        self._lists.update(loaded)

    def _add(self, key: str, item_id: FavoriteId) -> None:
        current = self._lists[key]
        if item_id in current:
            return
        self._commit(key, current + [item_id])

    def _remove(self, key: str, item_id: FavoriteId) -> None:
        self._commit(key, [existing for existing in self._lists[key] if existing != item_id])

    def _commit(self, key: str, ids: List[FavoriteId]) -> None:
        self.storage.set_item(key, json.dumps(ids))
        self._lists[key] = ids

    # --- Properties ---

    @property
    def favorites(self) -> List[FavoriteId]:
        return list(self._lists[PROPERTY_FAVORITES_KEY])

    def add_favorite(self, property_id: int) -> None:
        self._add(PROPERTY_FAVORITES_KEY, property_id)

    def remove_favorite(self, property_id: int) -> None:
        self._remove(PROPERTY_FAVORITES_KEY, property_id)

    def is_favorite(self, property_id: int) -> bool:
        return property_id in self._lists[PROPERTY_FAVORITES_KEY]

    # --- Guest requests ---

    @property
    def guest_request_favorites(self) -> List[FavoriteId]:
        return list(self._lists[GUEST_REQUEST_FAVORITES_KEY])

    def add_guest_request_favorite(self, request_id: str) -> None:
        self._add(GUEST_REQUEST_FAVORITES_KEY, request_id)

    def remove_guest_request_favorite(self, request_id: str) -> None:
        self._remove(GUEST_REQUEST_FAVORITES_KEY, request_id)

    def is_guest_request_favorite(self, request_id: str) -> bool:
        return request_id in self._lists[GUEST_REQUEST_FAVORITES_KEY]

    # --- Roommate listings ---

    @property
    def roommate_favorites(self) -> List[FavoriteId]:
        return list(self._lists[ROOMMATE_FAVORITES_KEY])

    def add_roommate_favorite(self, listing_id: str) -> None:
        self._add(ROOMMATE_FAVORITES_KEY, listing_id)

    def remove_roommate_favorite(self, listing_id: str) -> None:
        self._remove(ROOMMATE_FAVORITES_KEY, listing_id)

    def is_roommate_favorite(self, listing_id: str) -> bool:
        return listing_id in self._lists[ROOMMATE_FAVORITES_KEY]
