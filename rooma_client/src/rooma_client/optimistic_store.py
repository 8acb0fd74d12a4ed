# src/rooma_client/optimistic_store.py

import logging
import random
import string
import time
from datetime import datetime
from typing import Any, Callable, Generic, List, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, TypeAdapter
from pydantic.alias_generators import to_camel

from .local_storage import LocalStorage
from .token_storage import utc_now

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase
_ID_SUFFIX_LENGTH = 9
# Fields the store owns; callers cannot supply them on add
_GENERATED_FIELDS = ("id", "created_at", "createdAt")


def generate_local_id(prefix: str) -> str:
    """`<prefix>_<epoch millis>_<9 base36 chars>`: unique enough for one device, not globally."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=_ID_SUFFIX_LENGTH))
    return f"{prefix}_{time.time_ns() // 1_000_000}_{suffix}"


class StoredEntity(BaseModel):
    """Base for locally created records; persisted with camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    created_at: str


EntityT = TypeVar("EntityT", bound=StoredEntity)


class OptimisticStore(Generic[EntityT]):
    """
    A collection mutated locally and immediately, mirrored to one durable storage slot.

    Every mutation writes the full collection to storage first and only then swaps it in
    memory, so after any mutating call returns the two agree. Reads never touch the network.
    Subclasses set `entity_model`, `storage_key` and `id_prefix`.
    """

    entity_model: Type[EntityT]
    storage_key: str
    id_prefix: str

    def __init__(self, storage: LocalStorage, clock: Callable[[], datetime] = utc_now):
        self.storage = storage
        self.clock = clock
        self._adapter = TypeAdapter(List[self.entity_model])
        self._items: List[EntityT] = []

    @property
    def items(self) -> List[EntityT]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def load(self) -> None:
        """Reads the slot back; a missing or unreadable slot gives an empty collection."""
        stored = self.storage.get_item(self.storage_key)
        if stored is None:
            self._items = []
            return
        try:
            self._items = self._adapter.validate_json(stored)
        except ValueError as e:
            logger.error(f"{type(self).__name__}: Failed to load '{self.storage_key}', starting empty: {e}")
            self._items = []

    def _commit(self, items: List[EntityT]) -> None:
        snapshot = self._adapter.dump_json(items, by_alias=True).decode("utf-8")
        self.storage.set_item(self.storage_key, snapshot)
        self._items = items

    def _build(self, data: Mapping[str, Any], **overrides: Any) -> EntityT:
        fields = {key: value for key, value in data.items() if key not in _GENERATED_FIELDS}
        fields.update(overrides)
        fields["id"] = generate_local_id(self.id_prefix)
        fields["created_at"] = self.clock().isoformat()
        return self.entity_model.model_validate(fields)

    def add(self, data: Mapping[str, Any]) -> None:
        entity = self._build(data)
        self._commit(self._items + [entity])

    def get(self, entity_id: str) -> Optional[EntityT]:
        return next((item for item in self._items if item.id == entity_id), None)

    def filter(self, predicate: Callable[[EntityT], bool]) -> List[EntityT]:
        return [item for item in self._items if predicate(item)]

    def update(self, entity_id: str, **changes: Any) -> None:
        """Applies `changes` to the matching entity. Unknown ids change nothing but still persist."""
        updated = [
            item.model_copy(update=changes) if item.id == entity_id else item
            for item in self._items
        ]
        self._commit(updated)
