"""
=============================================================================
IN-MEMORY ITEM STORE
=============================================================================

The single shared resource of the server: a keyed collection of items with
its own identifier counter.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                          ItemStore                                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   _items:    {1: Item(1, "Learn Python", True),                     │
    │               3: Item(3, "Share it with the world", False)}         │
    │                                                                      │
    │   _next_id:  4      ← always > every id ever handed out             │
    │                       (id 2 was deleted and is never reused)        │
    │                                                                      │
    │   _lock:     ReadWriteLock                                          │
    │              get_all / get        → read lock (shared)              │
    │              create/update/delete → write lock (exclusive)          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
WHY FROZEN ITEMS?
=============================================================================

Item is a frozen dataclass. A stored item is never modified in place, it
is only ever replaced by a new value under the write lock. So a snapshot
returned by get_all() can be handed to another thread (or serialized
after the lock is released) without anyone seeing half an update.

=============================================================================
LIFECYCLE
=============================================================================

One store is created at startup and passed to the handlers that need it.
There is no module-level instance: tests build as many as they like.
Nothing is persisted; a restart starts from an empty (or seeded) store.

=============================================================================
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Optional, Tuple
import logging

from .locks import ReadWriteLock


logger = logging.getLogger(__name__)


class InvalidItemError(ValueError):
    """Raised when client data cannot be turned into an Item."""


@dataclass(frozen=True)
class Item:
    """
    A single stored record.

    The zero value Item() (id 0, empty title, not completed) is what the
    store hands back alongside found=False.
    """

    id: int = 0
    title: str = ""
    completed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation: {"id": ..., "title": ..., "completed": ...}."""
        return {"id": self.id, "title": self.title, "completed": self.completed}

    @classmethod
    def from_dict(cls, data: Any) -> "Item":
        """
        Build an Item from decoded JSON.

        Any "id" in the data is ignored; identifiers belong to the store.
        Unknown keys are ignored. Missing keys keep their zero value.

        Raises:
            InvalidItemError: data is not an object, or a field has the
                wrong type.
        """
        if not isinstance(data, dict):
            raise InvalidItemError("item must be a JSON object")

        title = data.get("title", "")
        if not isinstance(title, str):
            raise InvalidItemError("field 'title' must be a string")

        completed = data.get("completed", False)
        # bool is checked exactly: JSON 0/1 are not accepted as booleans
        if not isinstance(completed, bool):
            raise InvalidItemError("field 'completed' must be a boolean")

        return cls(title=title, completed=completed)


SAMPLE_ITEMS = (
    Item(title="Learn Python", completed=True),
    Item(title="Build a web framework", completed=True),
    Item(title="Share it with the world", completed=False),
)


class ItemStore:
    """
    Thread-safe in-memory store for items.

    Every method may be called from any number of request threads at once.
    Reads share the lock; writes hold it exclusively, and only for the
    dictionary update itself.
    """

    def __init__(self, items: Optional[Iterable[Item]] = None):
        """
        Args:
            items: Optional initial items. They are inserted through
                   create(), so they get fresh ids starting at 1.
        """
        self._lock = ReadWriteLock()
        self._items: Dict[int, Item] = {}
        self._next_id = 1

        for item in items or ():
            self.create(item)

    @classmethod
    def with_samples(cls) -> "ItemStore":
        """Create a store pre-filled with a few sample items."""
        store = cls(SAMPLE_ITEMS)
        logger.debug(f"Seeded store with {len(SAMPLE_ITEMS)} sample items")
        return store

    # =========================================================================
    # READS
    # =========================================================================

    def get_all(self) -> List[Item]:
        """
        Return a snapshot of every stored item.

        The list is a copy: later writes do not show up in it. The order
        is not part of the contract.
        """
        with self._lock.read_locked():
            return list(self._items.values())

    def get(self, item_id: int) -> Tuple[Item, bool]:
        """
        Look up one item.

        Returns:
            (item, True) if present, (Item(), False) otherwise.
        """
        with self._lock.read_locked():
            item = self._items.get(item_id)
        if item is None:
            return Item(), False
        return item, True

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._items)

    # =========================================================================
    # WRITES
    # =========================================================================

    def create(self, item: Item) -> Item:
        """
        Store a new item under the next identifier.

        Whatever id the input carries is discarded.

        Returns:
            The stored item, with its assigned id.
        """
        with self._lock.write_locked():
            stored = replace(item, id=self._next_id)
            self._next_id += 1
            self._items[stored.id] = stored
        return stored

    def update(self, item_id: int, item: Item) -> Tuple[Item, bool]:
        """
        Replace an existing item with new field values.

        This is a full replace, not a merge: every field comes from `item`.
        The stored id is forced to `item_id`.

        Returns:
            (stored, True) on success, (Item(), False) if `item_id` is
            unknown (the store is left untouched).
        """
        with self._lock.write_locked():
            if item_id not in self._items:
                return Item(), False
            stored = replace(item, id=item_id)
            self._items[item_id] = stored
        return stored, True

    def delete(self, item_id: int) -> bool:
        """
        Remove an item.

        Returns:
            True if the item existed, False if there was nothing to remove.
        """
        with self._lock.write_locked():
            return self._items.pop(item_id, None) is not None
