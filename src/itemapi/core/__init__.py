"""
=============================================================================
CORE: SHARED STATE
=============================================================================

The part of the server that every request thread touches:

    ItemStore       - keyed collection of items, owns id allocation
    ReadWriteLock   - lets reads run in parallel, serializes writes

Everything here is plain in-memory Python. Nothing blocks on I/O, so no
operation needs its own timeout.

=============================================================================
"""

from .locks import ReadWriteLock
from .store import Item, ItemStore, InvalidItemError, SAMPLE_ITEMS

__all__ = [
    "Item",              # The stored record
    "ItemStore",         # Thread-safe store
    "InvalidItemError",  # Bad client data for an Item
    "ReadWriteLock",     # Shared/exclusive lock
    "SAMPLE_ITEMS",      # Seed data
]
