"""
Key-Value Store Protocol Definition

Defines the interface a store must satisfy for Model to maintain indexes on top of
it. The store only needs upserts, deletes and ordered prefix scans; no transactions
are required or used.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class StoreProtocol(Protocol):
    """
    Protocol for ordered key-value store backends.

    All methods are synchronous. Keys are strings, values are opaque bytes.

    Implementations should honour the exception contract:
    - StoreError: Any backend failure (I/O, full disk, closed environment)
    """

    def write(self, key, value):
        # type: (str, bytes) -> None
        """
        Insert or replace the value stored under `key`.

        :param key: Store key
        :param value: Record blob
        :raises StoreError: If the backend fails
        """
        ...

    def read(self, key, prefix=False):
        # type: (str, bool) -> list[tuple[str, bytes]]
        """
        Exact lookup, or range scan when `prefix` is set.

        Scans must return items in the store's native key order, which Model
        relies on for ordered listing.

        :param key: Exact key or key prefix
        :param prefix: Return every item whose key starts with `key`
        :return: List of (key, value) tuples ordered by key
        :raises StoreError: If the backend fails
        """
        ...

    def delete(self, key):
        # type: (str) -> None
        """
        Remove `key`. Deleting a missing key is a no-op.

        :param key: Store key
        :raises StoreError: If the backend fails
        """
        ...

    def close(self):
        # type: () -> None
        """Release backend resources. Safe to call more than once."""
        ...
