"""
In-memory key-value store for testing and development.

Keeps values in a dictionary and the keys in a sorted list so prefix scans return
items in lexicographic key order, like an ordered on-disk store would.
"""

import bisect


class MemoryStore:
    """
    In-memory store implementing StoreProtocol.

    Stores all data in memory. No persistence.
    Useful for testing and development.

    Storage structure:
        _data = {key: value, ...}
        _keys = [key, ...]  (sorted)
    """

    def __init__(self):
        # type: () -> None
        self._data = {}  # type: dict[str, bytes]
        self._keys = []  # type: list[str]

    def write(self, key, value):
        # type: (str, bytes) -> None
        """
        Insert or replace a value.

        :param key: Store key
        :param value: Record blob
        """
        if key not in self._data:
            bisect.insort(self._keys, key)
        self._data[key] = bytes(value)

    def read(self, key, prefix=False):
        # type: (str, bool) -> list[tuple[str, bytes]]
        """
        Exact lookup or ordered prefix scan.

        :param key: Exact key or key prefix
        :param prefix: Scan every key starting with `key`
        :return: List of (key, value) tuples ordered by key
        """
        if not prefix:
            if key in self._data:
                return [(key, self._data[key])]
            return []

        items = []
        for pos in range(bisect.bisect_left(self._keys, key), len(self._keys)):
            found = self._keys[pos]
            if not found.startswith(key):
                break
            items.append((found, self._data[found]))
        return items

    def delete(self, key):
        # type: (str) -> None
        """
        Remove a key if present.

        :param key: Store key
        """
        if self._data.pop(key, None) is None:
            return
        pos = bisect.bisect_left(self._keys, key)
        del self._keys[pos]

    def __len__(self):
        # type: () -> int
        return len(self._data)

    def close(self):
        # type: () -> None
        """
        No-op for in-memory store.

        Provided for protocol compliance.
        """
        pass
