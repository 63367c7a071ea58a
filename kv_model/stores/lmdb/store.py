"""
LMDB-backed key-value store.

Keeps every key of a model (primary identity keys and secondary index keys) in the
main database of a single LMDB file. LMDB sorts keys bytewise and UTF-8 byte order
equals code point order, so prefix scans return keys in the same order as the
in-memory store.

Note: LMDB limits keys to 511 bytes. Ordered string keys grow with
`string_order_pad_length` (descending keys take up to 4 bytes per character).
"""

import os

import lmdb
from loguru import logger

from kv_model.errors import StoreError


KEY_ENCODING = "utf-8"
KEY_ERRORS = "surrogatepass"


class LmdbStore:
    """
    Durable LMDB-backed store implementing StoreProtocol.

    Every write is its own LMDB transaction. Model does not group writes, so a
    crash between two writes of one save leaves the other index keys untouched.

    CONCURRENCY: LMDB supports multi-reader/single-writer with built-in locking
    (lock=True). Model state consistency across processes is not guaranteed.
    """

    DEFAULT_LMDB_OPTIONS = {
        "readonly": False,
        "metasync": True,  # Full durability with metadata flush
        "sync": True,
        "mode": 0o644,
        "create": True,
        "readahead": False,  # Better for random access pattern
        "writemap": False,  # Safer, prevents corruption from bad writes
        "meminit": True,
        "map_async": False,
        "max_readers": 126,
        "max_spare_txns": 1,
        "lock": True,
    }

    def __init__(self, path, lmdb_options=None):
        # type: (str | os.PathLike, dict | None) -> None
        """
        Create or open LMDB store at path.

        :param path: Path to LMDB file (subdir=False)
        :param lmdb_options: Custom LMDB options (merged with defaults, subdir is forced)
        :raises StoreError: If the environment cannot be opened
        """
        self.path = os.fspath(path)

        options = self.DEFAULT_LMDB_OPTIONS.copy()
        if lmdb_options:
            options.update(lmdb_options)

        # Path points to file, not directory
        options["subdir"] = False

        parent = os.path.dirname(self.path)
        if parent and options.get("create", True):
            os.makedirs(parent, exist_ok=True)

        try:
            self.env = lmdb.open(self.path, **options)
        except lmdb.Error as e:
            raise StoreError(f"Failed to open LMDB store at '{self.path}': {e}") from e

    @staticmethod
    def _encode_key(key):
        # type: (str) -> bytes
        return key.encode(KEY_ENCODING, KEY_ERRORS)

    @staticmethod
    def _decode_key(key):
        # type: (bytes) -> str
        return bytes(key).decode(KEY_ENCODING, KEY_ERRORS)

    def write(self, key, value):
        # type: (str, bytes) -> None
        """
        Insert or replace a value.

        :param key: Store key
        :param value: Record blob
        :raises StoreError: If LMDB rejects the write

        Note: Automatically doubles map_size if full and retries operation.
        """
        key_bytes = self._encode_key(key)
        try:
            try:
                with self.env.begin(write=True) as txn:
                    txn.put(key_bytes, value)
            except lmdb.MapFullError:
                old_size = self.map_size
                new_size = old_size * 2
                logger.info(f"LmdbStore map_size increased from {old_size:,} to {new_size:,} bytes")
                self.env.set_mapsize(new_size)
                with self.env.begin(write=True) as txn:
                    txn.put(key_bytes, value)
        except lmdb.Error as e:
            raise StoreError(f"Failed to write key '{key}': {e}") from e

    def read(self, key, prefix=False):
        # type: (str, bool) -> list[tuple[str, bytes]]
        """
        Exact lookup or ordered prefix scan.

        :param key: Exact key or key prefix
        :param prefix: Scan every key starting with `key`
        :return: List of (key, value) tuples ordered by key
        :raises StoreError: If LMDB fails
        """
        key_bytes = self._encode_key(key)
        try:
            with self.env.begin() as txn:
                if not prefix:
                    value = txn.get(key_bytes)
                    if value is None:
                        return []
                    return [(key, bytes(value))]

                items = []
                cursor = txn.cursor()
                found_first = cursor.set_range(key_bytes) if key_bytes else cursor.first()
                if found_first:
                    for found, value in cursor:
                        if not found.startswith(key_bytes):
                            break
                        items.append((self._decode_key(found), bytes(value)))
                return items
        except lmdb.Error as e:
            raise StoreError(f"Failed to read key '{key}': {e}") from e

    def delete(self, key):
        # type: (str) -> None
        """
        Remove a key if present.

        :param key: Store key
        :raises StoreError: If LMDB fails
        """
        try:
            with self.env.begin(write=True) as txn:
                txn.delete(self._encode_key(key))
        except lmdb.Error as e:
            raise StoreError(f"Failed to delete key '{key}': {e}") from e

    def __len__(self):
        # type: () -> int
        return self.env.stat()["entries"]

    @property
    def map_size(self):
        # type: () -> int
        """Current LMDB map_size in bytes."""
        return self.env.info()["map_size"]

    def close(self):
        # type: () -> None
        """Close LMDB environment and release resources."""
        self.env.close()

    def __del__(self):
        # type: () -> None
        """Ensure LMDB environment is closed on deletion."""
        if hasattr(self, "env"):
            self.env.close()
