"""
LMDB Store Package.

Provides the LMDB-backed store implementation for production use.

Exports:
- LmdbStore: StoreProtocol implementation on a single LMDB file
"""

from kv_model.stores.lmdb.store import LmdbStore

__all__ = ["LmdbStore"]
