"""
Store backends for kv-model.

- MemoryStore: sorted in-memory store, no persistence
- LmdbStore: LMDB-backed durable store
"""
