from kv_model.stores.memory.store import MemoryStore

__all__ = ["MemoryStore"]
