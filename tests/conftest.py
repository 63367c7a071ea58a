"""Test fixtures for kv-model."""

import pytest

from kv_model.index import Index, Order, OrderType, by_equality
from kv_model.stores.lmdb import LmdbStore
from kv_model.stores.memory import MemoryStore


@pytest.fixture
def memory_store():
    # type: () -> MemoryStore
    """Empty in-memory store."""
    return MemoryStore()


@pytest.fixture
def lmdb_store(tmp_path):
    # type: (typing.Any) -> LmdbStore
    """Non-durable LMDB store in a temporary directory."""
    store = LmdbStore(tmp_path / "store.lmdb", lmdb_options={"sync": False, "metasync": False})
    yield store
    store.close()


@pytest.fixture(params=["memory", "lmdb"])
def store(request, tmp_path):
    # type: (typing.Any, typing.Any) -> StoreProtocol
    """Each store backend in turn."""
    if request.param == "memory":
        yield MemoryStore()
        return
    store = LmdbStore(tmp_path / "store.lmdb", lmdb_options={"sync": False, "metasync": False})
    yield store
    store.close()


@pytest.fixture
def age_index():
    # type: () -> Index
    """Ascending index on age."""
    return by_equality("age")


@pytest.fixture
def age_desc_index():
    # type: () -> Index
    """Descending index on age."""
    return Index(field_name="age", order=Order(field_name="age", type=OrderType.desc))


@pytest.fixture
def email_index():
    # type: () -> Index
    """Unique index on email."""
    return by_equality("email", unique=True)


@pytest.fixture
def sample_users():
    # type: () -> list[dict]
    """Users with distinct ages and names."""
    return [
        {"id": "1", "name": "Carol", "age": 30, "email": "carol@x.com"},
        {"id": "2", "name": "alice", "age": 5, "email": "alice@x.com"},
        {"id": "3", "name": "Bob", "age": 41, "email": "bob@x.com"},
        {"id": "4", "name": "Al", "age": 17, "email": "al@x.com"},
    ]
