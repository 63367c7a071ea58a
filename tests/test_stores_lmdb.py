"""Test LmdbStore implementation."""

import lmdb
import pytest

from kv_model.errors import StoreError
from kv_model.protocols.store import StoreProtocol
from kv_model.stores.lmdb import LmdbStore


def test_lmdb_store_implements_protocol(lmdb_store):
    """Test that LmdbStore implements StoreProtocol."""
    assert isinstance(lmdb_store, StoreProtocol)


def test_create_store_file(tmp_path):
    """Test that the store is a single file in a created parent directory."""
    path = tmp_path / "nested" / "dir" / "store.lmdb"
    store = LmdbStore(path)
    assert path.is_file()
    assert store.path == str(path)
    store.close()


def test_write_and_read_exact(lmdb_store):
    """Test exact lookup round trip."""
    lmdb_store.write("a:1", b"one")
    assert lmdb_store.read("a:1") == [("a:1", b"one")]
    assert lmdb_store.read("a:2") == []


def test_write_replaces_value(lmdb_store):
    """Test that writes are upserts."""
    lmdb_store.write("a:1", b"one")
    lmdb_store.write("a:1", b"uno")
    assert lmdb_store.read("a:1") == [("a:1", b"uno")]
    assert len(lmdb_store) == 1


def test_prefix_scan_ordered(lmdb_store):
    """Test that prefix scans return keys in lexicographic order."""
    for key in ["b:2", "a:3", "b:1", "a:1", "c:1", "b:10"]:
        lmdb_store.write(key, key.encode())
    assert [key for key, _ in lmdb_store.read("b:", prefix=True)] == ["b:1", "b:10", "b:2"]
    assert [key for key, _ in lmdb_store.read("", prefix=True)] == ["a:1", "a:3", "b:1", "b:10", "b:2", "c:1"]
    assert lmdb_store.read("d:", prefix=True) == []
    assert lmdb_store.read("z", prefix=True) == []


def test_prefix_scan_orders_by_code_point(lmdb_store):
    """Test that UTF-8 byte order matches code point order."""
    high = chr(0x10FFFF)
    lmdb_store.write("k:" + high, b"high")
    lmdb_store.write("k:a", b"low")
    lmdb_store.write("k:\ue000", b"mid")
    assert lmdb_store.read("k:", prefix=True) == [("k:a", b"low"), ("k:\ue000", b"mid"), ("k:" + high, b"high")]


def test_surrogate_keys_round_trip(lmdb_store):
    """Test that keys holding lone surrogates are stored and decoded."""
    key = "k:" + chr(0xD900)
    lmdb_store.write(key, b"value")
    assert lmdb_store.read("k:", prefix=True) == [(key, b"value")]


def test_delete(lmdb_store):
    """Test deleting keys and missing keys."""
    lmdb_store.write("a:1", b"one")
    lmdb_store.write("a:2", b"two")
    lmdb_store.delete("a:1")
    lmdb_store.delete("a:0")
    assert lmdb_store.read("a:", prefix=True) == [("a:2", b"two")]


def test_persistence(tmp_path):
    """Test that data survives reopening."""
    path = tmp_path / "store.lmdb"
    store = LmdbStore(path)
    store.write("a:1", b"one")
    store.close()

    reopened = LmdbStore(path)
    assert reopened.read("a:1") == [("a:1", b"one")]
    reopened.close()


def test_map_size_grows_when_full(tmp_path):
    """Test automatic map_size doubling on MapFullError."""
    store = LmdbStore(tmp_path / "store.lmdb", lmdb_options={"map_size": 64 * 1024, "sync": False})
    initial = store.map_size
    for i in range(64):
        store.write(f"k:{i:04d}", b"x" * 2048)
    assert store.map_size > initial
    assert len(store.read("k:", prefix=True)) == 64
    store.close()


def test_key_too_long_raises_store_error(lmdb_store):
    """Test that LMDB errors are wrapped in StoreError."""
    with pytest.raises(StoreError, match="Failed to write"):
        lmdb_store.write("k" * 1024, b"value")


def test_store_error_keeps_cause(lmdb_store):
    """Test that the original LMDB error is chained."""
    with pytest.raises(StoreError) as exc_info:
        lmdb_store.write("k" * 1024, b"value")
    assert isinstance(exc_info.value.__cause__, lmdb.Error)
    assert isinstance(exc_info.value, OSError)


def test_closed_store_raises_store_error(tmp_path):
    """Test operations on a closed environment."""
    store = LmdbStore(tmp_path / "store.lmdb")
    store.close()
    with pytest.raises(StoreError):
        store.read("a", prefix=True)


def test_open_invalid_path_raises_store_error(tmp_path):
    """Test that opening a directory path as a store file fails."""
    with pytest.raises(StoreError, match="Failed to open"):
        LmdbStore(tmp_path, lmdb_options={"create": False})
