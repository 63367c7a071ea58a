"""
Index maintenance on top of an ordered key-value store.

A Model stores every record once per index: under its identity key and under one
key per declared index. Keys embed the record identity so records sharing an
indexed value never collide:

    # namespace # index        # value             # id
    users:byId:1:1
    users:byOrderedAge:0000000000000000030:1
    users:byOrderedAge:0000000000000000030:2

When an indexed value changes, the key computed from the previous version is
deleted before the new one is written, otherwise the record would stay listed
under its old value:

    posts:byOrderedSlug:hi-there        :1   <- removed on save
    posts:byOrderedSlug:hello-there     :1

Writes are independent store operations. A failure part way through a save leaves
some keys updated and others stale; nothing is rolled back.
"""

import threading
from typing import TYPE_CHECKING

from loguru import logger

from kv_model.encoding import index_to_key, query_to_list_key
from kv_model.errors import (
    MissingIdentityError,
    MultipleRecordsFoundError,
    NoMatchingIndexError,
    NotFoundError,
    UniqueConstraintViolation,
    UnsupportedDeleteQueryError,
    UnsupportedEncodingError,
)
from kv_model.index import default_index, index_matches_query, indexes_match
from kv_model.settings import model_settings
from kv_model.stores import common

if TYPE_CHECKING:
    from kv_model.index import Index, Query  # noqa: F401
    from kv_model.protocols.store import StoreProtocol  # noqa: F401


__all__ = ["Model", "ModelOptions"]


class ModelOptions:
    """Options of a Model."""

    def __init__(self, debug=None, id_index=None):
        # type: (bool|None, Index|None) -> None
        """
        Initialize model options.

        :param debug: Log keys written, deleted and scanned (defaults to model_settings.debug)
        :param id_index: Identity index (defaults to an unordered index on model_settings.identity_field)
        """
        self.debug = model_settings.debug if debug is None else debug
        self.id_index = id_index or default_index()


class Model:
    """
    A place where records can be saved to and queried from.

    Each query requires a matching index, see Index and Query. The identity index
    is always present and appended after the declared indexes.
    """

    def __init__(self, store, namespace, indexes=None, options=None):
        # type: (StoreProtocol, str, list[Index]|None, ModelOptions|None) -> None
        """
        Create a model over `store`.

        :param store: Store implementing StoreProtocol
        :param namespace: Logically separates keys of models sharing one store
        :param indexes: Declared indexes
        :param options: Model options
        :raises ValueError: If the namespace is invalid or two indexes share a shape
        """
        common.validate_namespace(namespace)
        self.store = store
        self.namespace = namespace
        self.options = options or ModelOptions()
        self.indexes = list(indexes or [])
        self._all_indexes = self.indexes + [self.options.id_index]
        self._lock = threading.RLock()

        for pos, index in enumerate(self._all_indexes):
            for other in self._all_indexes[pos + 1 :]:
                if indexes_match(index, other):
                    raise ValueError(
                        f"Duplicate index on field '{index.field_name}' "
                        f"(type '{index.type}', order '{index.order.type.value}')"
                    )

    @property
    def id_index(self):
        # type: () -> Index
        return self.options.id_index

    @property
    def id_field(self):
        # type: () -> str
        return self.options.id_index.field_name

    def save(self, record):
        # type: (object) -> None
        """
        Save a record and maintain all indexes.

        :param record: dict, dataclass, msgspec Struct or pydantic model
        :raises MissingIdentityError: If the record has no identity value
        :raises UnsupportedEncodingError: If an indexed value cannot be encoded
        :raises UniqueConstraintViolation: If a unique value belongs to another record
        :raises StoreError: If the store fails
        """
        entry = common.to_mapping(record)
        blob = common.serialize_record(entry)
        record_id = entry.get(self.id_field)
        if record_id is None or record_id == "":
            raise MissingIdentityError(self.id_field)

        with self._lock:
            old_entry = self._get_entry(record_id)

            # Encode every key first so unsupported values fail before any write
            new_keys = [
                (index, index_to_key(self.namespace, index, record_id, entry, append_id=True))
                for index in self._all_indexes
            ]

            self._check_unique(entry, record_id)

            for index, key in new_keys:
                if old_entry is not None and not indexes_match(self.id_index, index):
                    old_key = self._entry_key(index, record_id, old_entry)
                    if old_key is not None and old_key != key:
                        if self.options.debug:
                            logger.debug(f"Deleting stale key '{old_key}'")
                        self.store.delete(old_key)
                if self.options.debug:
                    logger.debug(f"Saving key '{key}', value: '{blob.decode('utf-8')}'")
                self.store.write(key, blob)

    def read(self, query, type_=None):
        # type: (Query, type|None) -> object
        """
        Read exactly one record matching `query`.

        :param query: Query matching a declared index or the identity index
        :param type_: Type to convert the record to, None returns a dict
        :return: The record
        :raises NoMatchingIndexError: If no index matches the query
        :raises NotFoundError: If no record matches
        :raises MultipleRecordsFoundError: If more than one record matches
        """
        index = self._match_index(query)
        entries = self._scan(index, query)
        if not entries:
            raise NotFoundError(f"No record found for field '{query.field_name}' with value {query.value!r}")
        if len(entries) > 1:
            raise MultipleRecordsFoundError(
                f"Found {len(entries)} records for field '{query.field_name}' with value {query.value!r}"
            )
        return common.from_mapping(entries[0], type_)

    def list(self, query, type_=None):
        # type: (Query, type|None) -> list
        """
        List records matching `query` in index order.

        A query without value lists every record of the index. Query offset and
        limit are applied to the scanned results.

        :param query: Query matching a declared index or the identity index
        :param type_: Type to convert each record to, None returns dicts
        :return: List of records
        :raises NoMatchingIndexError: If no index matches the query
        """
        index = self._match_index(query)
        entries = self._scan(index, query)
        end = query.offset + query.limit if query.limit else None
        return [common.from_mapping(entry, type_) for entry in entries[query.offset : end]]

    def delete(self, query):
        # type: (Query) -> None
        """
        Delete a record and all of its index keys.

        Only identity lookups are supported, e.g. `model.id_index.to_query("1")` or
        `equals("id", "1")`.

        :param query: Equality query on the identity field with a value
        :raises UnsupportedDeleteQueryError: If the query is not an identity lookup
        :raises NotFoundError: If no record has the identity
        """
        if query.field_name != self.id_field or query.type != self.id_index.type:
            raise UnsupportedDeleteQueryError(
                f"Delete query on field '{query.field_name}' does not match identity index '{self.id_field}'"
            )
        if query.value is None:
            raise UnsupportedDeleteQueryError("Delete query requires an identity value")

        with self._lock:
            entry = self._get_entry(query.value)
            if entry is None:
                raise NotFoundError(f"No record found to delete for '{self.id_field}' {query.value!r}")

            record_id = entry[self.id_field]
            for index in self._all_indexes:
                key = self._entry_key(index, record_id, entry)
                if key is None:
                    continue
                if self.options.debug:
                    logger.debug(f"Deleting key '{key}'")
                self.store.delete(key)

    def _match_index(self, query):
        # type: (Query) -> Index
        for index in self._all_indexes:
            if index_matches_query(index, query):
                return index
        raise NoMatchingIndexError(query.field_name, query.type)

    def _scan(self, index, query):
        # type: (Index, Query) -> list[dict]
        """
        Stored mappings under the scan prefix of `query`, in key order.

        Unordered and filter values are written verbatim, so the prefix for `a` also
        covers keys of `a:b`. Entries whose stored value differs from the query value
        are dropped.
        """
        key = query_to_list_key(self.namespace, index, query)
        if self.options.debug:
            logger.debug(f"Listing key '{key}'")
        entries = [common.deserialize_record(value) for _, value in self.store.read(key, prefix=True)]
        if query.value is None:
            return entries
        return [entry for entry in entries if entry.get(index.field_name) == query.value]

    def _get_entry(self, record_id):
        # type: (object) -> dict|None
        """Stored mapping of the record with `record_id`, None if absent."""
        entries = self._scan(self.id_index, self.id_index.to_query(record_id))
        return entries[0] if entries else None

    def _entry_key(self, index, record_id, entry):
        # type: (Index, object, dict) -> str|None
        """Key of a stored entry in `index`, None if its value was never encodable."""
        try:
            return index_to_key(self.namespace, index, record_id, entry, append_id=True)
        except UnsupportedEncodingError as e:
            if self.options.debug:
                logger.debug(f"No key for stored record {record_id!r} in index '{index.field_name}': {e}")
            return None

    def _check_unique(self, entry, record_id):
        # type: (dict, object) -> None
        for index in self.indexes:
            if not index.unique:
                continue
            value = entry.get(index.field_name)
            for stored in self._scan(index, index.to_query(value)):
                owner = stored.get(self.id_field)
                if owner != record_id:
                    raise UniqueConstraintViolation(index.field_name, value)
