"""
Common utilities for stores and models.

Provides reusable functions for:
- Converting application records to plain field-name→value mappings
- Record blob serialization and deserialization
- Namespace validation
"""

import msgspec
import simdjson


__all__ = [
    "to_mapping",
    "from_mapping",
    "serialize_record",
    "deserialize_record",
    "validate_namespace",
]


def to_mapping(record):
    # type: (object) -> dict
    """
    Convert a record to a plain dict of builtin values.

    Supports dicts, dataclasses, msgspec Structs and pydantic models.

    :param record: Application record
    :return: Field-name→value mapping
    :raises TypeError: If the record does not convert to a mapping
    """
    if hasattr(record, "model_dump"):
        mapping = record.model_dump(mode="json")
    else:
        mapping = msgspec.to_builtins(record)
    if not isinstance(mapping, dict):
        raise TypeError(f"Record of type '{type(record).__name__}' does not serialize to a mapping")
    return mapping


def from_mapping(mapping, type_=None):
    # type: (dict, type|None) -> object
    """
    Convert a stored mapping back to a record.

    :param mapping: Decoded record mapping
    :param type_: Target type, None keeps the plain dict
    :return: Record instance
    """
    if type_ is None:
        return mapping
    if hasattr(type_, "model_validate"):
        return type_.model_validate(mapping)
    return msgspec.convert(mapping, type_)


def serialize_record(mapping):
    # type: (dict) -> bytes
    """
    Serialize a record mapping to compact JSON bytes for storage.

    :param mapping: Record mapping
    :return: UTF-8 encoded JSON bytes
    """
    return simdjson.dumps(mapping, separators=(",", ":")).encode("utf-8")


def deserialize_record(data):
    # type: (bytes) -> dict
    """
    Deserialize JSON bytes to a record mapping.

    :param data: UTF-8 encoded JSON bytes
    :return: Record mapping
    :raises ValueError: If the blob is not valid JSON
    """
    return simdjson.loads(data)


def validate_namespace(namespace):
    # type: (str) -> None
    """
    Validate a model namespace.

    Namespaces are the first segment of every key, so they must be non-empty and
    must not contain the ':' separator.

    :param namespace: Namespace to validate
    :raises ValueError: If the namespace is empty or contains ':'
    """
    if not namespace or ":" in namespace:
        raise ValueError(f"Invalid namespace: '{namespace}'. Must be non-empty and must not contain ':'")
