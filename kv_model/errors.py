"""
Exception taxonomy for kv-model.

Every exception derives from ModelError and from the builtin that best describes
it, so callers may catch either the specific class or the builtin category.
"""

__all__ = [
    "ModelError",
    "NotFoundError",
    "MultipleRecordsFoundError",
    "NoMatchingIndexError",
    "MissingIdentityError",
    "UniqueConstraintViolation",
    "UnsupportedEncodingError",
    "UnsupportedDeleteQueryError",
    "StoreError",
]


class ModelError(Exception):
    """Base class for all kv-model errors."""


class NotFoundError(ModelError, LookupError):
    """No record matches a read or delete query."""


class MultipleRecordsFoundError(ModelError, LookupError):
    """A read expecting a single record found more than one."""


class NoMatchingIndexError(ModelError, ValueError):
    """Query shape does not correspond to any declared index."""

    def __init__(self, field_name, type_):
        # type: (str, str) -> None
        self.field_name = field_name
        self.type = type_
        super().__init__(f"For query type '{type_}', field '{field_name}' does not match any indexes")


class MissingIdentityError(ModelError, ValueError):
    """Record lacks a usable identity value."""

    def __init__(self, field_name):
        # type: (str) -> None
        self.field_name = field_name
        super().__init__(f"Record has no value for identity field '{field_name}'")


class UniqueConstraintViolation(ModelError, ValueError):
    """A unique index value is already owned by a different record."""

    def __init__(self, field_name, value):
        # type: (str, object) -> None
        self.field_name = field_name
        self.value = value
        super().__init__(f"Unique index on field '{field_name}' violated by value {value!r}")


class UnsupportedEncodingError(ModelError, TypeError):
    """A field value has no order-preserving key encoding."""

    def __init__(self, field_name, value, reason=None):
        # type: (str, object, str|None) -> None
        self.field_name = field_name
        self.value = value
        message = f"Unhandled type '{type(value).__name__}' for field '{field_name}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class UnsupportedDeleteQueryError(ModelError, ValueError):
    """Delete was requested with a query that is not an identity lookup."""


class StoreError(ModelError, OSError):
    """Failure reported by the underlying key-value store."""
