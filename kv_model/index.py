"""
Index and query definitions.

An Index declares which field a model can be filtered by, which field orders the
results and in which direction. A Query describes what a caller wants to find and
must structurally match one declared Index:

    users = Model(store, "users", indexes(by_equality("email")))
    users.read(equals("email", "a@x.com"))

Filter and order fields may differ (filter by tag, order by creation time):

    by_tag = Index(field_name="tag", order=Order(field_name="created", type=OrderType.desc))
"""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from kv_model.settings import model_settings


__all__ = [
    "INDEX_TYPE_EQ",
    "QUERY_TYPE_EQ",
    "OrderType",
    "Order",
    "Index",
    "Query",
    "by_equality",
    "equals",
    "indexes",
    "index_matches_query",
    "indexes_match",
    "default_index",
]


INDEX_TYPE_EQ = "eq"
QUERY_TYPE_EQ = "eq"


class OrderType(str, Enum):
    unordered = "unordered"
    asc = "ascending"
    desc = "descending"


class Order(BaseModel):
    """Ordering of keys within an index."""

    model_config = ConfigDict(frozen=True)

    field_name: str = Field("", description="Field to order by (defaults to the filtered field)")
    type: OrderType = Field(OrderType.asc, description="Ordered (asc/desc) or unordered keys")


class Index(BaseModel):
    """
    Declarative description of one index.

    Attributes:
        field_name: Field being filtered
        type: Kind of index (only equality is supported)
        order: Ordering of the keys
        unique: Reject duplicate values of this field across records
        string_order_pad_length: Ordered strings are padded to this many characters.
            Choose a length above the longest expected value, longer strings still
            get stored but stop sorting correctly.
        base32_encode: Base32 armor descending string keys for easier handling
    """

    model_config = ConfigDict(frozen=True)

    field_name: str
    type: Literal["eq"] = INDEX_TYPE_EQ
    order: Order = Field(default_factory=Order)
    unique: bool = False
    string_order_pad_length: int = Field(16, ge=0)
    base32_encode: bool = False

    @property
    def order_field(self):
        # type: () -> str
        """Field used to order keys; falls back to the filtered field."""
        return self.order.field_name or self.field_name

    @property
    def has_filter_field(self):
        # type: () -> bool
        """True when keys embed a filter value ahead of the order value."""
        return self.order_field != self.field_name

    def to_query(self, value=None):
        # type: (Any) -> Query
        """
        Build a query targeting exactly this index.

        :param value: Value to look up, None lists the whole index
        :return: Query matching this index
        """
        return Query(field_name=self.field_name, type=self.type, order=self.order, value=value)


class Query(BaseModel):
    """What a caller wants to find. Must match a declared index by shape."""

    model_config = ConfigDict(frozen=True)

    field_name: str
    type: str = QUERY_TYPE_EQ
    order: Order = Field(default_factory=Order)
    value: Any = None
    offset: int = Field(0, ge=0)
    limit: int = Field(0, ge=0, description="Maximum results for list, 0 is unlimited")


def by_equality(field_name, **kwargs):
    # type: (str, Any) -> Index
    """
    Construct an ascending equality index on `field_name`.

    String options not given in `kwargs` default to the values in model_settings.

    :param field_name: Field to index
    :param kwargs: Further Index attributes (unique, string_order_pad_length, ...)
    :return: Index definition
    """
    kwargs.setdefault("string_order_pad_length", model_settings.string_order_pad_length)
    kwargs.setdefault("base32_encode", model_settings.base32_encode)
    return Index(
        field_name=field_name,
        type=INDEX_TYPE_EQ,
        order=Order(field_name=field_name, type=OrderType.asc),
        **kwargs,
    )


def equals(field_name, value=None, order=OrderType.asc, offset=0, limit=0):
    # type: (str, Any, OrderType, int, int) -> Query
    """
    Equality query filtering records where `field_name` equals `value`.

    :param field_name: Field to filter by
    :param value: Value to match, None lists every record in the index
    :param order: Requested order, must equal the order of the target index
    :param offset: Number of leading results to skip in list
    :param limit: Maximum number of results in list (0 is unlimited)
    :return: Query
    """
    return Query(
        field_name=field_name,
        type=QUERY_TYPE_EQ,
        order=Order(field_name=field_name, type=order),
        value=value,
        offset=offset,
        limit=limit,
    )


def indexes(*items):
    # type: (Index) -> list[Index]
    return list(items)


def default_index(field_name=None):
    # type: (str|None) -> Index
    """Unordered equality index on the identity field (model_settings.identity_field by default)."""
    field_name = field_name or model_settings.identity_field
    return Index(
        field_name=field_name,
        type=INDEX_TYPE_EQ,
        order=Order(field_name=field_name, type=OrderType.unordered),
    )


def index_matches_query(index, query):
    # type: (Index, Query) -> bool
    return (
        index.field_name == query.field_name
        and index.type == query.type
        and index.order.type == query.order.type
    )


def indexes_match(first, second):
    # type: (Index, Index) -> bool
    return (
        first.field_name == second.field_name
        and first.type == second.type
        and first.order.type == second.order.type
    )
