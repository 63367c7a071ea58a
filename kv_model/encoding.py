"""
Order-preserving key encoding.

Builds store keys of the form:

    namespace:indexPrefix[:filterValue]:encodedOrderValue[:id]

The encoded order value is a string whose lexicographic order equals the semantic
order of the field value, so a prefix scan over an index returns records sorted by
the order field. Supported value kinds are str, int, float and bool.

Encoding rules:
  STRING asc   → right-padded with spaces to `string_order_pad_length`
  STRING desc  → every character mirrored below U+10FFFF, padded with U+10FFFF,
                 optionally base32hex armored ('=' replaced by '-')
  STRING unord → verbatim
  INT asc      → zero-padded to 19 digits (signed 64-bit range)
  INT desc     → (2**63 - 1 - value) zero-padded to 19 digits, non-negative only
  FLOAT asc    → repr(value), no padding; descending order is rejected
  BOOL         → "true" / "false"

Known limitations: negative integers do not sort correctly in ascending order,
ascending floats spanning different exponents do not sort correctly, and strings
at or above the pad length stop sorting correctly against longer strings.
"""

import base64
import math
import sys
from typing import TYPE_CHECKING

from kv_model.errors import UnsupportedEncodingError
from kv_model.index import OrderType

if TYPE_CHECKING:
    from kv_model.index import Index, Query  # noqa: F401


__all__ = [
    "MAX_INT64",
    "MIN_INT64",
    "MAX_CODEPOINT",
    "INT_WIDTH",
    "title_field",
    "index_prefix",
    "format_scalar",
    "encode_value",
    "ordered_string_key",
    "index_to_key",
    "query_to_list_key",
]


MAX_INT64 = 2**63 - 1
MIN_INT64 = -(2**63)
MAX_CODEPOINT = sys.maxunicode
INT_WIDTH = 19
ASC_PAD_CHAR = " "
DESC_PAD_CHAR = chr(MAX_CODEPOINT)
BASE32_PAD_CHAR = "-"
SEPARATOR = ":"


def _is_separator(char):
    # type: (str) -> bool
    if char.isascii():
        return not (char.isalnum() or char == "_")
    if char.isalpha() or char.isdigit():
        return False
    return char.isspace()


def title_field(name):
    # type: (str) -> str
    """
    Upper-case the first letter of every word in a field name.

    Unlike str.title() the remaining characters are untouched, so `userId` becomes
    `UserId` and `created_at` becomes `Created_at`.
    """
    chars = []
    previous = " "
    for char in name:
        chars.append(char.upper() if _is_separator(previous) else char)
        previous = char
    return "".join(chars)


def index_prefix(index):
    # type: (Index) -> str
    """
    Name of an index inside a namespace.

    :param index: Index definition
    :return: `by<Field>`, `byOrdered<Field>` or `byDescOrdered<Field>`
    """
    field = title_field(index.field_name)
    if index.order.type == OrderType.unordered:
        return f"by{field}"
    desc = "Desc" if index.order.type == OrderType.desc else ""
    return f"by{desc}Ordered{field}"


def format_scalar(value, field_name=""):
    # type: (object, str) -> str
    """
    Render a scalar verbatim for use inside a key.

    :param value: str, int, float or bool
    :param field_name: Field the value belongs to (for error messages)
    :return: String form, bools as `true`/`false`
    :raises UnsupportedEncodingError: For any other value kind
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise UnsupportedEncodingError(field_name, value)


def encode_value(index, field_name, value):
    # type: (Index, str, object) -> str
    """
    Encode the order field value of a record for `index`.

    :param index: Index whose order type and string options apply
    :param field_name: Name of the field being encoded (for error messages)
    :param value: Field value
    :return: Lexicographically sortable key fragment
    :raises UnsupportedEncodingError: If the value kind has no encoding
    """
    order_type = index.order.type

    # bool is an int subclass, check it first
    if isinstance(value, bool):
        return format_scalar(value)

    if isinstance(value, str):
        if order_type == OrderType.unordered:
            return value
        return ordered_string_key(index, value)

    if isinstance(value, int):
        if not MIN_INT64 <= value <= MAX_INT64:
            raise UnsupportedEncodingError(field_name, value, "integer outside signed 64-bit range")
        if order_type == OrderType.desc:
            if value < 0:
                raise UnsupportedEncodingError(field_name, value, "negative integers cannot be ordered descending")
            return f"{MAX_INT64 - value:0{INT_WIDTH}d}"
        return f"{value:0{INT_WIDTH}d}"

    if isinstance(value, float):
        if math.isnan(value):
            raise UnsupportedEncodingError(field_name, value, "NaN has no order")
        if order_type == OrderType.desc:
            # float_max - value rounds to float_max for every value of normal magnitude
            raise UnsupportedEncodingError(field_name, value, "floats cannot be ordered descending")
        return repr(value)

    raise UnsupportedEncodingError(field_name, value)


def ordered_string_key(index, value):
    # type: (Index, str) -> str
    """
    Pad, reverse and optionally base32 encode an ordered string.

    Ascending strings are padded with a space, the lowest printable character, so
    shorter strings sort before longer strings sharing their prefix. Descending
    strings mirror every code point and pad with the highest code point.

    :param index: Index providing order type, pad length and base32 flag
    :param value: String to encode
    :return: Key fragment
    """
    descending = index.order.type == OrderType.desc
    if descending:
        chars = "".join(chr(MAX_CODEPOINT - ord(char)) for char in value)
        pad_char = DESC_PAD_CHAR
    else:
        chars = value
        pad_char = ASC_PAD_CHAR

    if len(chars) < index.string_order_pad_length:
        chars += pad_char * (index.string_order_pad_length - len(chars))

    if descending and index.base32_encode:
        # base32hex keeps byte order; '=' must sort below the alphabet
        raw = chars.encode("utf-8", "surrogatepass")
        return base64.b32hexencode(raw).decode("ascii").replace("=", BASE32_PAD_CHAR)
    return chars


def index_to_key(namespace, index, record_id, entry, append_id=True):
    # type: (str, Index, object, dict, bool) -> str
    """
    Build the store key of `entry` in `index`.

    The record identity is appended on writes so records sharing an indexed value
    get distinct keys:

        users:byOrderedAge:0000000000000000030:1
        users:byOrderedAge:0000000000000000030:2

    :param namespace: Model namespace
    :param index: Index definition
    :param record_id: Identity value of the record
    :param entry: Record mapping
    :param append_id: True when saving, False when building a lookup key
    :return: Store key
    """
    parts = [namespace, index_prefix(index)]
    if index.has_filter_field:
        parts.append(format_scalar(entry.get(index.field_name), index.field_name))
    parts.append(encode_value(index, index.order_field, entry.get(index.order_field)))
    if append_id:
        parts.append(format_scalar(record_id, "id"))
    return SEPARATOR.join(parts)


def query_to_list_key(namespace, index, query):
    # type: (str, Index, Query) -> str
    """
    Build the prefix to scan for `query` in `index`.

    Scan prefixes end with the separator so a value never matches the keys of a
    longer value sharing its prefix, and a bare index prefix never matches an index
    whose name extends it.

    :param namespace: Model namespace
    :param index: Index matched by the query
    :param query: Query with optional value
    :return: Prefix for a store scan
    """
    if query.value is None:
        return f"{namespace}{SEPARATOR}{index_prefix(index)}{SEPARATOR}"
    if index.has_filter_field:
        value = format_scalar(query.value, index.field_name)
        return f"{namespace}{SEPARATOR}{index_prefix(index)}{SEPARATOR}{value}{SEPARATOR}"
    key = index_to_key(namespace, index, None, {index.field_name: query.value}, append_id=False)
    return key + SEPARATOR
