"""Secondary indexes for ordered key-value stores."""

from platformdirs import PlatformDirs
from importlib import metadata

__package_name__ = "kv-model"
__author__ = "kv-model"
__version__ = metadata.version(__package_name__)
dirs = PlatformDirs(appname=__package_name__, appauthor=__author__)

from kv_model.settings import ModelSettings, model_settings, get_store  # noqa: E402
from kv_model.index import Index, Order, OrderType, Query, by_equality, equals, indexes  # noqa: E402
from kv_model.model import Model, ModelOptions  # noqa: E402
from kv_model.errors import (  # noqa: E402
    ModelError,
    NotFoundError,
    MultipleRecordsFoundError,
    NoMatchingIndexError,
    MissingIdentityError,
    UniqueConstraintViolation,
    UnsupportedEncodingError,
    UnsupportedDeleteQueryError,
    StoreError,
)

__all__ = [
    "Model",
    "ModelOptions",
    "Index",
    "Order",
    "OrderType",
    "Query",
    "by_equality",
    "equals",
    "indexes",
    "ModelSettings",
    "model_settings",
    "get_store",
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
