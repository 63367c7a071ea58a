"""
Runtime settings for kv-model.

Provides configuration management using Pydantic settings with support for:
- Environment variables with KV_MODEL_ prefix
- Runtime settings override
- Type validation and defaults

The settings supply defaults for ModelOptions (identity field, debug logging) and
for indexes built without explicit string options, and select the store backend
returned by get_store().
"""

import sys
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import urlparse

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

import kv_model

if TYPE_CHECKING:
    from kv_model.protocols.store import StoreProtocol  # noqa: F401


__all__ = [
    "ModelSettings",
    "model_settings",
    "get_store",
]


class ModelSettings(BaseSettings):
    """
    Application settings for kv-model.

    Settings can be configured via:
    - Environment variables (prefixed with KV_MODEL_)
    - Direct instantiation with parameters
    - Runtime override using the override() method

    Attributes:
        store_uri: URI specifying store backend and location. Supported schemes:
                   - memory:// → In-memory store (no persistence)
                   - lmdb:///path → LMDB store file at path
        identity_field: Name of the record identity field
        string_order_pad_length: Default pad length for ordered string keys
        base32_encode: Default base32 armoring of descending string keys
        debug: Log every written, deleted and scanned key
    """

    store_uri: str = Field(
        f"lmdb:///{(Path(kv_model.dirs.user_data_dir) / 'store.lmdb').as_posix()}",
        description="URI specifying store backend (memory://, lmdb://)",
    )

    identity_field: str = Field("id", min_length=1, description="Record identity field name")

    string_order_pad_length: int = Field(16, ge=0, description="Pad length for ordered string keys")

    base32_encode: bool = Field(False, description="Base32 armor descending string keys")

    debug: bool = Field(False, description="Log keys written, deleted and scanned")

    model_config = SettingsConfigDict(
        env_prefix="KV_MODEL_",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_assignment=True,
    )

    def override(self, update=None):
        # type: (dict|None) -> ModelSettings
        """
        Returns an updated and validated deep copy of the current settings instance.

        :param update: Dictionary of field names and values to override.
        :return: New ModelSettings instance with updated and validated fields.
        """
        update = update or {}

        settings = self.model_copy(deep=True)
        # Set fields individually so validation gets triggered
        for field, value in update.items():
            setattr(settings, field, value)
        return settings


model_settings = ModelSettings()


def get_store(settings=None):
    # type: (ModelSettings|None) -> StoreProtocol
    """
    Factory function to create a store from settings.

    Supported URI schemes:
    - memory:// → MemoryStore (in-memory, no persistence)
    - lmdb:///path → LmdbStore (LMDB file at path)

    :param settings: Settings to use (defaults to the module settings)
    :return: Store instance implementing StoreProtocol
    :raises ValueError: If URI scheme is not supported or missing
    """
    settings = settings or model_settings
    uri = settings.store_uri

    if uri.startswith("memory://"):
        from kv_model.stores.memory import MemoryStore

        return MemoryStore()

    if "://" not in uri:
        raise ValueError(
            f"KV_MODEL_STORE_URI requires explicit scheme, got: '{uri}'. Supported schemes: memory://, lmdb:///path"
        )

    parsed = urlparse(uri)

    if parsed.scheme == "lmdb":
        from kv_model.stores.lmdb import LmdbStore

        path = parsed.path
        if sys.platform == "win32" and path.startswith("/") and len(path) > 2 and path[2] == ":":
            path = path[1:]  # pragma: no cover - Remove leading '/' from '/C:/path' on Windows
        elif path.startswith("//"):  # pragma: no cover - Unix-specific path handling
            path = path[1:]
        if not path:
            raise ValueError(f"KV_MODEL_STORE_URI requires a path for lmdb://, got: '{uri}'")

        return LmdbStore(path)

    raise ValueError(f"Unsupported KV_MODEL_STORE_URI scheme: '{uri}'. Supported schemes: memory://, lmdb://")
