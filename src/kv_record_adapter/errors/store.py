"""Store-level error classes."""

from kv_record_adapter.errors.base import RecordAdapterError


class RecordStoreError(RecordAdapterError):
    """Base exception for all key-value connection errors."""


class StoreSetupError(RecordStoreError):
    """Raised when a connection setup fails."""


class StoreConnectionError(RecordStoreError):
    """Raised when unable to connect to or communicate with the underlying store."""
