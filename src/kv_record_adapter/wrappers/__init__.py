from kv_record_adapter.wrappers.base import BaseConnectionWrapper
from kv_record_adapter.wrappers.logging import LoggingConnectionWrapper

__all__ = ["BaseConnectionWrapper", "LoggingConnectionWrapper"]
