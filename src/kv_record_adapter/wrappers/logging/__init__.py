from kv_record_adapter.wrappers.logging.wrapper import LoggingConnectionWrapper

__all__ = ["LoggingConnectionWrapper"]
