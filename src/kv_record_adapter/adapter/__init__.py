from kv_record_adapter.adapter.criteria import MatchAll, PrimaryKeyEquality, ResolvedCriteria, Unsupported, resolve_criteria
from kv_record_adapter.adapter.database import DEFAULT_TTL_ATTRIBUTE, RecordStoreAdapter

__all__ = [
    "DEFAULT_TTL_ATTRIBUTE",
    "MatchAll",
    "PrimaryKeyEquality",
    "RecordStoreAdapter",
    "ResolvedCriteria",
    "Unsupported",
    "resolve_criteria",
]
