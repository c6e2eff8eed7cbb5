import json
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

from kv_record_adapter.errors import DeserializationError, SerializationError


def _encode_temporal(obj: Any) -> str:  # pyright: ignore[reportAny]
    if isinstance(obj, datetime | date):
        return obj.isoformat()

    msg = f"Object of type {type(obj).__name__} is not JSON serializable"
    raise TypeError(msg)


def dump_to_json(obj: Mapping[str, Any]) -> str:
    """Serialize a record to the text payload stored under its key.

    Dates and datetimes are written as ISO 8601 strings, the registry turns them back into
    typed values when the record is parsed.
    """
    try:
        return json.dumps(verify_dict(obj=obj), sort_keys=True, default=_encode_temporal)
    except (TypeError, ValueError) as e:
        # ValueError covers circular references
        msg: str = f"Failed to serialize object to JSON: {e}"
        raise SerializationError(msg) from e


def load_from_json(json_str: str | bytes) -> dict[str, Any]:
    try:
        return verify_dict(obj=json.loads(json_str))  # pyright: ignore[reportAny]

    except (json.JSONDecodeError, TypeError) as e:
        msg: str = f"Failed to deserialize JSON string: {e}"
        raise DeserializationError(msg) from e


def verify_dict(obj: Any) -> dict[str, Any]:
    if not isinstance(obj, Mapping):
        msg = "Object is not a dictionary"
        raise DeserializationError(msg)

    if not all(isinstance(key, str) for key in obj):  # pyright: ignore[reportUnknownVariableType]
        msg = "Object contains non-string keys"
        raise DeserializationError(msg)

    return dict(obj)  # pyright: ignore[reportUnknownArgumentType]
