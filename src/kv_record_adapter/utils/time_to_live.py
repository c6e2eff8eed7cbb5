import math
from numbers import Real
from typing import Any, Final, SupportsFloat

from kv_record_adapter.errors import InvalidTTLError

NO_EXPIRY: Final[int] = -1


def prepare_record_ttl(t: Any) -> float | None:  # pyright: ignore[reportAny]
    """Prepare the TTL found in a record for use in a write.

    Returns None when the record should not expire: the TTL is missing, zero, or the `-1` sentinel.
    Numeric strings are accepted and converted, as records frequently arrive from form or query input.

    Booleans, non-numeric values, non-finite values and negative values other than `-1` raise an
    InvalidTTLError. A TTL of `True` would otherwise become `1` and expire the record immediately.
    """
    if t is None:
        return None

    if isinstance(t, bool):
        raise InvalidTTLError(ttl=t, extra_info={"type": type(t).__name__})

    if isinstance(t, str):
        try:
            t = float(t.strip() or 0)
        except ValueError as e:
            raise InvalidTTLError(ttl=t, extra_info={"type": "str"}) from e

    if not isinstance(t, Real | SupportsFloat):  # pyright: ignore[reportUnnecessaryIsInstance]
        raise InvalidTTLError(ttl=t, extra_info={"type": type(t).__name__})

    ttl = float(t)

    if not math.isfinite(ttl):
        raise InvalidTTLError(ttl=t)

    if ttl in (0, NO_EXPIRY):
        return None

    if ttl < 0:
        raise InvalidTTLError(ttl=t)

    return ttl
