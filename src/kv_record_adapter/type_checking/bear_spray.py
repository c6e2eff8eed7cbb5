from collections.abc import Callable
from typing import Any, TypeVar

from beartype import BeartypeConf, BeartypeStrategy, beartype

F = TypeVar("F", bound=Callable[..., Any])

# Constant-time checks: one randomly chosen item of a container is checked per call
_enforce_conf = BeartypeConf(strategy=BeartypeStrategy.O1)


def bear_enforce(func: F) -> F:
    """Check the annotated argument and return types of `func` at call time."""
    return beartype(conf=_enforce_conf)(func)
