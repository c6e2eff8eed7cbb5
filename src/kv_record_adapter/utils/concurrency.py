import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, TypeVar

T = TypeVar("T")

DEFAULT_MAX_CONCURRENCY = 10


async def gather_bounded(operations: Sequence[Callable[[], Awaitable[T]]], max_concurrency: int = DEFAULT_MAX_CONCURRENCY) -> list[T]:
    """Run operations concurrently with at most `max_concurrency` in flight.

    Results are returned in the order of `operations`. The first failure cancels every operation still
    pending or running and is raised to the caller, so the caller observes either all results or exactly
    one error.
    """
    if max_concurrency < 1:
        msg = f"max_concurrency must be at least 1: {max_concurrency}"
        raise ValueError(msg)

    if not operations:
        return []

    semaphore = asyncio.Semaphore(max_concurrency)

    async def run(operation: Callable[[], Awaitable[T]]) -> T:
        async with semaphore:
            return await operation()

    tasks: list[asyncio.Task[T]] = [asyncio.ensure_future(run(operation)) for operation in operations]

    try:
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    except BaseException:
        for task in tasks:
            task.cancel()
        raise

    # Reading every exception marks it as retrieved, so asyncio does not report the others
    errors: list[BaseException] = [error for task in tasks if task in done and (error := _task_error(task)) is not None]

    if not errors:
        return [task.result() for task in tasks]

    for pending_task in pending:
        pending_task.cancel()

    if pending:
        _ = await asyncio.wait(pending)

        for pending_task in pending:
            _ = _task_error(pending_task)

    raise errors[0]


def _task_error(task: asyncio.Task[Any]) -> BaseException | None:
    if task.cancelled():
        return None

    return task.exception()
