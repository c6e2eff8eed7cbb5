import asyncio
import logging
import os
import platform
import subprocess
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from time import sleep

import pytest

from kv_record_adapter.adapter import RecordStoreAdapter
from kv_record_adapter.connections.memory import MemoryConnection

logger = logging.getLogger(__name__)

logging.basicConfig(level=logging.INFO)

USER_DEFINITION: dict[str, dict[str, str | bool]] = {
    "id": {"type": "string", "primaryKey": True},
    "name": {"type": "string"},
    "age": {"type": "integer"},
}


@pytest.fixture
def memory_connection() -> MemoryConnection:
    return MemoryConnection()


@pytest.fixture
async def adapter(memory_connection: MemoryConnection) -> RecordStoreAdapter:
    """An adapter over an in-memory connection with the `user` collection defined."""
    record_adapter = RecordStoreAdapter(connection=memory_connection)
    await record_adapter.define("user", USER_DEFINITION)
    return record_adapter


async def async_wait_for_true(bool_fn: Callable[[], Awaitable[bool]], tries: int = 10, wait_time: float = 1) -> bool:
    """
    Wait for a store to be ready.
    """
    for _ in range(tries):
        if await bool_fn():
            return True
        await asyncio.sleep(wait_time)
    return False


def get_docker_client():  # noqa: ANN201
    from docker import DockerClient

    return DockerClient.from_env()


def docker_logs(name: str, print_logs: bool = False, raise_on_error: bool = False, log_level: int = logging.INFO) -> list[str]:
    client = get_docker_client()
    try:
        logs: list[str] = client.containers.get(name).logs().decode("utf-8").splitlines()

    except Exception:
        logger.info(f"Container {name} failed to get logs")
        if raise_on_error:
            raise
        return []

    if print_logs:
        logger.info(f"Container {name} logs:")
        for log in logs:
            logger.log(log_level, log)

    return logs


def docker_stop_and_remove(name: str) -> None:
    from docker.errors import NotFound

    client = get_docker_client()
    try:
        container = client.containers.get(name)
    except NotFound:
        return

    logger.info(f"Stopping and removing container {name}")
    try:
        container.stop()
        container.remove()
    except Exception:
        logger.info(f"Container {name} failed to stop or remove")


def docker_wait_container_gone(name: str, max_tries: int = 10, wait_time: float = 1.0) -> bool:
    from docker.errors import NotFound

    client = get_docker_client()
    for _ in range(max_tries):
        try:
            client.containers.get(name)
        except NotFound:
            return True
        sleep(wait_time)
    return False


@contextmanager
def docker_container(name: str, image: str, ports: dict[str, int], environment: dict[str, str] | None = None) -> Iterator[None]:
    logger.info(f"Creating container {name} with image {image} and ports {ports}")
    client = get_docker_client()
    try:
        client.images.pull(image)
        docker_stop_and_remove(name=name)
        docker_wait_container_gone(name=name)
        client.containers.run(name=name, image=image, ports=ports, environment=environment or {}, detach=True)
        logger.info(f"Container {name} created")
        yield
        docker_logs(name, print_logs=True, raise_on_error=False)
    except Exception:
        logger.info(f"Creating container {name} failed")
        docker_logs(name, print_logs=True, raise_on_error=False, log_level=logging.ERROR)
        raise
    finally:
        docker_stop_and_remove(name=name)


def detect_docker() -> bool:
    try:
        result = subprocess.run(["docker", "ps"], check=False, capture_output=True, text=True)  # noqa: S607
    except Exception:
        return False
    else:
        return result.returncode == 0


def detect_on_ci() -> bool:
    return os.getenv("CI", "false") == "true"


def detect_on_windows() -> bool:
    return platform.system() == "Windows"


def detect_on_macos() -> bool:
    return platform.system() == "Darwin"


def should_run_docker_tests() -> bool:
    if detect_on_ci():
        return all([detect_docker(), not detect_on_windows(), not detect_on_macos()])
    return detect_docker()


def should_skip_docker_tests() -> bool:
    return not should_run_docker_tests()
