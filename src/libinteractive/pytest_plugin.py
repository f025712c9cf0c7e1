"""libinteractive pytest plugin."""

from __future__ import annotations

import logging
import typing as t

import pytest

from libinteractive.spawn_func.exec import ExecSpawnFunc
from libinteractive.spawner import ExpectSpawner
from libinteractive.test.constants import TEST_EXPECT_TIMEOUT_SECONDS
from libinteractive.test.spawn_func import FakeSpawnFunc

if t.TYPE_CHECKING:
    from collections.abc import Generator

logger = logging.getLogger(__name__)


@pytest.fixture
def expect_timeout() -> float:
    """Default expect timeout for spawned sessions, in seconds."""
    return TEST_EXPECT_TIMEOUT_SECONDS


@pytest.fixture
def fake_spawn_func() -> Generator[FakeSpawnFunc, None, None]:
    """Return a :class:`~libinteractive.test.FakeSpawnFunc`.

    The fake process is exited on teardown so no background waiter outlives
    the test.
    """
    fake = FakeSpawnFunc()
    yield fake
    if not fake.exited.is_set():
        logger.debug("Exiting %r on teardown", fake)
        fake.exit()


@pytest.fixture
def spawner(fake_spawn_func: FakeSpawnFunc) -> ExpectSpawner:
    """Return an :class:`~libinteractive.spawner.ExpectSpawner` over a fake."""
    return ExpectSpawner(fake_spawn_func)


@pytest.fixture
def exec_spawner() -> ExpectSpawner:
    """Return an :class:`~libinteractive.spawner.ExpectSpawner` for real processes."""
    return ExpectSpawner(ExecSpawnFunc())
