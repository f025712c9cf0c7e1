"""Conftest.py (root-level).

We keep this in root pytest fixtures in pytest's doctest plugin to be available, as well
as avoiding conftest.py from being included in the wheel.
"""

from __future__ import annotations

import typing as t

import pytest
from _pytest.doctest import DoctestItem

from libinteractive.spawner import ExpectSpawner
from libinteractive.test.spawn_func import FakeSpawnFunc

pytest_plugins = ["pytester"]


@pytest.fixture(autouse=True)
def add_doctest_fixtures(
    request: pytest.FixtureRequest,
    doctest_namespace: dict[str, t.Any],
) -> None:
    """Configure doctest fixtures for pytest-doctest."""
    if isinstance(request._pyfuncitem, DoctestItem):
        doctest_namespace["ExpectSpawner"] = ExpectSpawner
        doctest_namespace["FakeSpawnFunc"] = FakeSpawnFunc
        doctest_namespace["fake_spawn_func"] = request.getfixturevalue(
            "fake_spawn_func",
        )
        doctest_namespace["spawner"] = request.getfixturevalue("spawner")
