"""libinteractive, spawn processes and drive them interactively."""

from __future__ import annotations

from .__about__ import (
    __author__,
    __copyright__,
    __description__,
    __email__,
    __license__,
    __package_name__,
    __title__,
    __version__,
)
from .channel import ExitChannel
from .context import Context
from .expecter import (
    Expect,
    ExpectAny,
    Expecter,
    ExpectOptions,
    ExpectResult,
    Send,
)
from .shell import spawn_oc, spawn_shell, spawn_ssh
from .spawn_func import ExecSpawnFunc, SpawnFunc
from .spawner import ExpectSpawner, Spawner

__all__ = (
    "Context",
    "ExecSpawnFunc",
    "ExitChannel",
    "Expect",
    "ExpectAny",
    "ExpectOptions",
    "ExpectResult",
    "ExpectSpawner",
    "Expecter",
    "Send",
    "SpawnFunc",
    "Spawner",
    "__author__",
    "__copyright__",
    "__description__",
    "__email__",
    "__license__",
    "__package_name__",
    "__title__",
    "__version__",
    "spawn_oc",
    "spawn_shell",
    "spawn_ssh",
)
