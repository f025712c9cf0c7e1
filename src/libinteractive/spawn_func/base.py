"""Core abstraction for creating and supervising child processes."""

from __future__ import annotations

import typing as t
from typing import Protocol

if t.TYPE_CHECKING:
    from collections.abc import Sequence

    from typing_extensions import Self


class SpawnFunc(Protocol):
    """Protocol for components that create, pipe, start and wait on a process.

    The operations are meaningful in a fixed order on the handle returned by
    :meth:`command`: :meth:`stdin_pipe`, :meth:`stdout_pipe`, :meth:`start`,
    then :meth:`wait`. Failures are raised as the implementation's native
    exceptions.

    Implementations may rely on structural typing rather than inheritance.
    """

    def command(
        self,
        command: str,
        args: Sequence[str] = (),
    ) -> Self:  # pragma: no cover
        """Configure ``command`` with ``args`` and return the handle to drive."""
        ...

    def stdin_pipe(self) -> t.IO[bytes]:  # pragma: no cover
        """Return a writable stream connected to the child's standard input."""
        ...

    def stdout_pipe(self) -> t.IO[bytes]:  # pragma: no cover
        """Return a readable stream connected to the child's standard output."""
        ...

    def start(self) -> None:  # pragma: no cover
        """Start the configured command."""
        ...

    def wait(self) -> None:  # pragma: no cover
        """Block until the process exits, raising if it did not exit cleanly."""
        ...
