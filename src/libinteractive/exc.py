"""Provide exceptions used by libinteractive.

libinteractive.exc
~~~~~~~~~~~~~~~~~~

Notes
-----
Exceptions in this module inherit from :exc:`LibInteractiveException`.

Errors raised by the operating system while acquiring pipes or starting a
process (:exc:`OSError` and friends) are never wrapped by the spawner; they
reach the caller as-is.
"""

from __future__ import annotations

import typing as t

if t.TYPE_CHECKING:
    from collections.abc import Sequence


class LibInteractiveException(Exception):
    """Base exception for all libinteractive errors."""


class SpawnFuncError(LibInteractiveException):
    """Base exception for misuse of a spawn function handle."""


class CommandNotConfigured(SpawnFuncError):
    """Raised when a handle is used before ``command()`` configured it."""

    def __init__(self, *args: object) -> None:
        super().__init__("command() must be called before pipes or start()")


class PipeAlreadyAcquired(SpawnFuncError):
    """Raised when stdin or stdout was already requested on a handle."""

    def __init__(self, stream: str, *args: object) -> None:
        super().__init__(f"{stream} already set")


class ProcessAlreadyStarted(SpawnFuncError):
    """Raised when a pipe or start() is requested after the process started."""

    def __init__(self, operation: str, *args: object) -> None:
        super().__init__(f"{operation} after process started")


class ProcessNotStarted(SpawnFuncError):
    """Raised when wait() is called before start()."""

    def __init__(self, *args: object) -> None:
        super().__init__("process not started")


class WaitAlreadyCalled(SpawnFuncError):
    """Raised when wait() is called twice on the same process."""

    def __init__(self, *args: object) -> None:
        super().__init__("wait() was already called")


class ProcessExitError(LibInteractiveException):
    """Raised by ``wait()`` when the process did not exit cleanly.

    Examples
    --------
    >>> err = ProcessExitError(2, ["ls", "/nonexistent"])
    >>> err.returncode
    2
    >>> str(err)
    "exit status 2: ['ls', '/nonexistent']"

    >>> str(ProcessExitError(-9, ["sleep", "10"]))
    "signal: 9: ['sleep', '10']"
    """

    def __init__(
        self,
        returncode: int,
        cmd: Sequence[str] | None = None,
        *args: object,
    ) -> None:
        self.returncode = returncode
        self.cmd = list(cmd) if cmd is not None else None
        if returncode < 0:
            msg = f"signal: {-returncode}"
        else:
            msg = f"exit status {returncode}"
        if self.cmd is not None:
            msg += f": {self.cmd}"
        super().__init__(msg)


class ExpectError(LibInteractiveException):
    """Base exception for errors raised while interacting with a process."""


class ExpectTimeout(ExpectError):
    """Raised when no pattern matched before the timeout elapsed."""

    def __init__(
        self,
        patterns: Sequence[str] | None = None,
        timeout: float | None = None,
        *args: object,
    ) -> None:
        if patterns is not None and timeout is not None:
            super().__init__(
                f"Timed out waiting for {list(patterns)} after {timeout} seconds",
            )
        else:
            super().__init__("Timed out waiting for output")


class ExpectEOF(ExpectError):
    """Raised when the process output ended without a match."""

    def __init__(self, patterns: Sequence[str] | None = None, *args: object) -> None:
        if patterns is not None:
            super().__init__(f"Output closed before matching {list(patterns)}")
        else:
            super().__init__("Output closed")


class SessionClosed(ExpectError):
    """Raised when sending to a session whose stdin was closed."""

    def __init__(self, *args: object) -> None:
        super().__init__("Session stdin is closed")


class WaitTimeout(LibInteractiveException):
    """Raised when a function times out waiting for a condition."""


class ChannelAlreadyFulfilled(LibInteractiveException):
    """Raised if an exit channel is written to more than once."""

    def __init__(self, *args: object) -> None:
        super().__init__("Exit channel was already fulfilled")
