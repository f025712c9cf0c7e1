"""Subprocess-backed spawn function."""

from __future__ import annotations

import logging
import os
import subprocess
import typing as t

from libinteractive import exc
from libinteractive.spawn_func.base import SpawnFunc

if t.TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from os import PathLike

logger = logging.getLogger(__name__)


class ExecSpawnFunc(SpawnFunc):
    """Create processes with :class:`subprocess.Popen` over :func:`os.pipe` pipes.

    The instance bound to a spawner is a factory: :meth:`command` returns a new
    handle for each process, carrying over ``cwd`` and ``env``.

    Examples
    --------
    >>> handle = ExecSpawnFunc().command("echo", ["hi"])
    >>> handle.args
    ['echo', 'hi']
    >>> stdout = handle.stdout_pipe()
    >>> handle.start()
    >>> stdout.read()
    b'hi\\n'
    >>> handle.wait()
    >>> stdout.close()
    """

    def __init__(
        self,
        args: Sequence[str] | None = None,
        *,
        cwd: str | PathLike[str] | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self.args: list[str] | None = list(args) if args is not None else None
        self.cwd = cwd
        self.env = env
        self.process: subprocess.Popen[bytes] | None = None
        self._waited = False
        self._stdin: t.IO[bytes] | None = None
        self._stdout: t.IO[bytes] | None = None
        # Pipe ends handed to the child; closed in the parent after start().
        self._child_stdin_fd: int | None = None
        self._child_stdout_fd: int | None = None

    def __repr__(self) -> str:
        """Representation of :class:`ExecSpawnFunc` object."""
        return f"{self.__class__.__name__}(args={self.args!r})"

    def command(
        self,
        command: str,
        args: Sequence[str] = (),
    ) -> ExecSpawnFunc:
        """Return a new handle configured to run ``command`` with ``args``."""
        return self.__class__([command, *args], cwd=self.cwd, env=self.env)

    def stdin_pipe(self) -> t.IO[bytes]:
        """Return the write end of a pipe that becomes the child's stdin."""
        self._check_can_pipe("stdin_pipe()", self._stdin, "stdin")
        read_fd, write_fd = os.pipe()
        self._child_stdin_fd = read_fd
        self._stdin = open(write_fd, "wb", buffering=0)  # noqa: SIM115
        return self._stdin

    def stdout_pipe(self) -> t.IO[bytes]:
        """Return the read end of a pipe that becomes the child's stdout."""
        self._check_can_pipe("stdout_pipe()", self._stdout, "stdout")
        try:
            read_fd, write_fd = os.pipe()
        except OSError:
            # The child never starts, so its stdin end is closed here.
            self._close_child_ends()
            raise
        self._child_stdout_fd = write_fd
        self._stdout = open(read_fd, "rb", buffering=0)  # noqa: SIM115
        return self._stdout

    def start(self) -> None:
        """Start the configured command.

        Raises
        ------
        FileNotFoundError
            The executable could not be located.
        """
        if self.args is None:
            raise exc.CommandNotConfigured
        if self.process is not None:
            raise exc.ProcessAlreadyStarted("start()")

        logger.debug("Starting %s", subprocess.list2cmdline(self.args))
        try:
            self.process = subprocess.Popen(
                self.args,
                stdin=(
                    self._child_stdin_fd
                    if self._child_stdin_fd is not None
                    else subprocess.DEVNULL
                ),
                stdout=(
                    self._child_stdout_fd
                    if self._child_stdout_fd is not None
                    else subprocess.DEVNULL
                ),
                stderr=subprocess.DEVNULL,
                cwd=self.cwd,
                env=self.env,
            )
        except Exception:
            logger.debug("Failed to start %s", self.args, exc_info=True)
            self._close_parent_ends()
            raise
        finally:
            self._close_child_ends()

    def wait(self) -> None:
        """Wait for the process to exit.

        Raises
        ------
        :exc:`~libinteractive.exc.ProcessExitError`
            The process exited with a non-zero status or was killed by a signal.
        """
        if self.process is None:
            raise exc.ProcessNotStarted
        if self._waited:
            raise exc.WaitAlreadyCalled
        self._waited = True

        returncode = self.process.wait()
        logger.debug("%s exited with %d", self.args, returncode)
        if returncode != 0:
            raise exc.ProcessExitError(returncode, self.args)

    @property
    def pid(self) -> int | None:
        """Process id of the started child, if any."""
        return self.process.pid if self.process is not None else None

    def _check_can_pipe(
        self,
        operation: str,
        current: t.IO[bytes] | None,
        stream: str,
    ) -> None:
        if self.args is None:
            raise exc.CommandNotConfigured
        if current is not None:
            raise exc.PipeAlreadyAcquired(stream)
        if self.process is not None:
            raise exc.ProcessAlreadyStarted(operation)

    def _close_child_ends(self) -> None:
        for fd in (self._child_stdin_fd, self._child_stdout_fd):
            if fd is not None:
                os.close(fd)
        self._child_stdin_fd = None
        self._child_stdout_fd = None

    def _close_parent_ends(self) -> None:
        for stream in (self._stdin, self._stdout):
            if stream is not None:
                stream.close()
