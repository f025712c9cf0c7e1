"""Spawn processes and wrap them in interactive sessions.

libinteractive.spawner
~~~~~~~~~~~~~~~~~~~~~~

:class:`ExpectSpawner` runs a fixed setup sequence against a
:class:`~libinteractive.spawn_func.SpawnFunc`: configure the command, acquire
stdin, acquire stdout, start. The first step to fail ends the attempt and its
exception reaches the caller unchanged. Only when every step succeeded is an
:class:`~libinteractive.expecter.Expecter` built over the pipes and returned
inside a :class:`~libinteractive.context.Context`.
"""

from __future__ import annotations

import logging
import typing as t
from typing import Protocol

from libinteractive.context import Context
from libinteractive.expecter import Expecter
from libinteractive.spawn_func.exec import ExecSpawnFunc

if t.TYPE_CHECKING:
    from collections.abc import Sequence

    from libinteractive.expecter import ExpectOptions
    from libinteractive.spawn_func.base import SpawnFunc

logger = logging.getLogger(__name__)


class Spawner(Protocol):
    """Protocol for components that spawn interactive sessions."""

    def spawn(
        self,
        command: str,
        args: Sequence[str],
        timeout: float | None,
        options: ExpectOptions | None = None,
    ) -> Context:  # pragma: no cover
        """Start ``command`` with ``args`` and return its session context."""
        ...


class ExpectSpawner(Spawner):
    """Spawn processes through a spawn function and drive them with an expecter.

    Parameters
    ----------
    spawn_func : :class:`~libinteractive.spawn_func.SpawnFunc`, optional
        Capability used to create processes. Defaults to
        :class:`~libinteractive.spawn_func.ExecSpawnFunc`.

    Examples
    --------
    >>> spawner = ExpectSpawner()
    >>> context = spawner.spawn("cat", [], timeout=2)
    >>> expecter = context.get_expecter()
    >>> expecter.send("hello\\n")
    >>> expecter.expect("hello").match
    'hello'
    >>> expecter.close()
    >>> context.get_error_channel().receive(timeout=2) is None
    True
    """

    def __init__(self, spawn_func: SpawnFunc | None = None) -> None:
        self.spawn_func: SpawnFunc = (
            spawn_func if spawn_func is not None else ExecSpawnFunc()
        )

    def __repr__(self) -> str:
        """Representation of :class:`ExpectSpawner` object."""
        return f"{self.__class__.__name__}(spawn_func={self.spawn_func!r})"

    def spawn(
        self,
        command: str,
        args: Sequence[str],
        timeout: float | None,
        options: ExpectOptions | None = None,
        *,
        spawn_func: SpawnFunc | None = None,
    ) -> Context:
        """Start ``command`` and return a :class:`~libinteractive.context.Context`.

        Parameters
        ----------
        command : str
            Program to run.
        args : Sequence[str]
            Arguments passed to ``command``.
        timeout : float, optional
            Default seconds the expecter waits for a pattern.
        options : :class:`~libinteractive.expecter.ExpectOptions`, optional
            Expecter configuration.
        spawn_func : :class:`~libinteractive.spawn_func.SpawnFunc`, optional
            Use this capability instead of the spawner's for this call.

        Raises
        ------
        Exception
            Whatever acquiring stdin, acquiring stdout or starting the process
            raised, unchanged. Streams acquired before the failure are closed.
            If building the expecter fails after the process started, both
            streams are closed and the process is waited on before re-raising.
        """
        capability = spawn_func if spawn_func is not None else self.spawn_func
        handle = capability.command(command, list(args))
        logger.debug("Spawning %s %s", command, list(args))

        try:
            stdin = handle.stdin_pipe()
        except Exception:
            logger.debug("stdin_pipe() failed for %s", command)
            raise

        try:
            stdout = handle.stdout_pipe()
        except Exception:
            logger.debug("stdout_pipe() failed for %s", command)
            _close_quietly(stdin)
            raise

        try:
            handle.start()
        except Exception:
            logger.debug("start() failed for %s", command)
            _close_quietly(stdin, stdout)
            raise

        try:
            expecter = Expecter(
                stdin,
                stdout,
                timeout,
                options,
                wait=handle.wait,
                close=stdin.close,
            )
        except Exception:
            logger.debug("Session setup failed for %s", command)
            _close_quietly(stdin, stdout)
            _reap_quietly(handle)
            raise
        return Context(expecter, expecter.exit_channel)


def _close_quietly(*streams: t.IO[bytes]) -> None:
    for stream in streams:
        try:
            stream.close()
        except Exception:
            logger.debug("Failed to close %r", stream, exc_info=True)


def _reap_quietly(handle: SpawnFunc) -> None:
    # Closed pipes give the child EOF on stdin and EPIPE on stdout.
    try:
        handle.wait()
    except Exception:
        logger.debug("Reaping %r after failed setup", handle, exc_info=True)
