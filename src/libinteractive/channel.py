"""One-shot exit channel for spawned processes.

The background wait task owns an :class:`ExitPromise` and fulfils it exactly
once with the result of ``wait()``: ``None`` for a clean exit, or the
exception ``wait()`` raised. Callers only ever see the read side,
:class:`ExitChannel`.

Examples
--------
>>> promise = ExitPromise()
>>> channel = promise.channel
>>> channel.done()
False
>>> promise.fulfil(None)
>>> channel.done()
True
>>> channel.receive() is None
True

Errors are carried, not raised, by :meth:`ExitChannel.receive`:

>>> from libinteractive import exc
>>> promise = ExitPromise()
>>> promise.fulfil(exc.ProcessExitError(1, ["false"]))
>>> promise.channel.receive()
ProcessExitError("exit status 1: ['false']")
"""

from __future__ import annotations

import asyncio
import logging
import threading
import typing as t

from libinteractive import exc

if t.TYPE_CHECKING:
    from collections.abc import Callable, Generator

logger = logging.getLogger(__name__)


class _ExitState:
    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.event = threading.Event()
        self.value: BaseException | None = None
        self.callbacks: list[Callable[[ExitChannel], object]] = []


class ExitChannel:
    """Receive-only view of a process's exit result."""

    def __init__(self, state: _ExitState) -> None:
        self._state = state

    def __repr__(self) -> str:
        """Representation of :class:`ExitChannel` object."""
        if not self.done():
            return f"{self.__class__.__name__}(pending)"
        return f"{self.__class__.__name__}(value={self._state.value!r})"

    def __await__(self) -> Generator[t.Any, None, BaseException | None]:
        """Await the exit result from a coroutine."""
        return self.areceive().__await__()

    def done(self) -> bool:
        """Return ``True`` once the process's exit result is available."""
        return self._state.event.is_set()

    def receive(self, timeout: float | None = None) -> BaseException | None:
        """Block until the exit result arrives and return it.

        Parameters
        ----------
        timeout : float, optional
            Seconds to wait. Waits forever when ``None``.

        Returns
        -------
        BaseException | None
            ``None`` if the process exited cleanly, otherwise the error
            ``wait()`` raised.

        Raises
        ------
        :exc:`~libinteractive.exc.WaitTimeout`
            ``timeout`` elapsed before the process exited.
        """
        if not self._state.event.wait(timeout=timeout):
            msg = f"Timed out after {timeout} seconds waiting for process exit"
            raise exc.WaitTimeout(msg)
        return self._state.value

    def result(self, timeout: float | None = None) -> None:
        """Block until the exit result arrives, raising it if it is an error."""
        error = self.receive(timeout=timeout)
        if error is not None:
            raise error

    async def areceive(self) -> BaseException | None:
        """Async counterpart of :meth:`receive`."""
        if self.done():
            return self._state.value

        loop = asyncio.get_running_loop()
        waiter: asyncio.Future[None] = loop.create_future()

        def _resolve() -> None:
            if not waiter.done():
                waiter.set_result(None)

        self.add_done_callback(lambda _channel: loop.call_soon_threadsafe(_resolve))
        await waiter
        return self._state.value

    def add_done_callback(self, fn: Callable[[ExitChannel], object]) -> None:
        """Call ``fn(channel)`` once the exit result is available.

        Runs immediately, in the calling thread, if it already is.
        """
        with self._state.lock:
            if not self._state.event.is_set():
                self._state.callbacks.append(fn)
                return
        fn(self)


class ExitPromise:
    """Write side of an :class:`ExitChannel`, fulfilled exactly once."""

    def __init__(self) -> None:
        self._state = _ExitState()
        self.channel = ExitChannel(self._state)

    def fulfil(self, value: BaseException | None) -> None:
        """Publish the exit result and run subscribed callbacks.

        Raises
        ------
        :exc:`~libinteractive.exc.ChannelAlreadyFulfilled`
            The promise was already fulfilled.
        """
        with self._state.lock:
            if self._state.event.is_set():
                raise exc.ChannelAlreadyFulfilled
            self._state.value = value
            self._state.event.set()
            callbacks, self._state.callbacks = self._state.callbacks, []

        for callback in callbacks:
            try:
                callback(self.channel)
            except Exception:
                logger.exception("Exit channel callback %r failed", callback)
