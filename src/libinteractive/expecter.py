"""Interactive, expect-style driver over a process's stdin and stdout.

:class:`Expecter` drains a readable stream on a background thread into a text
buffer, matches regular expressions against what has not been consumed yet
and writes input to a writable stream. When given a ``wait`` callable it also
runs it on a second background thread and publishes the outcome on its
:attr:`~Expecter.exit_channel`.

Examples
--------
>>> import io
>>> expecter = Expecter(io.BytesIO(), io.BytesIO(b"login: "), timeout=1)
>>> expecter.expect(r"login:\\s*").match
'login: '
>>> expecter.exit_channel.receive(timeout=1) is None
True
"""

from __future__ import annotations

import codecs
import dataclasses
import logging
import re
import threading
import time
import typing as t

from libinteractive import exc
from libinteractive.channel import ExitPromise
from libinteractive.constants import (
    BUFFER_LIMIT,
    BUFFER_SIZE,
    CHECK_INTERVAL_SECONDS,
    DEFAULT_ENCODING,
    EXPECT_TIMEOUT_SECONDS,
)

if t.TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from typing_extensions import Self, TypeAlias

    from libinteractive.channel import ExitChannel

    Pattern: TypeAlias = "str | re.Pattern[str]"

logger = logging.getLogger(__name__)

ERR_PATTERN_TYPE = "pattern must be a string or a compiled regex pattern"


@dataclasses.dataclass(frozen=True)
class ExpectOptions:
    """Configuration flags for an :class:`Expecter`.

    Attributes
    ----------
    verbose : bool
        Log everything sent and received at ``DEBUG``.
    encoding : str
        Codec for decoding output and encoding ``str`` input. Undecodable
        output is backslash-escaped.
    buffer_size : int
        Maximum bytes requested per read from the process's stdout.
    partial_match : bool
        Accept a match as soon as it appears. When ``False``, a match is only
        accepted once output has been quiet for ``check_interval`` seconds, so
        a greedy pattern sees the whole burst of output.
    check_interval : float
        Seconds of quiet output required when ``partial_match`` is off.
    buffer_limit : int | None
        Characters of unconsumed output kept for matching. When exceeded, the
        oldest output is dropped. ``None`` keeps everything.

    Examples
    --------
    >>> ExpectOptions().partial_match
    True
    >>> ExpectOptions(verbose=True).verbose
    True
    """

    verbose: bool = False
    encoding: str = DEFAULT_ENCODING
    buffer_size: int = BUFFER_SIZE
    partial_match: bool = True
    check_interval: float = CHECK_INTERVAL_SECONDS
    buffer_limit: int | None = BUFFER_LIMIT or None

    def __post_init__(self) -> None:
        """Reject options a session could not run with."""
        codecs.lookup(self.encoding)
        if self.buffer_size <= 0:
            msg = f"buffer_size must be positive, not {self.buffer_size}"
            raise ValueError(msg)
        if self.check_interval < 0:
            msg = f"check_interval must not be negative, not {self.check_interval}"
            raise ValueError(msg)
        if self.buffer_limit is not None and self.buffer_limit <= 0:
            msg = f"buffer_limit must be positive or None, not {self.buffer_limit}"
            raise ValueError(msg)


@dataclasses.dataclass
class ExpectResult:
    """Outcome of a successful :meth:`Expecter.expect`.

    Attributes
    ----------
    output : str
        Everything consumed from the buffer, up to and including the match.
    match : str
        The matched text.
    groups : tuple
        Groups captured by the pattern.
    matched_index : int
        Index of the pattern that matched (for :meth:`Expecter.expect_any`).
    elapsed_time : float | None
        Seconds spent waiting for the match.
    """

    output: str
    match: str
    groups: tuple[str | None, ...] = ()
    matched_index: int = 0
    elapsed_time: float | None = None


@dataclasses.dataclass(frozen=True)
class Send:
    """Batch step: write ``data`` to the process."""

    data: str | bytes


@dataclasses.dataclass(frozen=True)
class Expect:
    """Batch step: wait for ``pattern``."""

    pattern: Pattern
    timeout: float | None = None


@dataclasses.dataclass(frozen=True)
class ExpectAny:
    """Batch step: wait for whichever of ``patterns`` matches first."""

    patterns: Sequence[Pattern]
    timeout: float | None = None


BatchStep = t.Union[Send, Expect, ExpectAny]


def _compile(pattern: Pattern) -> re.Pattern[str]:
    if isinstance(pattern, re.Pattern):
        return pattern
    if isinstance(pattern, str):
        return re.compile(pattern)
    raise TypeError(ERR_PATTERN_TYPE)


class Expecter:
    """Send input to and match output from a running process.

    Parameters
    ----------
    stdin : IO[bytes]
        Writable stream connected to the process's standard input.
    stdout : IO[bytes]
        Readable stream connected to the process's standard output. The
        expecter owns it from now on and closes it at end of file.
    timeout : float, optional
        Default seconds to wait in :meth:`expect`. Falls back to
        :data:`~libinteractive.constants.EXPECT_TIMEOUT_SECONDS`.
    options : :class:`ExpectOptions`, optional
    wait : callable, optional
        Blocks until the process exits; raises on an unclean exit. Its
        outcome is published on :attr:`exit_channel`. Without it, the
        channel is fulfilled with ``None`` when stdout reaches end of file.
    close : callable, optional
        Called by :meth:`close`. Defaults to closing ``stdin``.
    """

    def __init__(
        self,
        stdin: t.IO[bytes],
        stdout: t.IO[bytes],
        timeout: float | None = None,
        options: ExpectOptions | None = None,
        *,
        wait: Callable[[], None] | None = None,
        close: Callable[[], None] | None = None,
    ) -> None:
        self.stdin = stdin
        self.stdout = stdout
        self.timeout = timeout if timeout is not None else EXPECT_TIMEOUT_SECONDS
        self.options = options if options is not None else ExpectOptions()

        self._wait = wait
        self._close = close
        self._closed = False
        self._cond = threading.Condition()
        self._buffer = ""
        self._eof = False
        self._last_read = time.monotonic()
        self._decoder = codecs.getincrementaldecoder(self.options.encoding)(
            errors="backslashreplace",
        )
        self._promise = ExitPromise()
        self.exit_channel: ExitChannel = self._promise.channel

        self._reader_thread = threading.Thread(
            target=self._reader,
            name="libinteractive-reader",
            daemon=True,
        )
        self._reader_thread.start()

        self._waiter_thread: threading.Thread | None = None
        if wait is not None:
            self._waiter_thread = threading.Thread(
                target=self._waiter,
                name="libinteractive-waiter",
                daemon=True,
            )
            self._waiter_thread.start()

    def __enter__(self) -> Self:
        """Enter the context, returning self."""
        return self

    def __exit__(self, *exc_info: object) -> None:
        """Close stdin on context exit."""
        self.close()

    # Interaction -------------------------------------------------------
    def send(self, data: str | bytes) -> None:
        """Write ``data`` to the process's stdin.

        Raises
        ------
        :exc:`~libinteractive.exc.SessionClosed`
            :meth:`close` was already called.
        """
        if self._closed:
            raise exc.SessionClosed
        if isinstance(data, str):
            payload = data.encode(self.options.encoding)
        else:
            payload = data
        if self.options.verbose:
            logger.debug("Sent: %r", data)
        self.stdin.write(payload)
        self.stdin.flush()

    def expect(
        self,
        pattern: Pattern,
        timeout: float | None = None,
    ) -> ExpectResult:
        """Wait until ``pattern`` matches the process's output.

        Raises
        ------
        :exc:`~libinteractive.exc.ExpectTimeout`
            Nothing matched within ``timeout`` seconds.
        :exc:`~libinteractive.exc.ExpectEOF`
            Output ended without a match.
        """
        return self.expect_any([pattern], timeout=timeout)

    def expect_any(
        self,
        patterns: Sequence[Pattern],
        timeout: float | None = None,
    ) -> ExpectResult:
        """Wait until any of ``patterns`` matches the process's output.

        The earliest match in the output wins; ties go to the pattern listed
        first. Output up to the end of the match is consumed.
        """
        compiled = [_compile(pattern) for pattern in patterns]
        sources = [regex.pattern for regex in compiled]
        seconds = timeout if timeout is not None else self.timeout
        started = time.monotonic()
        deadline = started + seconds

        with self._cond:
            while True:
                found = self._search(compiled)
                if found is not None and self._settled():
                    index, match = found
                    output = self._buffer[: match.end()]
                    self._buffer = self._buffer[match.end() :]
                    elapsed = time.monotonic() - started
                    logger.debug(
                        "Matched %r after %.3f seconds",
                        sources[index],
                        elapsed,
                    )
                    return ExpectResult(
                        output=output,
                        match=match.group(0),
                        groups=match.groups(),
                        matched_index=index,
                        elapsed_time=elapsed,
                    )
                if found is None and self._eof:
                    raise exc.ExpectEOF(sources)

                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise exc.ExpectTimeout(sources, seconds)
                if found is not None:
                    remaining = min(remaining, self.options.check_interval)
                self._cond.wait(timeout=remaining)

    def expect_batch(self, steps: Sequence[BatchStep]) -> list[ExpectResult]:
        """Run ``steps`` in order, returning the results of the expect steps."""
        results: list[ExpectResult] = []
        for step in steps:
            if isinstance(step, Send):
                self.send(step.data)
            elif isinstance(step, Expect):
                results.append(self.expect(step.pattern, timeout=step.timeout))
            elif isinstance(step, ExpectAny):
                results.append(self.expect_any(step.patterns, timeout=step.timeout))
            else:
                msg = f"Unknown batch step: {step!r}"
                raise TypeError(msg)
        return results

    def close(self) -> None:
        """Close the process's stdin. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        if self._close is not None:
            self._close()
        else:
            self.stdin.close()

    @property
    def before(self) -> str:
        """Output received but not yet consumed by a match."""
        with self._cond:
            return self._buffer

    @property
    def eof(self) -> bool:
        """Whether the process's stdout has reached end of file."""
        with self._cond:
            return self._eof

    @property
    def closed(self) -> bool:
        """Whether :meth:`close` was called."""
        return self._closed

    # Internals ---------------------------------------------------------
    def _search(
        self,
        compiled: list[re.Pattern[str]],
    ) -> tuple[int, re.Match[str]] | None:
        best: tuple[int, re.Match[str]] | None = None
        for index, regex in enumerate(compiled):
            match = regex.search(self._buffer)
            if match is not None and (best is None or match.start() < best[1].start()):
                best = (index, match)
        return best

    def _settled(self) -> bool:
        if self.options.partial_match or self._eof:
            return True
        return time.monotonic() - self._last_read >= self.options.check_interval

    def _trim_buffer(self) -> None:
        limit = self.options.buffer_limit
        if limit is None or len(self._buffer) <= limit:
            return
        dropped = len(self._buffer) - limit
        self._buffer = self._buffer[dropped:]
        logger.debug("Dropped %d unmatched characters of output", dropped)

    def _reader(self) -> None:
        read = getattr(self.stdout, "read1", self.stdout.read)
        try:
            while True:
                chunk = read(self.options.buffer_size)
                if not chunk:
                    break
                text = self._decoder.decode(chunk)
                if self.options.verbose:
                    logger.debug("Received: %r", text)
                with self._cond:
                    self._buffer += text
                    self._trim_buffer()
                    self._last_read = time.monotonic()
                    self._cond.notify_all()
        except (OSError, ValueError):
            logger.debug("Reader for %r stopped", self.stdout, exc_info=True)
        finally:
            tail = self._decoder.decode(b"", final=True)
            with self._cond:
                self._buffer += tail
                self._eof = True
                self._cond.notify_all()
            self.stdout.close()
            if self._wait is None:
                self._promise.fulfil(None)

    def _waiter(self) -> None:
        assert self._wait is not None
        try:
            self._wait()
        except Exception as error:
            logger.debug("Process wait failed: %r", error)
            self._promise.fulfil(error)
        else:
            logger.debug("Process exited cleanly")
            self._promise.fulfil(None)
