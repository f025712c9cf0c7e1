"""Session context returned by a successful spawn."""

from __future__ import annotations

import dataclasses
import typing as t

if t.TYPE_CHECKING:
    from libinteractive.channel import ExitChannel
    from libinteractive.expecter import Expecter


@dataclasses.dataclass(frozen=True)
class Context:
    """Bundle of the expecter driving a process and the channel for its exit.

    Examples
    --------
    >>> import io
    >>> from libinteractive.expecter import Expecter
    >>> expecter = Expecter(io.BytesIO(), io.BytesIO())
    >>> context = Context(expecter, expecter.exit_channel)
    >>> context.get_expecter() is expecter
    True
    >>> context.get_error_channel() is expecter.exit_channel
    True
    """

    expecter: Expecter
    error_channel: ExitChannel

    def get_expecter(self) -> Expecter:
        """Return the expecter bound to the process's stdin and stdout."""
        return self.expecter

    def get_error_channel(self) -> ExitChannel:
        """Return the channel that receives the process's exit result."""
        return self.error_channel
