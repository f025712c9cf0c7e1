"""Defaults for libinteractive, configurable through the environment."""

from __future__ import annotations

import os

#: Seconds :meth:`~libinteractive.expecter.Expecter.expect` waits when neither
#: the session nor the call provides a timeout.
#: Configurable via :envvar:`LIBINTERACTIVE_EXPECT_TIMEOUT`.
EXPECT_TIMEOUT_SECONDS = float(os.getenv("LIBINTERACTIVE_EXPECT_TIMEOUT", 10))

#: Bytes read from a process's stdout per read call.
#: Configurable via :envvar:`LIBINTERACTIVE_BUFFER_SIZE`.
BUFFER_SIZE = int(os.getenv("LIBINTERACTIVE_BUFFER_SIZE", 4096))

#: Seconds of quiet output required before a match is accepted when partial
#: matching is disabled.
#: Configurable via :envvar:`LIBINTERACTIVE_CHECK_INTERVAL`.
CHECK_INTERVAL_SECONDS = float(os.getenv("LIBINTERACTIVE_CHECK_INTERVAL", 0.05))

#: Encoding used to decode process output and encode ``str`` input.
DEFAULT_ENCODING = "utf-8"

#: Characters of unconsumed output an expecter keeps; older output is dropped.
#: Configurable via :envvar:`LIBINTERACTIVE_BUFFER_LIMIT`, ``0`` disables it.
BUFFER_LIMIT = int(os.getenv("LIBINTERACTIVE_BUFFER_LIMIT", 1024 * 1024))
