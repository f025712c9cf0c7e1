"""Constants for libinteractive test helpers."""

from __future__ import annotations

import os

#: Seconds :func:`~libinteractive.test.retry.retry_until` keeps trying.
#: Configurable via :envvar:`RETRY_TIMEOUT_SECONDS`, defaults to 8 seconds.
RETRY_TIMEOUT_SECONDS = int(os.getenv("RETRY_TIMEOUT_SECONDS", 8))

#: Seconds between attempts of :func:`~libinteractive.test.retry.retry_until`.
#: Configurable via :envvar:`RETRY_INTERVAL_SECONDS`, defaults to 50ms.
RETRY_INTERVAL_SECONDS = float(os.getenv("RETRY_INTERVAL_SECONDS", 0.05))

#: Expect timeout used by the pytest plugin's spawners.
#: Configurable via :envvar:`LIBINTERACTIVE_TEST_TIMEOUT`, defaults to 2 seconds.
TEST_EXPECT_TIMEOUT_SECONDS = float(os.getenv("LIBINTERACTIVE_TEST_TIMEOUT", 2))
