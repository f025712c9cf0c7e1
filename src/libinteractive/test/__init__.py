"""Helpers for testing code built on libinteractive."""

from __future__ import annotations

from .retry import retry_until
from .spawn_func import FakeSpawnFunc, FakeStdout, RecordingStdin

__all__ = [
    "FakeSpawnFunc",
    "FakeStdout",
    "RecordingStdin",
    "retry_until",
]
