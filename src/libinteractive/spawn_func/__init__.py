"""Spawn function implementations for libinteractive."""

from __future__ import annotations

from .base import SpawnFunc
from .exec import ExecSpawnFunc

__all__ = [
    "ExecSpawnFunc",
    "SpawnFunc",
]
