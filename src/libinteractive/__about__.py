"""Metadata for libinteractive package."""

from __future__ import annotations

__title__ = "libinteractive"
__package_name__ = "libinteractive"
__version__ = "0.1.0"
__description__ = "Spawn processes and drive them interactively, expect-style"
__email__ = "tnf-maintainers@example.org"
__author__ = "libinteractive contributors"
__github__ = "https://github.com/libinteractive/libinteractive"
__docs__ = "https://github.com/libinteractive/libinteractive#readme"
__tracker__ = "https://github.com/libinteractive/libinteractive/issues"
__pypi__ = "https://pypi.org/project/libinteractive/"
__license__ = "MIT"
__copyright__ = "Copyright 2026- libinteractive contributors"
