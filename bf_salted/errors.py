"""Exceptions raised by the Bloom filter package."""
from __future__ import annotations


class ConfigurationError(ValueError):
    """Raised when a filter cannot be built from the given parameters.

    Covers non-positive capacity or hash counts, false positive rates outside
    ``(0, 1)`` and a runtime that refuses to provide MD5.
    """
