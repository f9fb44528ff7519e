"""Sizing formulas for Bloom filters.

With ``n`` expected items and a target false positive probability ``p``:

* bits ``m = -(n * ln p) / (ln 2)^2``
* hashes ``k = -ln p / ln 2``

Both are truncated toward zero, so ``(10000, 0.01)`` gives ``(95850, 6)``.
"""
from __future__ import annotations

import math
from typing import Tuple

from .errors import ConfigurationError


def optimal_parameters(expected_items: int, false_positive_rate: float) -> Tuple[int, int]:
    """Return ``(capacity, num_hashes)`` for the requested load and error rate.

    Raises:
        ConfigurationError: If ``false_positive_rate`` is outside ``(0, 1)``,
            ``expected_items`` is not positive, or a derived value is zero.
    """
    if not 0.0 < false_positive_rate < 1.0:
        raise ConfigurationError(
            f"false_positive_rate must be in (0, 1), got {false_positive_rate!r}"
        )
    if expected_items <= 0:
        raise ConfigurationError(f"expected_items must be positive, got {expected_items!r}")

    log_p = math.log(false_positive_rate)
    capacity = int(-expected_items * log_p / math.log(2) ** 2)
    num_hashes = int(-log_p / math.log(2))

    if capacity <= 0:
        raise ConfigurationError(
            f"derived capacity {capacity} is not positive "
            f"(expected_items={expected_items}, false_positive_rate={false_positive_rate})"
        )
    if num_hashes <= 0:
        raise ConfigurationError(
            f"derived num_hashes {num_hashes} is not positive "
            f"(false_positive_rate={false_positive_rate} is too high)"
        )
    return capacity, num_hashes


def expected_false_positive_rate(capacity: int, num_hashes: int, items: int) -> float:
    """Theoretical false positive rate after inserting ``items`` distinct keys."""
    if items <= 0:
        return 0.0
    return (1.0 - math.exp(-num_hashes * items / capacity)) ** num_hashes
