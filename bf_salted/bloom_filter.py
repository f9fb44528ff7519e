"""Bloom filter with fill-level tracking.

Each key is mapped to ``num_hashes`` bit positions by a pluggable hasher
(salted MD5 by default, see :mod:`bf_salted.hashing`) that index a bytearray
bitset. Besides membership the filter
counts ``add`` calls (``size``) and unset-to-set bit transitions
(``flipped_bits``); the latter tells when the filter is getting full and
should be rebuilt with a larger capacity.

Elements cannot be removed, the filter never resizes and it is not
persisted.
"""
from __future__ import annotations

import logging
import threading
from typing import Iterable, List, Optional

from .errors import ConfigurationError
from .hashing import Hasher, SaltedMD5Hasher
from .params import optimal_parameters

logger = logging.getLogger(__name__)


def _check_key(key: str) -> None:
    if not isinstance(key, str):
        raise TypeError(f"keys must be str, got {type(key).__name__}")


def _check_keys(keys: Iterable[str]) -> None:
    if isinstance(keys, str):
        raise TypeError("expected a collection of keys, got a single str")


class BloomFilter:
    """Bloom filter backed by a bytearray bitset.

    ``add`` and ``clear`` are serialized by an internal lock so a bit that two
    threads set concurrently is counted once in ``flipped_bits``. ``contains``
    does not lock; running it while another thread calls ``clear`` may see a
    partially cleared filter.
    """

    def __init__(
        self, capacity: int, num_hashes: int, *, hasher: Optional[Hasher] = None
    ) -> None:
        """Initialize a Bloom filter.

        Args:
            capacity: Number of bits in the filter.
            num_hashes: Number of bit positions probed per key.
            hasher: Hash strategy; defaults to :class:`SaltedMD5Hasher`.

        Raises:
            ConfigurationError: If capacity or num_hashes is not a positive
                integer, or the default hasher cannot obtain MD5.
        """
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
            raise ConfigurationError(f"capacity must be a positive integer, got {capacity!r}")
        if isinstance(num_hashes, bool) or not isinstance(num_hashes, int) or num_hashes <= 0:
            raise ConfigurationError(f"num_hashes must be a positive integer, got {num_hashes!r}")

        self._hasher = hasher if hasher is not None else SaltedMD5Hasher()
        self._capacity = capacity
        self._num_hashes = num_hashes
        self._bit_array = bytearray((capacity + 7) // 8)
        self._size = 0
        self._flipped_bits = 0
        self._lock = threading.Lock()

        logger.debug(
            "BloomFilter created: capacity=%d bits, num_hashes=%d, hasher=%s",
            capacity,
            num_hashes,
            self._hasher.name,
        )

    @classmethod
    def from_error_rate(
        cls,
        expected_items: int,
        false_positive_rate: float,
        *,
        hasher: Optional[Hasher] = None,
    ) -> "BloomFilter":
        """Build a filter sized for ``expected_items`` at ``false_positive_rate``."""
        capacity, num_hashes = optimal_parameters(expected_items, false_positive_rate)
        return cls(capacity, num_hashes, hasher=hasher)

    @property
    def hasher(self) -> Hasher:
        return self._hasher

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def num_hashes(self) -> int:
        return self._num_hashes

    @property
    def size(self) -> int:
        """Number of ``add`` calls since construction or the last ``clear``."""
        return self._size

    @property
    def flipped_bits(self) -> int:
        """Number of bits that went from unset to set."""
        return self._flipped_bits

    @property
    def fill_ratio(self) -> float:
        return self._flipped_bits / self._capacity

    @property
    def bit_array(self) -> bytearray:
        """Expose the underlying bit array (primarily for inspection)."""
        return self._bit_array

    def is_empty(self) -> bool:
        return self._size == 0

    def __len__(self) -> int:
        return self._size

    def compute_hashes(self, key: str) -> List[int]:
        """Return the ``num_hashes`` raw hash values of ``key``."""
        _check_key(key)
        return self._hasher.hashes(key, self._num_hashes)

    def _positions(self, key: str) -> List[int]:
        _check_key(key)
        return self._hasher.positions(key, self._num_hashes, self._capacity)

    def add(self, key: str) -> None:
        """Insert ``key`` into the filter."""
        positions = self._positions(key)
        with self._lock:
            self._size += 1
            for bit_index in positions:
                byte_index = bit_index >> 3
                mask = 1 << (bit_index & 7)
                if not (self._bit_array[byte_index] & mask):
                    self._bit_array[byte_index] |= mask
                    self._flipped_bits += 1

    def add_all(self, keys: Iterable[str]) -> None:
        """Insert all ``keys`` into the filter, in iteration order."""
        _check_keys(keys)
        for key in keys:
            self.add(key)

    update = add_all

    def contains(self, key: str) -> bool:
        """True if ``key`` may have been added, False if it definitely was not."""
        for bit_index in self._positions(key):
            if not (self._bit_array[bit_index >> 3] & (1 << (bit_index & 7))):
                return False
        return True

    __contains__ = contains

    def contains_all(self, keys: Iterable[str]) -> bool:
        _check_keys(keys)
        return all(self.contains(key) for key in keys)

    def clear(self) -> None:
        """Unset every bit and reset both counters."""
        with self._lock:
            self._bit_array[:] = bytes(len(self._bit_array))
            self._size = 0
            self._flipped_bits = 0
        logger.debug("BloomFilter cleared: capacity=%d bits", self._capacity)

    def estimated_false_positive_rate(self) -> float:
        """Chance that a never-added key is reported present at the current fill."""
        return self.fill_ratio ** self._num_hashes

    def __repr__(self) -> str:
        return (
            f"BloomFilter(capacity={self._capacity}, num_hashes={self._num_hashes}, "
            f"size={self._size}, flipped_bits={self._flipped_bits})"
        )
