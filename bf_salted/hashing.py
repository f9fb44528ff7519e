"""Hash strategies that map a key to bit positions.

:meth:`Hasher.hashes` returns ``count`` non-negative raw values that do not
depend on the filter's capacity; :meth:`Hasher.positions` turns them into bit
indexes for a given capacity and is what
:class:`~bf_salted.bloom_filter.BloomFilter` calls.

* :class:`SaltedMD5Hasher` digests ``key + "magicsalt" + str(i)`` once per
  round and keeps the absolute value of the first four digest bytes read as
  a signed big-endian int. Filters built with it are bit-compatible with
  other implementations of that scheme.
* :class:`DoubleHasher` uses MurmurHash3 (mmh3) and xxHash64 with the
  Kirsch-Mitzenmacher optimization, so each key costs two hash calls no
  matter how many rounds are requested.
"""
from __future__ import annotations

import hashlib
from typing import Callable, List, Tuple

import mmh3
import xxhash

from .errors import ConfigurationError

SALT = "magicsalt"


def _load_md5() -> Callable[[bytes], "hashlib._Hash"]:
    """Return an MD5 constructor, or raise if the runtime refuses one."""
    try:
        hashlib.new("md5", b"", usedforsecurity=False)
    except ValueError as exc:
        raise ConfigurationError(f"MD5 digest is unavailable: {exc}") from exc

    def md5(data: bytes) -> "hashlib._Hash":
        return hashlib.md5(data, usedforsecurity=False)

    return md5


class Hasher:
    """Base class for hash strategies.

    Subclasses implement :meth:`hashes`. :meth:`positions` maps a key to bit
    indexes for a given capacity and by default reduces each raw value.
    """

    name = "hasher"

    def hashes(self, key: str, count: int) -> List[int]:
        raise NotImplementedError

    def positions(self, key: str, count: int, capacity: int) -> List[int]:
        return [h % capacity for h in self.hashes(key, count)]


class SaltedMD5Hasher(Hasher):
    """One MD5 digest per round over the salted, round-numbered key."""

    name = "salted-md5"

    def __init__(self, salt: str = SALT) -> None:
        self.salt = salt
        self._md5 = _load_md5()

    def hashes(self, key: str, count: int) -> List[int]:
        values = []
        for i in range(count):
            digest = self._md5(f"{key}{self.salt}{i}".encode("utf-8")).digest()
            # -2**31 maps to 2**31; ints don't wrap.
            values.append(abs(int.from_bytes(digest[:4], "big", signed=True)))
        return values


class DoubleHasher(Hasher):
    """Kirsch-Mitzenmacher double hashing over mmh3 and xxHash64.

    :meth:`hashes` returns ``h1 + i * h2``. :meth:`positions` reduces the step
    ``h2`` modulo capacity before stepping so that a key never collapses onto
    a single bit when ``capacity > 1``.
    """

    name = "double-mmh3-xxh64"

    def __init__(self, *, seed1: int = 0, seed2: int = 0) -> None:
        self.seed1 = seed1
        self.seed2 = seed2

    def _pair(self, key: str) -> Tuple[int, int]:
        data = key.encode("utf-8")
        h1 = mmh3.hash(data, self.seed1, signed=False)
        h2 = xxhash.xxh64(data, seed=self.seed2).intdigest()
        return h1, h2

    def hashes(self, key: str, count: int) -> List[int]:
        h1, h2 = self._pair(key)
        if h2 == 0:
            h2 = 1  # Keeps the raw values distinct.
        return [h1 + i * h2 for i in range(count)]

    def positions(self, key: str, count: int, capacity: int) -> List[int]:
        h1, h2 = self._pair(key)
        h1 %= capacity
        h2 %= capacity
        if h2 == 0:
            h2 = 1  # Ensure progress for the arithmetic progression.
        return [(h1 + i * h2) % capacity for i in range(count)]
