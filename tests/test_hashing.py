"""Tests for the hash strategies."""
from __future__ import annotations

import hashlib
import struct

import mmh3
import pytest
import xxhash

from bf_salted.bloom_filter import BloomFilter
from bf_salted.hashing import SALT, DoubleHasher, Hasher, SaltedMD5Hasher


def reference_hash(key: str, i: int) -> int:
    digest = hashlib.md5((key + "magicsalt" + str(i)).encode("utf-8")).digest()
    return abs(struct.unpack(">i", digest[:4])[0])


class TestSaltedMD5Hasher:
    def test_matches_reference_scheme(self):
        hasher = SaltedMD5Hasher()
        for key in ["", "test", "hello", "101", "ünïcode"]:
            assert hasher.hashes(key, 6) == [reference_hash(key, i) for i in range(6)]

    def test_salt_constant(self):
        assert SALT == "magicsalt"

    def test_round_numbers_are_decimal(self):
        hasher = SaltedMD5Hasher()
        assert hasher.hashes("k", 12)[10] == reference_hash("k", 10)

    def test_values_are_non_negative(self):
        hasher = SaltedMD5Hasher()
        for i in range(200):
            assert all(h >= 0 for h in hasher.hashes(str(i), 8))

    def test_int_min_does_not_wrap(self, monkeypatch):
        hasher = SaltedMD5Hasher()

        class Digest:
            def digest(self):
                return b"\x80\x00\x00\x00" + bytes(12)

        monkeypatch.setattr(hasher, "_md5", lambda data: Digest())
        assert hasher.hashes("k", 2) == [2 ** 31, 2 ** 31]

    def test_deterministic_across_calls(self):
        bloom = BloomFilter.from_error_rate(1000, 0.01)
        assert bloom.compute_hashes("key") == bloom.compute_hashes("key")

    def test_hashes_do_not_depend_on_capacity(self):
        assert BloomFilter(10, 4).compute_hashes("key") == BloomFilter(99991, 4).compute_hashes("key")


class TestDoubleHasher:
    def test_arithmetic_progression(self):
        data = b"key"
        h1 = mmh3.hash(data, 0, signed=False)
        h2 = xxhash.xxh64(data, seed=0).intdigest()
        assert DoubleHasher().hashes("key", 4) == [h1, h1 + h2, h1 + 2 * h2, h1 + 3 * h2]

    def test_seeds_change_output(self):
        assert DoubleHasher(seed1=1).hashes("key", 3) != DoubleHasher(seed1=2).hashes("key", 3)

    def test_positions_never_collapse_on_small_capacity(self):
        bloom = BloomFilter(10, 4, hasher=DoubleHasher())
        collapsed = [k for k in (f"k{i}" for i in range(1000)) if len(set(bloom._positions(k))) == 1]
        assert collapsed == []

    def test_positions_reduce_step_before_stepping(self):
        data = b"key"
        h1 = mmh3.hash(data, 0, signed=False) % 97
        h2 = xxhash.xxh64(data, seed=0).intdigest() % 97 or 1
        assert DoubleHasher().positions("key", 3, 97) == [h1, (h1 + h2) % 97, (h1 + 2 * h2) % 97]


class TestHasherBase:
    def test_default_positions_reduce_raw_hashes(self):
        hasher = SaltedMD5Hasher()
        assert hasher.positions("test", 6, 95850) == [h % 95850 for h in hasher.hashes("test", 6)]

    def test_hashes_must_be_implemented(self):
        with pytest.raises(NotImplementedError):
            Hasher().hashes("key", 1)
