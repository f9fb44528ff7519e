"""Bloom filter evaluation suite.

Generates synthetic unique keys, performs a deterministic 80/20 split, sizes
a filter for the 80% training set at ``ERROR_RATE`` and runs:

1. Membership check on the training set (should be all present)
2. False positive rate on the held-out keys
3. Near-miss keys one edit away from held-out keys
4. Filter properties, fill level and memory usage
5. Insertion and query throughput

The suite runs once with the salted MD5 hasher and once with the
mmh3/xxHash64 double hasher, then prints a side-by-side comparison.

    python -m bench.filter_suite
"""
from __future__ import annotations

import time
import uuid
from typing import Optional, Tuple

from bf_salted.bloom_filter import BloomFilter
from bf_salted.hashing import DoubleHasher, Hasher, SaltedMD5Hasher
from bf_salted.params import expected_false_positive_rate


ERROR_RATE = 0.01
SYNTHETIC_ITEMS = 100_000
QUERY_OPS = 1_000_000


def generate_synthetic_data(n: int = SYNTHETIC_ITEMS) -> list[str]:
    """Generate n unique random strings."""
    print(f"Generating {n} synthetic items...")
    # UUIDs are virtually guaranteed to be unique
    return [str(uuid.uuid4()) for _ in range(n)]


def build_split(
    words: list[str], hasher: Optional[Hasher] = None, error_rate: float = ERROR_RATE
) -> Tuple[BloomFilter, list[str], list[str]]:
    """Create deterministic 80/20 split and build the bloom filter.

    Returns (bloom_filter, training_words, test_words).
    """
    words = sorted(words)
    split = int(len(words) * 0.8)
    train = words[:split]
    test = words[split:]

    bloom = BloomFilter.from_error_rate(max(1, len(train)), error_rate, hasher=hasher)
    bloom.add_all(train)

    return bloom, train, test


def check_membership(bloom: BloomFilter, train: list[str]) -> list[str]:
    """Verify all training items are present in the filter."""
    print("CHECK A: Membership on training set")
    missing = [w for w in train if w not in bloom]
    print(f"  Training items: {len(train)}")
    print(f"  Missing after insertion: {len(missing)} (expected 0)")
    if missing:
        print(f"  Example missing: {missing[:5]}")
    print()
    return missing


def check_false_positive_on_heldout(
    bloom: BloomFilter, train: list[str], test: list[str]
) -> Optional[float]:
    """Measure empirical false positive rate on held-out keys."""
    print("CHECK B: False positive rate on held-out keys")
    train_set = set(train)
    test_filtered = [w for w in test if w not in train_set]

    if not test_filtered:
        print("  No held-out keys available for testing.")
        return None

    false_positives = sum(1 for w in test_filtered if w in bloom)
    fpr = false_positives / len(test_filtered)

    print(f"  Held-out keys: {len(test_filtered)}")
    print(f"  False positives: {false_positives}")
    print(f"  Empirical FPR: {fpr:.6f} ({fpr*100:.4f}%)")
    print(f"  Estimated FPR from fill level: {bloom.estimated_false_positive_rate():.6f}")
    print()
    return fpr


def near_miss_keys(test: list[str], limit: int = 500) -> list[str]:
    """Keys one edit away from held-out keys: a dropped, replaced or appended character."""
    variants = set()
    for key in test[:limit]:
        variants.add(key[1:])
        variants.add(key[:-1] + ("0" if key[-1:] != "0" else "1"))
        variants.add(key + "#")
    return sorted(variants)


def check_near_misses(
    bloom: BloomFilter, train: list[str], test: list[str]
) -> Optional[float]:
    """Rate at which keys one edit away from held-out keys are reported present."""
    print("CHECK C: Near-miss keys derived from held-out keys")
    known = set(train) | set(test)
    variants = [v for v in near_miss_keys(test) if v and v not in known]

    if not variants:
        print("  No near-miss keys available.")
        return None

    hits = [v for v in variants if v in bloom]
    rate = len(hits) / len(variants)
    print(f"  Near-miss keys tested: {len(variants)}, reported present: {len(hits)}")
    print(f"  Near-miss rate: {rate:.6f}")
    print()
    return rate


def show_properties(bloom: BloomFilter, train: list[str]) -> None:
    """Display filter memory, configuration and fill level."""
    print("CHECK D: Filter properties")
    bytes_len = len(bloom.bit_array)
    mb = bytes_len / (1024 * 1024)

    print(f"  Filter size (bits): {bloom.capacity}")
    print(f"  Filter size (bytes): {bytes_len}")
    print(f"  Filter size (MB): {mb:.2f}")
    print(f"  Number of hash functions: {bloom.num_hashes}")
    print(f"  Add calls: {bloom.size}")
    print(f"  Flipped bits: {bloom.flipped_bits} ({bloom.fill_ratio*100:.2f}% full)")
    theoretical = expected_false_positive_rate(bloom.capacity, bloom.num_hashes, len(train))
    print(f"  Theoretical FPR at this load: {theoretical:.6f}")
    if train:
        print(f"  Bytes per key: {bytes_len / len(train):.4f}")
    print()


def check_performance(
    bloom: BloomFilter, train: list[str], test: list[str], query_ops: int = QUERY_OPS
) -> dict:
    """Measure insertion and query throughput (Ops/Sec)."""
    print("CHECK E: Performance Benchmarking")

    print("  Benchmarking Insertions...")
    # Fresh filter with the same configuration and hasher
    bench_filter = BloomFilter(bloom.capacity, bloom.num_hashes, hasher=bloom.hasher)

    start_time = time.perf_counter()
    for word in train:
        bench_filter.add(word)
    insert_time = time.perf_counter() - start_time

    ops_per_sec = len(train) / insert_time if insert_time > 0 else float("inf")
    print(f"    - Inserted {len(train)} items in {insert_time:.4f} sec")
    print(f"    - Insertion Throughput: {ops_per_sec:,.0f} ops/sec")

    print("  Benchmarking Queries...")
    queries = test or train
    repeats = (query_ops // max(1, len(queries))) + 1
    large_test_set = (queries * repeats)[:query_ops]

    start_time = time.perf_counter()
    for word in large_test_set:
        _ = word in bench_filter
    query_time = time.perf_counter() - start_time

    query_ops_per_sec = len(large_test_set) / query_time if query_time > 0 else float("inf")
    print(f"    - Performed {len(large_test_set)} queries in {query_time:.4f} sec")
    print(f"    - Query Throughput: {query_ops_per_sec:,.0f} ops/sec")
    print()

    return {
        "insert_count": len(train),
        "insert_time": insert_time,
        "insert_ops_per_sec": ops_per_sec,
        "query_count": len(large_test_set),
        "query_time": query_time,
        "query_ops_per_sec": query_ops_per_sec,
    }


METRICS = (
    ("insert_ops_per_sec", "Insertion Throughput (ops/sec)"),
    ("insert_time", "Insertion Time (s)"),
    ("query_ops_per_sec", "Query Throughput (ops/sec)"),
    ("query_time", "Query Time (s)"),
)


def compare_performance(md5_metrics: dict, double_metrics: dict) -> None:
    """Print throughput and timing for both hashers and the double/MD5 ratio."""
    print(f"{'Metric':<36}{'Salted MD5':>16}{'Double hash':>16}{'Ratio':>10}")
    print("-" * 78)
    for metric, label in METRICS:
        md5_val = md5_metrics[metric]
        double_val = double_metrics[metric]
        ratio = f"{double_val / md5_val:.2f}x" if 0 < md5_val < float("inf") else "N/A"
        print(f"{label:<36}{md5_val:>16,.4g}{double_val:>16,.4g}{ratio:>10}")
    print()


def run_suite(words: list[str], hasher: Hasher, label: str, query_ops: int = QUERY_OPS) -> dict:
    """Build a filter with ``hasher`` and run checks A through E."""
    print("=" * 60)
    print(f"Running {label} Bloom Filter Suite (80/20 split)")
    print("=" * 60)
    print()

    bloom, train, test = build_split(words, hasher=hasher)
    check_membership(bloom, train)
    check_false_positive_on_heldout(bloom, train, test)
    check_near_misses(bloom, train, test)
    show_properties(bloom, train)
    return check_performance(bloom, train, test, query_ops=query_ops)


def run_all(n: int = SYNTHETIC_ITEMS, query_ops: int = QUERY_OPS) -> None:
    """Run the suite for both hashers and compare them."""
    words = generate_synthetic_data(n)
    print(f"Full dataset unique keys: {len(words)}")

    md5_metrics = run_suite(words, SaltedMD5Hasher(), "SALTED MD5", query_ops)
    double_metrics = run_suite(words, DoubleHasher(), "DOUBLE HASH", query_ops)

    print("=" * 60)
    print("COMPARISON: Performance Summary")
    print("=" * 60)
    compare_performance(md5_metrics, double_metrics)

    print("=" * 60)
    print("Suite completed successfully!")
    print("=" * 60)


if __name__ == "__main__":
    run_all()
