"""
Deterministic percentile bucketing for percent conditions.
"""

import hashlib

MICRO_PERCENT_MAX = 100 * 1_000_000


def seeded_randomization_id(seed: str, randomization_id: str) -> str:
    """Join seed and randomization ID the way templates expect them hashed."""
    seed_prefix = f"{seed}." if seed else ""
    return f"{seed_prefix}{randomization_id}"


def get_micro_percentile(seed: str, randomization_id: str) -> int:
    """Map ``(seed, randomization_id)`` to a bucket in [0, 100_000_000).

    The SHA-256 digest of the seeded ID is read as an unsigned big-endian
    integer and reduced modulo the micro-percent space, so the same pair
    always lands in the same bucket.
    """
    string_to_hash = seeded_randomization_id(seed, randomization_id)
    digest = hashlib.sha256(string_to_hash.encode("utf-8")).hexdigest()
    return int(digest, 16) % MICRO_PERCENT_MAX
