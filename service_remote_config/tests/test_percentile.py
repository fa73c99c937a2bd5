"""
Unit tests for percentile bucketing.
"""

import pytest

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_remote_config.app.conditions.percentile import (
    MICRO_PERCENT_MAX, get_micro_percentile, seeded_randomization_id
)


class TestPercentile:
    """Test cases for micro-percentile hashing."""

    def test_seeded_randomization_id(self):
        """Test seed prefix joining."""
        assert seeded_randomization_id("seed1", "user-1") == "seed1.user-1"
        assert seeded_randomization_id("", "user-1") == "user-1"

    @pytest.mark.parametrize("seed,randomization_id,expected", [
        ("seed1", "user-1", 41953865),
        ("", "user-1", 24996379),
        ("abc", "123", 48291444),
        ("seed1", "user-2", 61296038),
        ("seed1", "user-3", 7022361),
    ])
    def test_known_buckets(self, seed, randomization_id, expected):
        """Test SHA-256 bucket values for known inputs."""
        assert get_micro_percentile(seed, randomization_id) == expected

    def test_deterministic_and_in_range(self):
        """Test repeated calls return the same bucket within range."""
        for index in range(200):
            randomization_id = f"user-{index}"
            first = get_micro_percentile("rollout", randomization_id)
            second = get_micro_percentile("rollout", randomization_id)

            assert first == second
            assert 0 <= first < MICRO_PERCENT_MAX

    def test_seed_is_case_sensitive(self):
        """Test different seed casing changes the bucket input."""
        assert seeded_randomization_id("Seed", "x") != seeded_randomization_id("seed", "x")

    def test_unicode_randomization_id(self):
        """Test non-ASCII IDs hash without error."""
        value = get_micro_percentile("seed", "ユーザー")
        assert 0 <= value < MICRO_PERCENT_MAX
