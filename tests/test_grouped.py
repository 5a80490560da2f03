"""Tests for per-key distinct counting."""
from __future__ import annotations

import uuid

import pytest

from loglogbeta import ConfigurationError, GroupedCardinality, MergeError


DOMAIN_POOL = [
    "api.openai.com", "api.github.com", "api.stripe.com",
    "s3.amazonaws.com", "pypi.org",
]


class TestGroupedBasics:
    def test_empty(self):
        groups = GroupedCardinality()
        assert len(groups) == 0
        assert groups.estimate("api.openai.com") == 0.0
        assert groups.counter("api.openai.com") is None
        assert groups.entries_processed == 0
        assert "api.openai.com" not in groups

    def test_lazy_counter_per_key(self):
        groups = GroupedCardinality(error=0.05)
        groups.add("api.openai.com", uuid.UUID(int=1))
        groups.add("pypi.org", uuid.UUID(int=2))
        assert len(groups) == 2
        assert set(groups.keys()) == {"api.openai.com", "pypi.org"}
        assert groups.estimate("api.openai.com") > 0
        assert groups.counter("pypi.org").precision == 9
        assert groups.entries_processed == 2

    def test_invalid_error_fails_early(self):
        with pytest.raises(ConfigurationError):
            GroupedCardinality(error=1.5)

    def test_per_key_estimates(self):
        groups = GroupedCardinality(error=0.05, seed=3)
        for i in range(20_000):
            groups.add("busy.example.com", f"agent-{i}")
        for i in range(20_000):
            groups.add("quiet.example.com", f"agent-{i % 50}")
        totals = groups.totals()
        # ~4.6% standard error; allow 3 sigma
        assert abs(totals["busy.example.com"] - 20_000) < 20_000 * 0.14
        assert totals["quiet.example.com"] < 1_000
        assert groups.entries_processed == 40_000

    def test_memory_report(self):
        groups = GroupedCardinality(error=0.05)
        for domain in DOMAIN_POOL:
            groups.add(domain, "agent")
        report = groups.memory_report()
        assert report["keys"] == len(DOMAIN_POOL)
        assert report["register_bytes"] == 512 * len(DOMAIN_POOL)


class TestGroupedMerge:
    def test_partitions_merge_per_key(self):
        left = GroupedCardinality(error=0.02, seed=9)
        right = GroupedCardinality(error=0.02, seed=9)
        whole = GroupedCardinality(error=0.02, seed=9)
        for i in range(6000):
            domain = DOMAIN_POOL[i % len(DOMAIN_POOL)]
            (left if i % 2 else right).add(domain, i)
            whole.add(domain, i)
        right.add("only-right.example.com", "agent")
        whole.add("only-right.example.com", "agent")

        left.merge_update(right)
        assert set(left.keys()) == set(whole.keys())
        for key in whole.keys():
            assert left.counter(key).registers == whole.counter(key).registers
        assert left.entries_processed == whole.entries_processed

    def test_copied_counters_are_independent(self):
        left = GroupedCardinality(error=0.05)
        right = GroupedCardinality(error=0.05)
        right.add("pypi.org", "a")
        left.merge_update(right)
        left.add("pypi.org", "b")
        assert left.counter("pypi.org") != right.counter("pypi.org")

    def test_mismatched_error(self):
        with pytest.raises(MergeError):
            GroupedCardinality(error=0.05).merge_update(GroupedCardinality(error=0.01))

    def test_mismatched_seed(self):
        with pytest.raises(MergeError):
            GroupedCardinality(seed=1).merge_update(GroupedCardinality(seed=2))

    def test_wrong_type(self):
        with pytest.raises(MergeError):
            GroupedCardinality().merge_update({})


class TestGroupedSeed:
    def test_invalid_seed_fails_early(self):
        with pytest.raises(ConfigurationError):
            GroupedCardinality(seed=-1)

    def test_counters_share_seed(self):
        groups = GroupedCardinality(error=0.05, seed=11)
        groups.add("a", 1)
        groups.add("b", 1)
        assert groups.counter("a").seed == 11
        assert groups.counter("a").registers == groups.counter("b").registers


class TestGroupedDefaults:
    def test_default_error(self):
        groups = GroupedCardinality()
        assert groups.error == 0.01
        assert groups.seed == 0
        groups.add("pypi.org", "agent")
        assert groups.counter("pypi.org").precision == 14
