"""Tests for pattern, sampling and snapshot helpers."""

import random

import pytest

from fusedb.utils import (
    dumps_snapshot,
    glob_to_regex,
    loads_snapshot,
    sample_keys,
    strict_equals,
)


class TestGlobToRegex:
    @pytest.mark.parametrize("pattern,key,expected", [
        ("f*", "foo", True),
        ("f*", "f", True),
        ("f*", "bar", False),
        ("*z", "fizz", True),
        ("?oo", "foo", True),
        ("?oo", "fooo", False),
        ("a*b?c", "a123bXc", True),
        ("a.c", "abc", False),
        ("a+", "aa", False),
        ("a+", "a+", True),
        ("^x$", "^x$", True),
        ("*", "", True),
        ("line*", "line1\nline2", True),
    ])
    def test_matches(self, pattern, key, expected):
        assert bool(glob_to_regex(pattern).fullmatch(key)) is expected


class TestSampleKeys:
    def test_distinct_and_capped(self):
        keys = ["a", "b", "c"]
        picked = sample_keys(keys, 10, random.Random(1))
        assert sorted(picked) == keys

    def test_count_respected(self):
        keys = [str(i) for i in range(100)]
        picked = sample_keys(keys, 5, random.Random(2))
        assert len(picked) == 5
        assert len(set(picked)) == 5

    def test_fractional_count_truncated(self):
        picked = sample_keys(list("abcdef"), 2.5, random.Random(4))
        assert len(picked) == 2

    def test_zero_or_empty(self):
        assert sample_keys([], 3) == []
        assert sample_keys(["a"], 0) == []

    def test_roughly_uniform(self):
        """Test every key gets picked with similar frequency."""
        rng = random.Random(42)
        counts = {k: 0 for k in "abcd"}
        for _ in range(4000):
            for key in sample_keys(list("abcd"), 2, rng):
                counts[key] += 1
        assert all(1700 < c < 2300 for c in counts.values())


class TestSnapshotCodec:
    def test_loads_requires_object(self):
        with pytest.raises(ValueError, match="object"):
            loads_snapshot("[]")

    def test_unicode_preserved(self):
        blob = dumps_snapshot({"k": "héllo 世界"})
        assert "世界" in blob
        assert loads_snapshot(blob.encode("utf-8")) == {"k": "héllo 世界"}


class TestStrictEquals:
    @pytest.mark.parametrize("a,b,expected", [
        (1, 1, True),
        (1, 1.0, True),
        (1, True, False),
        (True, True, True),
        (0, False, False),
        ("a", "a", True),
        ("1", 1, False),
        (None, None, True),
        (None, 0, False),
        ([1], [1], False),
        ({"a": 1}, {"a": 1}, False),
    ])
    def test_cases(self, a, b, expected):
        assert strict_equals(a, b) is expected

    def test_same_container_object(self):
        obj = {"a": [1]}
        assert strict_equals(obj, obj) is True
