"""
Tests for skyblock_stats/models/identity.py.

Covers:
  - Compact and hyphenated inputs normalize to the same identity
  - Idempotence on already-canonical input
  - Case-insensitive equality and hashing
  - Graceful degradation vs. strict mode for malformed ids
"""

from __future__ import annotations

import pytest

from skyblock_stats.models.identity import (
    InvalidIdentity,
    PlayerIdentity,
    compact_form,
    normalize_identity,
)

COMPACT = "069a79f444e94726a5befca90e38aaf5"
HYPHENATED = "069a79f4-44e9-4726-a5be-fca90e38aaf5"


class TestNormalizeIdentity:
    def test_compact_input_produces_both_forms(self):
        identity = normalize_identity(COMPACT)
        assert identity.compact == COMPACT
        assert identity.hyphenated == HYPHENATED
        assert identity.is_valid

    def test_hyphenated_input_produces_both_forms(self):
        identity = normalize_identity(HYPHENATED)
        assert identity.compact == COMPACT
        assert identity.hyphenated == HYPHENATED

    def test_upper_case_is_lowered(self):
        identity = normalize_identity(HYPHENATED.upper())
        assert identity.compact == COMPACT
        assert identity.hyphenated == HYPHENATED

    def test_surrounding_whitespace_ignored(self):
        assert normalize_identity(f"  {COMPACT}\n").compact == COMPACT

    def test_idempotent_on_compact_form(self):
        once = normalize_identity(COMPACT)
        twice = normalize_identity(once.compact)
        assert twice.compact == once.compact
        assert twice == once

    def test_hyphenated_and_compact_are_equal(self):
        assert normalize_identity(COMPACT) == normalize_identity(HYPHENATED.upper())

    def test_hash_matches_equality(self):
        ids = {normalize_identity(COMPACT), normalize_identity(HYPHENATED)}
        assert len(ids) == 1

    def test_str_is_hyphenated(self):
        assert str(normalize_identity(COMPACT)) == HYPHENATED

    def test_frozen(self):
        identity = normalize_identity(COMPACT)
        with pytest.raises(Exception):
            identity.compact = "x"  # type: ignore[misc]


class TestMalformedIdentity:
    @pytest.mark.parametrize("raw", ["", "abc", COMPACT[:-1], COMPACT + "0", "z" * 32])
    def test_non_strict_degrades(self, raw):
        identity = normalize_identity(raw)
        assert not identity.is_valid
        assert identity.compact == compact_form(raw)
        assert identity.hyphenated == identity.compact

    @pytest.mark.parametrize("raw", ["", "abc", "g" * 32])
    def test_strict_raises(self, raw):
        with pytest.raises(InvalidIdentity) as exc_info:
            normalize_identity(raw, strict=True)
        assert exc_info.value.raw == raw

    def test_invalid_identity_is_value_error(self):
        assert issubclass(InvalidIdentity, ValueError)

    def test_strict_accepts_valid(self):
        assert normalize_identity(HYPHENATED, strict=True).compact == COMPACT

    def test_identity_model_direct_construction(self):
        identity = PlayerIdentity(compact=COMPACT, hyphenated=HYPHENATED)
        assert identity.is_valid
