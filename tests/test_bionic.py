"""Unit tests for bionic lead sizing.

RULES:
- For every length >= 1, 1 <= lead_length <= length
- Default bands: <= 2 → 1, <= 4 → ceil(0.5 × n), else ceil(0.4 × n)
"""

import pytest

from bionic_reader.config import LeadPolicy
from bionic_reader.core.bionic import lead_length, split_lead


class TestDefaultPolicy:
    """Lead sizes for the default three-band policy."""

    @pytest.mark.parametrize("length, expected", [
        (1, 1),
        (2, 1),
        (3, 2),
        (4, 2),
        (5, 2),
        (6, 3),
        (10, 4),
        (11, 5),
        (34, 14),
    ])
    def test_lead_length(self, length, expected):
        assert lead_length(length) == expected

    @pytest.mark.parametrize("length", range(1, 60))
    def test_bounds(self, length):
        assert 1 <= lead_length(length) <= length

    @pytest.mark.parametrize("length", [0, -3])
    def test_non_positive_length_has_no_lead(self, length):
        assert lead_length(length) == 0


class TestSplitLead:
    """split_lead returns (bold part, remainder) of the core word."""

    def test_long_word(self):
        assert split_lead("bionically") == ("bion", "ically")

    def test_short_word(self):
        assert split_lead("of") == ("o", "f")

    def test_single_letter(self):
        assert split_lead("I") == ("I", "")

    def test_empty_word(self):
        assert split_lead("") == ("", "")

    def test_parts_rejoin(self):
        for word in ["a", "read", "reading", "naïveté", "rock’n’roll"]:
            lead, rest = split_lead(word)
            assert lead + rest == word


class TestCustomPolicy:
    """LeadPolicy values are honored and validated."""

    def test_custom_thresholds(self):
        policy = LeadPolicy(short_max=3, medium_max=6, medium_ratio=0.5, long_ratio=0.5)
        assert lead_length(3, policy) == 1
        assert lead_length(5, policy) == 3
        assert lead_length(8, policy) == 4

    def test_full_ratio_bolds_whole_word(self):
        policy = LeadPolicy(long_ratio=1.0)
        assert lead_length(9, policy) == 9

    @pytest.mark.parametrize("kwargs", [
        {"short_max": 0},
        {"short_max": 5, "medium_max": 4},
        {"medium_ratio": 0.0},
        {"long_ratio": 1.5},
    ])
    def test_invalid_policy_rejected(self, kwargs):
        with pytest.raises(ValueError):
            LeadPolicy(**kwargs)
