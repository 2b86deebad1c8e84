"""
Unit tests for key canonicalization (src/docfill/placeholders/canonical.py).
"""

import pytest
from docfill.placeholders.canonical import (
    canonicalize_key,
    is_all_caps,
    is_better_case_formatting,
    is_title_case,
    normalize_display_key,
    split_key,
)


class TestCanonicalizeKey:
    """Test the comparison form of keys."""

    def test_trims_collapses_and_lowercases(self):
        assert canonicalize_key("  Company   Name \t") == "company name"

    def test_case_variants_share_a_key(self):
        assert canonicalize_key("COMPANY NAME") == canonicalize_key("Company Name")

    def test_newlines_collapse_to_single_space(self):
        assert canonicalize_key("Stage\n1\nCosts") == "stage 1 costs"

    @pytest.mark.parametrize("key", ["Company Name", "  MIXED   case Key ", "a", "Stage 1 Costs"])
    def test_idempotent_through_display_form(self, key):
        """canonicalize(display(k)) == canonicalize(k)."""
        assert canonicalize_key(normalize_display_key(key)) == canonicalize_key(key)
        assert canonicalize_key(canonicalize_key(key)) == canonicalize_key(key)


class TestDisplayKey:
    """Test the case-preserving display form."""

    def test_keeps_case(self):
        assert normalize_display_key("  COMPANY   Name ") == "COMPANY Name"

    def test_split_key_returns_both_forms(self):
        assert split_key(" Client  Name ") == ("client name", "Client Name")


class TestCasePreference:
    """Test which spelling a canonical group displays."""

    def test_title_case_detection(self):
        assert is_title_case("Company Name")
        assert not is_title_case("COMPANY NAME")
        assert not is_title_case("company name")
        assert not is_title_case("Stage 1 Costs")

    def test_all_caps_detection(self):
        assert is_all_caps("COMPANY NAME")
        assert is_all_caps("STAGE 1 COSTS")
        assert not is_all_caps("Company Name")
        assert not is_all_caps("123")

    def test_title_case_beats_all_caps(self):
        assert is_better_case_formatting("Company Name", "COMPANY NAME")

    def test_title_case_beats_lowercase(self):
        assert is_better_case_formatting("Company Name", "company name")

    def test_all_caps_does_not_replace_title_case(self):
        assert not is_better_case_formatting("COMPANY NAME", "Company Name")

    def test_first_title_case_is_kept(self):
        assert not is_better_case_formatting("Company Name", "Company Name")

    def test_any_spelling_beats_all_caps(self):
        assert is_better_case_formatting("company name", "COMPANY NAME")
        assert is_better_case_formatting("company Name", "COMPANY NAME")

    def test_all_caps_does_not_replace_other_spellings(self):
        assert not is_better_case_formatting("COMPANY NAME", "company name")

    def test_first_seen_kept_within_a_tier(self):
        assert not is_better_case_formatting("company NAME", "company name")
        assert not is_better_case_formatting("FEE", "COMPANY NAME")
