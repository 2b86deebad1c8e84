"""
Unit tests for the substitution engine (src/docfill/placeholders/substitution.py).
"""

from datetime import date

import pytest
from docfill.placeholders.registry import PlaceholderRegistry
from docfill.placeholders.substitution import (
    build_form_defaults,
    fill_document,
    format_value,
    lookup_key,
    substitute_placeholders,
)
from docfill.placeholders.tokenizer import parse_placeholder


class TestFormatValue:
    """Test per-type formatting of single values."""

    def test_missing_required_is_emdash(self):
        field = parse_placeholder("{{Client}}")
        assert format_value(field, None) == "—"
        assert format_value(field, "") == "—"
        assert format_value(field, []) == "—"

    def test_missing_optional_is_empty(self):
        field = parse_placeholder("{{Client?optional}}")
        assert format_value(field, None) == ""

    def test_empty_mode_empty(self):
        field = parse_placeholder("{{Client}}")
        assert format_value(field, None, empty_mode="empty") == ""

    def test_date_uses_format(self):
        field = parse_placeholder("{{Start:date}}")
        assert format_value(field, date(2024, 3, 5), date_format="%d/%m/%Y") == "05/03/2024"

    def test_date_string_passes_through(self):
        field = parse_placeholder("{{Start:date}}")
        assert format_value(field, "next Monday") == "next Monday"

    def test_number_rendering(self):
        field = parse_placeholder("{{Fee:number}}")
        assert format_value(field, 1500.0) == "1500"
        assert format_value(field, 12.5) == "12.5"
        assert format_value(field, 7) == "7"
        assert format_value(field, 0) == "0"

    def test_multiple_renders_bullets_and_skips_blanks(self):
        field = parse_placeholder("{{Item(s)}}")
        assert format_value(field, ["Alpha", "", "Beta"]) == "• Alpha\n• Beta"

    def test_multiple_with_only_blanks_is_missing(self):
        field = parse_placeholder("{{Item(s)}}")
        assert format_value(field, ["", "  "]) == "—"

    def test_list_in_text_field_is_joined(self):
        field = parse_placeholder("{{Names}}")
        assert format_value(field, ["A", "B"]) == "A, B"


class TestLookupKey:
    """Test value-map key resolution."""

    def test_plain_key(self):
        assert lookup_key("company name") == "company name"

    def test_underscore_key_uses_first_segment(self):
        assert lookup_key("fee_2") == "fee"
        assert lookup_key("a_b_c") == "a"


class TestSubstitutePlaceholders:
    """Test whole-text substitution."""

    def test_variants_share_value(self):
        text = "{{Company Name}} / {{COMPANY NAME}}"
        assert substitute_placeholders(text, {"company name": "Acme"}) == "Acme / Acme"

    def test_variants_formatted_independently(self):
        text = "{{Fee:number}} and {{fee}}"
        assert substitute_placeholders(text, {"fee": 10.0}) == "10 and 10.0"

    def test_optional_variant_of_required_field(self):
        text = "[{{Notes?optional}}] [{{NOTES}}]"
        assert substitute_placeholders(text, {}) == "[] [—]"

    def test_empty_braces_stay_verbatim(self):
        assert substitute_placeholders("a {{}} b", {}) == "a {{}} b"

    def test_unparseable_placeholder_stays_verbatim(self):
        assert substitute_placeholders("a {{ }} b", {}) == "a {{ }} b"

    def test_control_tags_stay_verbatim(self):
        text = "{{#service_full}}{{Price}}{{/service_full}}"
        assert substitute_placeholders(text, {"price": "9"}) == "{{#service_full}}9{{/service_full}}"

    def test_underscore_lookup_quirk(self):
        assert substitute_placeholders("{{fee_2}}", {"fee": "5"}) == "5"
        assert substitute_placeholders("{{fee_2}}", {"fee_2": "5"}) == "—"

    def test_use_defaults(self):
        text = "{{Reference|N/A}}"
        assert substitute_placeholders(text, {}) == "—"
        assert substitute_placeholders(text, {}, use_defaults=True) == "N/A"
        assert substitute_placeholders(text, {"reference": "R-1"}, use_defaults=True) == "R-1"

    def test_empty_mode_empty(self):
        assert substitute_placeholders("x{{Client}}y", {}, empty_mode="empty") == "xy"

    def test_invalid_empty_mode(self):
        with pytest.raises(ValueError):
            substitute_placeholders("{{Client}}", {}, empty_mode="blank")

    def test_match_case(self):
        text = "{{COMPANY NAME}} {{company name}} {{Company Name}}"
        filled = substitute_placeholders(text, {"company name": "Acme Ltd"}, match_case=True)
        assert filled == "ACME LTD acme ltd Acme Ltd"

    def test_match_case_off_by_default(self):
        assert substitute_placeholders("{{COMPANY NAME}}", {"company name": "Acme"}) == "Acme"

    def test_idempotent_without_placeholders_in_values(self, service_agreement_text):
        values = {"company name": "Acme", "client name": "Globex"}
        once = substitute_placeholders(service_agreement_text, values)
        assert substitute_placeholders(once, values) == once

    def test_text_without_placeholders_unchanged(self):
        assert substitute_placeholders("plain text", {"a": "b"}) == "plain text"


class TestFillDocument:
    """Test conditional rendering followed by substitution."""

    def test_fill_with_selections(self, service_agreement_text):
        values = {
            "effective date": date(2024, 1, 31),
            "company name": "Acme",
            "client name": "Globex",
            "full price": 2500.0,
            "deliverables(s)": ["Report", "Workshop"],
        }
        filled = fill_document(
            service_agreement_text,
            values,
            selections={"Service Options": "Full Package", "Period Options": "1 year"},
            date_format="%Y-%m-%d",
        )
        assert "made on 2024-01-31 between Acme and Globex." in filled
        assert "Acme agrees" in filled
        assert "Full package price: 2500" in filled
        assert "Basic package price" not in filled
        assert "One year from termination." in filled
        assert "Six months" not in filled
        assert "• Report\n• Workshop" in filled
        assert "Notes: \n" in filled
        assert "Reference: —" in filled
        assert "{{" not in filled

    def test_without_selections_blocks_are_kept(self):
        text = "{{#service_full}}{{Price}}{{/service_full}}"
        assert fill_document(text, {"price": "1"}) == "{{#service_full}}1{{/service_full}}"


class TestFormDefaults:
    """Test default pre-fill values."""

    def test_defaults_from_registry(self, service_agreement_text):
        registry = PlaceholderRegistry.from_text(service_agreement_text)
        assert build_form_defaults(registry) == {"basic price": "500", "reference": "N/A"}

    def test_no_defaults(self):
        assert build_form_defaults(PlaceholderRegistry.from_text("{{A}} {{B}}")) == {}
