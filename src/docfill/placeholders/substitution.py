"""
Substitution Engine

Replaces every placeholder literal in a document with a value formatted for
the placeholder's declared type. Values are supplied per canonical key; every
literal spelling of the same key draws the same value but is formatted with
its own type and optionality.

Missing values (None, "", an empty list) render as "" for optional fields and
as an em-dash for required ones, so an unfilled required field stays visible
in the output.

Functions:
    - lookup_key: the value-map key for a canonical key
    - format_value: renders one value for one field
    - substitute_placeholders: fills every placeholder in a text
    - build_form_defaults: default values declared by a registry's fields
    - fill_document: conditional rendering followed by substitution
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, Mapping, Optional, Sequence

from .conditionals import extract_conditional_groups, render_conditional_blocks
from .constants import (
    BULLET_PREFIX,
    DEFAULT_DATE_FORMAT,
    EMPTY_MODE_EMDASH,
    EMPTY_MODE_EMPTY,
    EMPTY_MODES,
    PLACEHOLDER_PATTERN,
    REQUIRED_FIELD_GLYPH,
    RESERVED_CONTROL_PREFIXES,
)
from .models import PlaceholderField
from .tokenizer import is_control_tag, parse_placeholder

logger = logging.getLogger(__name__)


def lookup_key(canonical_key: str) -> str:
    """
    Returns the key a field's value is looked up under.

    Keys containing an underscore are looked up by the part before the first
    underscore ("fee_2" -> "fee").
    """
    if "_" in canonical_key:
        return canonical_key.split("_")[0]
    return canonical_key


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if _is_sequence(value):
        return len(value) == 0
    return False


def _missing_value(field: PlaceholderField, empty_mode: str) -> str:
    if field.is_optional or empty_mode == EMPTY_MODE_EMPTY:
        return ""
    return REQUIRED_FIELD_GLYPH


def _number_to_string(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _match_placeholder_case(field: PlaceholderField, value: str) -> str:
    letters = [c for c in field.display_key if c.isalpha()]
    if not letters or not value:
        return value
    if field.display_key == field.display_key.upper():
        return value.upper()
    if field.display_key == field.display_key.lower():
        return value.lower()
    return value


def format_value(
    field: PlaceholderField,
    value: Any,
    date_format: str = DEFAULT_DATE_FORMAT,
    empty_mode: str = EMPTY_MODE_EMDASH,
) -> str:
    """
    Formats a value for one placeholder occurrence.

    Args:
        field: The parsed placeholder the value goes into
        value: str, number, date/datetime or a list of strings
        date_format: strftime format for date values ("%x" is the locale date)
        empty_mode: "emdash" renders required-missing fields as an em-dash,
            "empty" renders them as an empty string

    Returns:
        The replacement text
    """
    if _is_missing(value):
        return _missing_value(field, empty_mode)

    if field.type == "date":
        if isinstance(value, (date, datetime)):
            return value.strftime(date_format)
        return str(value)

    if field.type == "number":
        return _number_to_string(value)

    if field.type == "multiple":
        if _is_sequence(value):
            items = [str(item) for item in value if item is not None and str(item).strip() != ""]
            if not items:
                return _missing_value(field, empty_mode)
            return "\n".join(f"{BULLET_PREFIX}{item}" for item in items)
        return str(value)

    # text and multiline pass through; lists given to a single-value field are joined
    if _is_sequence(value):
        items = [str(item) for item in value if item is not None and str(item).strip() != ""]
        if not items:
            return _missing_value(field, empty_mode)
        return ", ".join(items)
    return str(value)


def substitute_placeholders(
    text: str,
    values: Mapping[str, Any],
    date_format: str = DEFAULT_DATE_FORMAT,
    empty_mode: str = EMPTY_MODE_EMDASH,
    use_defaults: bool = False,
    match_case: bool = False,
    reserved_prefixes: Sequence[str] = RESERVED_CONTROL_PREFIXES,
) -> str:
    """
    Replaces every placeholder in text with its formatted value.

    Control tags and placeholders that do not parse into a field are left
    verbatim. Identical literals always receive identical replacements.

    Args:
        text: Document text containing {{...}} placeholders
        values: Canonical key -> value, as collected by the form
        date_format: strftime format for date values
        empty_mode: "emdash" or "empty" for required fields without a value
        use_defaults: Fall back to a placeholder's declared default before
            applying the missing-value rule
        match_case: Upper-case values placed into ALL CAPS placeholders and
            lower-case values placed into all lowercase ones
        reserved_prefixes: Interiors treated as control tags

    Returns:
        The filled text
    """
    if empty_mode not in EMPTY_MODES:
        raise ValueError(f"Unknown empty mode '{empty_mode}', expected one of {EMPTY_MODES}")

    reserved_prefixes = tuple(reserved_prefixes)
    cache: Dict[str, str] = {}

    def replace(match) -> str:
        literal = match.group(0)
        if literal in cache:
            return cache[literal]

        if is_control_tag(literal, reserved_prefixes):
            return literal
        field = parse_placeholder(literal)
        if field is None:
            return literal

        value = values.get(lookup_key(field.canonical_key))
        if use_defaults and _is_missing(value) and field.default_value is not None:
            value = field.default_value

        rendered = format_value(field, value, date_format=date_format, empty_mode=empty_mode)
        if match_case:
            rendered = _match_placeholder_case(field, rendered)
        cache[literal] = rendered
        return rendered

    result = PLACEHOLDER_PATTERN.sub(replace, text or "")
    logger.debug(f"Substituted {len(cache)} distinct placeholder literals")
    return result


def build_form_defaults(registry) -> Dict[str, str]:
    """
    Returns canonical key -> default value for every field declaring a default.

    Used to pre-fill a form before the user edits it.
    """
    defaults: Dict[str, str] = {}
    for group in registry.groups:
        if group.default_value is not None:
            defaults[group.canonical_key] = group.default_value
    return defaults


def fill_document(
    text: str,
    values: Mapping[str, Any],
    selections: Optional[Mapping[str, str]] = None,
    **options,
) -> str:
    """
    Renders conditional blocks for the given selections, then substitutes values.

    Args:
        text: Document text
        values: Canonical key -> value
        selections: Group name -> selected option; None leaves every block in place
        **options: Passed to substitute_placeholders

    Returns:
        The filled text
    """
    if selections is not None:
        groups = extract_conditional_groups(text)
        text = render_conditional_blocks(text, groups, selections)
    return substitute_placeholders(text, values, **options)
