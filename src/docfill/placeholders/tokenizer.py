"""
Placeholder tokenizer.

Finds every {{...}} occurrence in a text blob and parses its interior grammar:

    {{<key>[:(text|number|date|multiline|multiple)][|<default>][?optional]}}

A case-insensitive "(s)" anywhere in the interior marks a multiple-entry
field and wins over an explicit type annotation.

Functions:
    - find_placeholder_occurrences: all literal {{...}} matches with offsets
    - is_control_tag: True for conditional block markers and reserved prefixes
    - parse_placeholder: parses one literal into a PlaceholderField
    - scan_fields: occurrences that parse into fields, control tags skipped
"""

import logging
from typing import Iterable, List, NamedTuple, Optional, Tuple

from .canonical import split_key
from .constants import (
    CONTROL_TAG_PREFIXES,
    DEFAULT_FIELD_TYPE,
    DEFAULT_VALUE_PATTERN,
    MULTIPLE_MARKER_PATTERN,
    OPTIONAL_SUFFIX_PATTERN,
    PLACEHOLDER_PATTERN,
    RESERVED_CONTROL_PREFIXES,
    TYPE_ANNOTATION_PATTERN,
)
from .models import PlaceholderField

logger = logging.getLogger(__name__)


class PlaceholderOccurrence(NamedTuple):
    """One literal placeholder match and its span in the source text."""
    text: str
    start: int
    end: int


def find_placeholder_occurrences(text: str) -> List[PlaceholderOccurrence]:
    """Returns every {{...}} occurrence in document order."""
    return [
        PlaceholderOccurrence(match.group(0), match.start(), match.end())
        for match in PLACEHOLDER_PATTERN.finditer(text or "")
    ]


def placeholder_interior(literal: str) -> str:
    """Strips the {{ }} wrapper and surrounding whitespace."""
    return literal[2:-2].strip()


def is_control_tag(literal: str, reserved_prefixes: Iterable[str] = RESERVED_CONTROL_PREFIXES) -> bool:
    """
    True when a literal belongs to the conditional machinery rather than naming a field.

    Covers block markers ({{#id}}, {{/id}}, {{#if x}}, {{/if}}) and interiors
    starting with a reserved control prefix.
    """
    interior = placeholder_interior(literal)
    if interior.startswith(CONTROL_TAG_PREFIXES):
        return True
    return any(interior.startswith(prefix) for prefix in reserved_prefixes)


def parse_placeholder(literal: str) -> Optional[PlaceholderField]:
    """
    Parses one literal placeholder into a PlaceholderField.

    Modifiers are applied in a fixed order: multiplicity marker, optional
    suffix, type annotation, default value. Returns None when no key is left
    after stripping them.

    Args:
        literal: The placeholder text including its braces, e.g. "{{Fee:number|0}}"

    Returns:
        The parsed field, or None for an unusable placeholder
    """
    content = placeholder_interior(literal)
    if not content:
        return None

    key = content
    field_type = DEFAULT_FIELD_TYPE
    default_value = None
    is_optional = False

    is_multiple = bool(MULTIPLE_MARKER_PATTERN.search(content))
    if is_multiple:
        field_type = "multiple"

    if OPTIONAL_SUFFIX_PATTERN.search(key):
        is_optional = True
        key = OPTIONAL_SUFFIX_PATTERN.sub("", key).strip()

    # The annotation may close the key on its own or sit before "|default"
    type_match = TYPE_ANNOTATION_PATTERN.match(key)
    if type_match:
        key = type_match.group(1).strip() + (type_match.group(3) or "")
        if not is_multiple:
            field_type = type_match.group(2).lower()

    default_match = DEFAULT_VALUE_PATTERN.match(key)
    if default_match:
        key = default_match.group(1).strip()
        default_value = default_match.group(2).strip()

    key = key.strip()
    if not key:
        return None

    canonical_key, display_key = split_key(key)
    return PlaceholderField(
        canonical_key=canonical_key,
        display_key=display_key,
        original_placeholder=literal,
        type=field_type,
        default_value=default_value,
        is_optional=is_optional,
    )


def scan_fields(
    text: str,
    reserved_prefixes: Iterable[str] = RESERVED_CONTROL_PREFIXES,
) -> List[Tuple[PlaceholderOccurrence, PlaceholderField]]:
    """
    Returns (occurrence, field) pairs for every placeholder that names a field.

    Control tags are skipped and malformed placeholders are dropped silently.
    """
    reserved_prefixes = tuple(reserved_prefixes)
    results = []
    skipped = 0
    for occurrence in find_placeholder_occurrences(text):
        if is_control_tag(occurrence.text, reserved_prefixes):
            continue
        field = parse_placeholder(occurrence.text)
        if field is None:
            skipped += 1
            continue
        results.append((occurrence, field))

    logger.debug(f"Scanned {len(results)} placeholder occurrences ({skipped} unparseable)")
    return results
