"""
Shared patterns and constants for the placeholder engine.

This module contains:
- Placeholder and conditional-block regular expressions
- FIELD_TYPES: the type annotations a placeholder may declare
- Glyphs used when rendering missing and multiple-entry values
- RESERVED_CONTROL_PREFIXES: placeholder interiors that belong to the
  conditional machinery and are never reported as fields

The tokenizer, the conditional analyzer and the substitution engine all read
from here so that detection and substitution scan text the same way.
"""

import re
from typing import Tuple


# A placeholder is the shortest {{...}} run without a closing brace inside.
PLACEHOLDER_PATTERN = re.compile(r"\{\{[^}]+\}\}")

# Block markers: {{#identifier}} ... {{/identifier}}
BLOCK_OPEN_PATTERN = re.compile(r"\{\{#([^}]+)\}\}")
BLOCK_CLOSE_TEMPLATE = "{{/%s}}"

# Identifiers that can name an option group (service_full_package)
GROUP_IDENTIFIER_PATTERN = re.compile(r"\w+")

MULTIPLE_MARKER_PATTERN = re.compile(r"\(s\)", re.IGNORECASE)
OPTIONAL_SUFFIX_PATTERN = re.compile(r"\?optional\s*$", re.IGNORECASE)
TYPE_ANNOTATION_PATTERN = re.compile(
    r"^([\s\S]+?):(text|number|date|multiline|multiple)\s*(\|[\s\S]*)?$",
    re.IGNORECASE,
)
DEFAULT_VALUE_PATTERN = re.compile(r"^([\s\S]+?)\|([\s\S]+)$")


FIELD_TYPES: Tuple[str, ...] = ("text", "number", "date", "multiline", "multiple")
DEFAULT_FIELD_TYPE = "text"

REQUIRED_FIELD_GLYPH = "—"  # em-dash
BULLET_PREFIX = "• "

EMPTY_MODE_EMDASH = "emdash"
EMPTY_MODE_EMPTY = "empty"
EMPTY_MODES: Tuple[str, ...] = (EMPTY_MODE_EMDASH, EMPTY_MODE_EMPTY)

DEFAULT_DATE_FORMAT = "%x"


# Interiors starting with these are block markers ({{#if x}}, {{/service_x}})
CONTROL_TAG_PREFIXES: Tuple[str, ...] = ("#", "/")

RESERVED_CONTROL_PREFIXES: Tuple[str, ...] = (
    "service_type_",
    "restraint_period_",
    "payment_terms_",
    "contract_type_",
)

GROUP_NAME_SUFFIX = " Options"
PERIOD_GROUP_ROOT = "period"
