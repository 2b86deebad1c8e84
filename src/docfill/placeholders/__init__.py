"""
Placeholder engine for document templates.

This package detects {{...}} placeholders in document text, merges their case
and spacing variants into logical fields, works out which conditional section
each one belongs to, and writes user values back into the text.

Architecture:
    - constants: patterns, field types, glyphs, reserved control prefixes
    - models: PlaceholderField, ConditionalGroup, ConditionalBlock, FieldGroup
    - canonical: key canonicalization and display-form preference
    - tokenizer: occurrence scanning and per-placeholder grammar
    - conditionals: block pairing, option groups, dependencies, rendering
    - registry: per-document arena of fields keyed by canonical key
    - substitution: type-aware value formatting and replacement

Usage:
    >>> from docfill.placeholders import PlaceholderRegistry, substitute_placeholders
    >>> registry = PlaceholderRegistry.from_text(text)
    >>> [g.display_key for g in registry.groups]
    >>> filled = substitute_placeholders(text, {"company name": "Acme Pty Ltd"})

Placeholder syntax:
    {{<key>[:(text|number|date|multiline|multiple)][|<default>][?optional]}}
    "(s)" anywhere in the interior makes a multiple-entry field.
    Conditional sections: {{#<identifier>}} ... {{/<identifier>}}
"""

from .constants import (
    FIELD_TYPES,
    REQUIRED_FIELD_GLYPH,
    RESERVED_CONTROL_PREFIXES,
    EMPTY_MODE_EMDASH,
    EMPTY_MODE_EMPTY,
)

from .models import (
    PlaceholderField,
    ConditionalGroup,
    ConditionalBlock,
    FieldGroup,
)

from .canonical import (
    canonicalize_key,
    normalize_display_key,
    split_key,
    is_better_case_formatting,
)

from .tokenizer import (
    PlaceholderOccurrence,
    find_placeholder_occurrences,
    is_control_tag,
    parse_placeholder,
    scan_fields,
)

from .conditionals import (
    find_conditional_blocks,
    derive_group_name,
    derive_option_name,
    extract_conditional_groups,
    match_identifier,
    find_conditional_dependencies,
    resolve_block_state,
    render_conditional_blocks,
    selection_identifiers,
)

from .registry import (
    PlaceholderRegistry,
    extract_placeholders,
)

from .substitution import (
    lookup_key,
    format_value,
    substitute_placeholders,
    build_form_defaults,
    fill_document,
)

__all__ = [
    # Constants
    "FIELD_TYPES",
    "REQUIRED_FIELD_GLYPH",
    "RESERVED_CONTROL_PREFIXES",
    "EMPTY_MODE_EMDASH",
    "EMPTY_MODE_EMPTY",

    # Models
    "PlaceholderField",
    "ConditionalGroup",
    "ConditionalBlock",
    "FieldGroup",

    # Canonicalization
    "canonicalize_key",
    "normalize_display_key",
    "split_key",
    "is_better_case_formatting",

    # Tokenizer
    "PlaceholderOccurrence",
    "find_placeholder_occurrences",
    "is_control_tag",
    "parse_placeholder",
    "scan_fields",

    # Conditional blocks
    "find_conditional_blocks",
    "derive_group_name",
    "derive_option_name",
    "extract_conditional_groups",
    "match_identifier",
    "find_conditional_dependencies",
    "resolve_block_state",
    "render_conditional_blocks",
    "selection_identifiers",

    # Registry
    "PlaceholderRegistry",
    "extract_placeholders",

    # Substitution
    "lookup_key",
    "format_value",
    "substitute_placeholders",
    "build_form_defaults",
    "fill_document",
]
