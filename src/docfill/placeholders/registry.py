"""
Placeholder registry for one open document.

The registry is an arena of parsed fields indexed by canonical key. Each
canonical key owns the list of distinct literal spellings found in the
document ({{Company Name}}, {{COMPANY NAME}}, {{company name:text}}), so the
form can show one control per logical field while substitution still sees
every literal it has to replace.

A registry is built from a document's text and discarded when the text
changes; nothing in it is shared between documents.
"""

import logging
from typing import Dict, Iterable, Iterator, List, Optional

from .canonical import is_better_case_formatting
from .conditionals import (
    extract_conditional_groups,
    find_conditional_blocks,
    find_conditional_dependencies,
)
from .constants import RESERVED_CONTROL_PREFIXES
from .models import ConditionalGroup, FieldGroup, PlaceholderField
from .tokenizer import scan_fields

logger = logging.getLogger(__name__)


def _sort_key(display_key: str):
    return (display_key.casefold(), display_key)


class PlaceholderRegistry:
    """Deduplicated, case-merged placeholder fields of one document."""

    def __init__(
        self,
        fields: Optional[Iterable[PlaceholderField]] = None,
        conditional_groups: Optional[List[ConditionalGroup]] = None,
    ):
        self._variants: Dict[str, List[PlaceholderField]] = {}
        self._display_keys: Dict[str, str] = {}
        self.conditional_groups: List[ConditionalGroup] = list(conditional_groups or [])
        for field in fields or []:
            self.add(field)

    @classmethod
    def from_text(
        cls,
        text: str,
        reserved_prefixes: Iterable[str] = RESERVED_CONTROL_PREFIXES,
    ) -> "PlaceholderRegistry":
        """
        Parses a document's text into a registry.

        The tokenizer and the conditional analyzer scan the text independently;
        each field is annotated with the dependencies of the blocks enclosing
        its first occurrence.

        Args:
            text: Full document text
            reserved_prefixes: Interiors treated as control tags, never fields

        Returns:
            A registry holding every field and option group of the document
        """
        groups = extract_conditional_groups(text)
        blocks = find_conditional_blocks(text)
        registry = cls(conditional_groups=groups)

        for occurrence, field in scan_fields(text, reserved_prefixes):
            field.conditional_dependencies = find_conditional_dependencies(occurrence.start, blocks, groups)
            registry.add(field)

        registry._link_dependent_fields()
        logger.debug(
            f"Registry built: {len(registry.fields)} placeholder variants in "
            f"{len(registry)} canonical groups, {len(groups)} conditional groups"
        )
        return registry

    def add(self, field: PlaceholderField) -> bool:
        """
        Adds one parsed occurrence.

        Returns:
            False when the same literal was already registered for its canonical key
        """
        variants = self._variants.setdefault(field.canonical_key, [])
        if any(v.original_placeholder == field.original_placeholder for v in variants):
            return False

        variants.append(field)
        current = self._display_keys.get(field.canonical_key)
        if current is None or is_better_case_formatting(field.display_key, current):
            self._display_keys[field.canonical_key] = field.display_key
        return True

    def _link_dependent_fields(self) -> None:
        for group in self.conditional_groups:
            group.dependent_fields = []
        by_name = {group.group_name: group for group in self.conditional_groups}
        for field_group in self.groups:
            for dependency in field_group.conditional_dependencies:
                group = by_name.get(dependency.split(":", 1)[0])
                if group is not None and field_group.canonical_key not in group.dependent_fields:
                    group.dependent_fields.append(field_group.canonical_key)

    @property
    def fields(self) -> List[PlaceholderField]:
        """Every registered literal variant, sorted by display key."""
        all_fields = [field for variants in self._variants.values() for field in variants]
        return sorted(all_fields, key=lambda f: _sort_key(f.display_key))

    @property
    def groups(self) -> List[FieldGroup]:
        """One FieldGroup per canonical key, sorted by the group's display key."""
        groups = [
            FieldGroup(
                canonical_key=canonical_key,
                display_key=self._display_keys[canonical_key],
                variants=list(variants),
            )
            for canonical_key, variants in self._variants.items()
        ]
        return sorted(groups, key=lambda g: _sort_key(g.display_key))

    @property
    def canonical_keys(self) -> List[str]:
        return [group.canonical_key for group in self.groups]

    def get(self, canonical_key: str) -> Optional[FieldGroup]:
        if canonical_key not in self._variants:
            return None
        return FieldGroup(
            canonical_key=canonical_key,
            display_key=self._display_keys[canonical_key],
            variants=list(self._variants[canonical_key]),
        )

    def variants(self, canonical_key: str) -> List[PlaceholderField]:
        return list(self._variants.get(canonical_key, []))

    def display_key(self, canonical_key: str) -> Optional[str]:
        return self._display_keys.get(canonical_key)

    def __len__(self) -> int:
        return len(self._variants)

    def __contains__(self, canonical_key) -> bool:
        return canonical_key in self._variants

    def __iter__(self) -> Iterator[FieldGroup]:
        return iter(self.groups)


def extract_placeholders(text: str) -> List[PlaceholderField]:
    """Returns every distinct placeholder variant of a document, sorted by display key."""
    return PlaceholderRegistry.from_text(text).fields
