"""
Data models for parsed placeholders and conditional option groups.

PlaceholderField describes one literal occurrence of a placeholder,
ConditionalGroup one family of document-section choices, ConditionalBlock
one matched {{#id}}...{{/id}} span and FieldGroup the logical field a form
renders one control for.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .constants import DEFAULT_FIELD_TYPE, FIELD_TYPES


FieldType = Literal["text", "number", "date", "multiline", "multiple"]


class PlaceholderField(BaseModel):
    """One parsed occurrence of a placeholder."""
    canonical_key: str = Field(description="Trimmed, whitespace-collapsed, lowercased key")
    display_key: str = Field(description="Trimmed, whitespace-collapsed key with its original case")
    original_placeholder: str = Field(description="Exact literal matched in the source text, braces included")
    type: FieldType = Field(default=DEFAULT_FIELD_TYPE)
    default_value: Optional[str] = None
    is_optional: bool = False
    is_multiple: bool = False
    conditional_dependencies: List[str] = Field(default_factory=list)

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v):
        """Accept type annotations in any case."""
        if v is None:
            return DEFAULT_FIELD_TYPE
        v = str(v).strip().lower()
        return v if v in FIELD_TYPES else DEFAULT_FIELD_TYPE

    @model_validator(mode="after")
    def sync_multiple(self):
        # is_multiple mirrors the type
        self.is_multiple = self.type == "multiple"
        return self


class ConditionalGroup(BaseModel):
    """A family of mutually related document-section choices."""
    group_name: str
    root: str = Field(description="Lowercased first identifier segment, e.g. 'service'")
    options: List[str] = Field(default_factory=list)
    dependent_fields: List[str] = Field(default_factory=list)

    def add_option(self, option: str) -> None:
        if option and option not in self.options:
            self.options.append(option)


class ConditionalBlock(BaseModel):
    """A matched {{#identifier}} ... {{/identifier}} span."""
    identifier: str
    start: int
    end: int
    body_start: int
    body_end: int

    def contains(self, offset: int) -> bool:
        return self.start < offset < self.end


class FieldGroup(BaseModel):
    """
    All literal variants of one logical field.

    The form collaborator renders one control per FieldGroup and the
    substitution engine replaces each variant's literal independently.
    """
    canonical_key: str
    display_key: str
    variants: List[PlaceholderField] = Field(default_factory=list)

    @property
    def type(self) -> str:
        for variant in self.variants:
            if variant.is_multiple:
                return "multiple"
        # First explicit annotation wins over unannotated spellings
        for variant in self.variants:
            if variant.type != DEFAULT_FIELD_TYPE:
                return variant.type
        return DEFAULT_FIELD_TYPE

    @property
    def is_multiple(self) -> bool:
        return self.type == "multiple"

    @property
    def is_optional(self) -> bool:
        return bool(self.variants) and all(v.is_optional for v in self.variants)

    @property
    def default_value(self) -> Optional[str]:
        for variant in self.variants:
            if variant.default_value is not None:
                return variant.default_value
        return None

    @property
    def conditional_dependencies(self) -> List[str]:
        dependencies: List[str] = []
        for variant in self.variants:
            for dependency in variant.conditional_dependencies:
                if dependency not in dependencies:
                    dependencies.append(dependency)
        return dependencies
