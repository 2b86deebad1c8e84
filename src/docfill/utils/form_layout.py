"""
Form layout helpers.

Turns a registry's fields into what a form shows: readable labels, fields
bucketed into titled sections, and only the fields whose conditional
dependencies the current group selections satisfy. Also writes a blank
plain-text form and reads a completed one back into values.
"""

import re
from typing import Any, Dict, List, Mapping, Sequence, Tuple, Union

from docfill.placeholders.models import FieldGroup, PlaceholderField
from docfill.placeholders.substitution import lookup_key

FormField = Union[FieldGroup, PlaceholderField]

# Section title -> test on the lowercased display key, checked in this order
FORM_SECTIONS = [
    ("Stage Costs", lambda k: "stage" in k and "cost" in k),
    ("Investor Information", lambda k: re.search(r"(investor|purchaser|buyer)", k) is not None),
    ("Company Information", lambda k: re.search(r"(company|issuer|seller)", k) is not None),
    ("Contractor Information", lambda k: re.search(r"(^contractor|contractor[_\s])", k) is not None),
    ("Payment Information", lambda k: re.search(
        r"(cost|fee|amount|price|value|retainer|deposit|payment|monthly|trust|billing|invoice)", k) is not None),
    ("Dates", lambda k: re.search(
        r"(^date|date[_\s]|effective[_\s]date|expiry[_\s]date|expiration[_\s]date|due[_\s]date|issue[_\s]date)",
        k) is not None),
    ("Stages", lambda k: "stage" in k and ("title" in k or "description" in k)),
    ("Contact Information", lambda k: re.search(r"(address|email|phone|contact)", k) is not None),
]
OTHER_SECTION = "Other Information"

# Display order of the sections on the form
SECTION_ORDER = [
    "Investor Information",
    "Company Information",
    "Contractor Information",
    "Payment Information",
    "Dates",
    "Stages",
    "Stage Costs",
    "Contact Information",
    OTHER_SECTION,
]

BLANK_FIELD_MARKERS = ("[INPUT FIELD]", "[TEXT AREA]")

_COMPLETED_FORM_PATTERNS = [
    re.compile(r"([A-Za-z ]+):[ \t]*([^\n\r]+)"),
    re.compile(r"([A-Za-z ]+)=[ \t]*([^\n\r]+)"),
    re.compile(r"([A-Za-z ]+?)[ \t]*-[ \t]*([^\n\r]+)"),
]


def format_label(key: str) -> str:
    """
    Builds a form label from a display key.

    ALL CAPS keys with spaces become Title Case; snake_case and camelCase keys
    are split into words and the first letter is capitalized.
    """
    if key == key.upper() and " " in key:
        return re.sub(r"\b\w", lambda m: m.group(0).upper(), key.lower())

    label = key.replace("_", " ")
    label = re.sub(r"([a-z])([A-Z])", r"\1 \2", label)
    return (label[:1].upper() + label[1:]).strip()


def section_for(display_key: str) -> str:
    key = display_key.lower()
    for title, matches in FORM_SECTIONS:
        if matches(key):
            return title
    return OTHER_SECTION


def group_fields_for_form(fields: Sequence[FormField]) -> List[Tuple[str, List[FormField]]]:
    """
    Buckets fields into titled form sections.

    Returns:
        (title, fields) pairs in SECTION_ORDER, empty sections omitted
    """
    sections: Dict[str, List[FormField]] = {title: [] for title in SECTION_ORDER}
    for field in fields:
        sections[section_for(field.display_key)].append(field)
    return [(title, sections[title]) for title in SECTION_ORDER if sections[title]]


def is_field_visible(field: FormField, selections: Mapping[str, str]) -> bool:
    """
    True when every conditional dependency of the field holds.

    "Group:Option" requires that option to be selected for the group; a bare
    "Group" requires any selection for it.
    """
    for dependency in field.conditional_dependencies:
        group_name, separator, option = dependency.partition(":")
        selected = selections.get(group_name)
        if separator:
            if selected != option:
                return False
        elif not selected:
            return False
    return True


def filter_visible_fields(fields: Sequence[FormField], selections: Mapping[str, str]) -> List[FormField]:
    return [field for field in fields if is_field_visible(field, selections)]


def parse_completed_form_text(text: str) -> Dict[str, str]:
    """
    Reads "Label: value", "Label = value" and "Label - value" lines of a completed form.

    Labels become snake_case keys. Values still carrying a blank-field marker
    are skipped. Later patterns overwrite earlier ones for the same key.
    """
    form_data: Dict[str, str] = {}
    for pattern in _COMPLETED_FORM_PATTERNS:
        for match in pattern.finditer(text or ""):
            field_name = re.sub(r"\s+", "_", match.group(1).strip().lower())
            value = match.group(2).strip()
            if not field_name or not value:
                continue
            if any(marker in value for marker in BLANK_FIELD_MARKERS):
                continue
            form_data[field_name] = value
    return form_data


def _form_key(display_key: str) -> str:
    return re.sub(r"\s+", "_", display_key.strip().lower())


def render_blank_form(fields: Sequence[FieldGroup]) -> str:
    """
    Writes a plain-text form with one "Label: [INPUT FIELD]" line per field.

    Fields are grouped under their section titles. Multiline and multiple
    fields get a [TEXT AREA] marker instead.
    """
    lines: List[str] = []
    for title, section_fields in group_fields_for_form(fields):
        if lines:
            lines.append("")
        lines.append(title)
        for field in section_fields:
            marker = "[TEXT AREA]" if field.type in ("multiline", "multiple") else "[INPUT FIELD]"
            lines.append(f"{field.display_key}: {marker}")
    return "\n".join(lines) + "\n"


def values_from_completed_form(text: str, fields: Sequence[FieldGroup]) -> Dict[str, Any]:
    """
    Reads a completed plain-text form into a value map for substitution.

    Form lines are matched to fields by their snake_case label and stored
    under each field's lookup key. Multiple-entry fields split their value
    on ";".
    """
    form_data = parse_completed_form_text(text)
    values: Dict[str, Any] = {}
    for field in fields:
        value = form_data.get(_form_key(field.display_key))
        if value is None:
            continue
        if field.is_multiple:
            values[lookup_key(field.canonical_key)] = [item.strip() for item in value.split(";")]
        else:
            values[lookup_key(field.canonical_key)] = value
    return values
