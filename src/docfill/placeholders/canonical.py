"""
Key canonicalization.

Two placeholders name the same logical field when their keys agree after
trimming, collapsing internal whitespace and lowercasing. The display form
keeps the author's case so the form can label the field the way the template
spells it.
"""

import re
from typing import Tuple


_WHITESPACE_RUN = re.compile(r"\s+")
_TITLE_CASE = re.compile(r"^[A-Z][a-z]+(\s+[A-Z][a-z]+)*$")


def normalize_display_key(key: str) -> str:
    """Trims the key and collapses internal whitespace, keeping its case."""
    return _WHITESPACE_RUN.sub(" ", key.strip())


def canonicalize_key(key: str) -> str:
    """Returns the comparison form of a placeholder key."""
    return normalize_display_key(key).lower()


def split_key(key: str) -> Tuple[str, str]:
    """Returns (canonical_key, display_key) for a raw key."""
    display_key = normalize_display_key(key)
    return display_key.lower(), display_key


def is_title_case(key: str) -> bool:
    return bool(_TITLE_CASE.match(key))


def is_all_caps(key: str) -> bool:
    return any(c.isalpha() for c in key) and key == key.upper()


def is_better_case_formatting(new_key: str, existing_key: str) -> bool:
    """
    Decides whether new_key should replace existing_key as a group's display form.

    Title Case beats anything else and any other spelling beats ALL CAPS.
    Within a tier the existing (first-seen) form is kept.
    """
    if is_title_case(existing_key):
        return False
    if is_title_case(new_key):
        return True
    return is_all_caps(existing_key) and not is_all_caps(new_key)
