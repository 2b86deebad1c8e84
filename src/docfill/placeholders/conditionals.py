"""
Conditional Block Analysis Module

Templates mark optional document sections with paired block markers:

    {{#service_full_package}} ... {{/service_full_package}}

This module finds those blocks, folds their identifiers into named option
groups ("Service Options" -> ["Full Package", ...]), works out which group
and option a placeholder depends on from the blocks enclosing it, and renders
a document for a given set of group selections.

Group matching is a substring heuristic: an identifier belongs to every group
whose root segment it contains. Templates whose group roots overlap
(e.g. "pay" and "payment") can match more than one group.

Functions:
    - find_conditional_blocks: paired block spans, nested blocks included
    - derive_group_name / derive_option_name: identifier naming rules
    - extract_conditional_groups: option groups declared by a document
    - match_identifier: (group, option) pairs an identifier resolves to
    - find_conditional_dependencies: dependency strings for a text offset
    - resolve_block_state: keep/drop/untouched decision for one block
    - render_conditional_blocks: applies group selections to a document
    - selection_identifiers: identifier -> flag mapping for a selection set
"""

import logging
import re
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .constants import (
    BLOCK_CLOSE_TEMPLATE,
    BLOCK_OPEN_PATTERN,
    GROUP_IDENTIFIER_PATTERN,
    GROUP_NAME_SUFFIX,
    PERIOD_GROUP_ROOT,
)
from .models import ConditionalBlock, ConditionalGroup

logger = logging.getLogger(__name__)

_WORD_START = re.compile(r"\b\w", re.ASCII)
_WHITESPACE_RUN = re.compile(r"\s+")


def find_conditional_blocks(text: str) -> List[ConditionalBlock]:
    """
    Pairs every {{#id}} with the nearest following {{/id}}.

    Blocks with different identifiers may nest and are all reported. An open
    marker inside an already paired block with the same identifier is not
    paired again, and an open marker without a close produces no block.

    Returns:
        Blocks ordered by the position of their open marker
    """
    text = text or ""
    blocks: List[ConditionalBlock] = []
    for match in BLOCK_OPEN_PATTERN.finditer(text):
        identifier = match.group(1)
        if any(b.identifier == identifier and b.contains(match.start()) for b in blocks):
            continue
        close_marker = BLOCK_CLOSE_TEMPLATE % identifier
        close_at = text.find(close_marker, match.end())
        if close_at == -1:
            logger.debug(f"Unterminated conditional block '{identifier}' at offset {match.start()}")
            continue
        blocks.append(ConditionalBlock(
            identifier=identifier,
            start=match.start(),
            end=close_at + len(close_marker),
            body_start=match.end(),
            body_end=close_at,
        ))
    return blocks


def is_group_identifier(identifier: str) -> bool:
    """True for word_word identifiers that name an option group."""
    identifier = identifier.strip()
    return "_" in identifier and bool(GROUP_IDENTIFIER_PATTERN.fullmatch(identifier))


def derive_group_name(identifier: str) -> str:
    """'service_full_package' -> 'Service Options'."""
    root = identifier.strip().split("_")[0]
    return root[:1].upper() + root[1:] + GROUP_NAME_SUFFIX


def derive_option_name(identifier: str) -> str:
    """
    'service_full_package' -> 'Full Package'.

    Period groups read the second segment as a duration: 1 -> '1 year',
    2 -> '2 years', anything else -> '<n> months'.
    """
    parts = identifier.strip().split("_")
    if parts[0] == PERIOD_GROUP_ROOT and len(parts) >= 2:
        number = parts[1]
        if number == "1":
            return "1 year"
        if number == "2":
            return "2 years"
        return f"{number} months"

    option = " ".join(parts[1:])
    return _WORD_START.sub(lambda m: m.group(0).upper(), option).strip()


def extract_conditional_groups(text: str) -> List[ConditionalGroup]:
    """
    Collects the option groups declared by a document's conditional blocks.

    Only word_word identifiers contribute. Groups appear in order of first
    use and each group's options are duplicate-free.
    """
    groups: Dict[str, ConditionalGroup] = {}
    for block in find_conditional_blocks(text):
        identifier = block.identifier.strip()
        if not is_group_identifier(identifier):
            continue

        group_name = derive_group_name(identifier)
        if group_name not in groups:
            groups[group_name] = ConditionalGroup(
                group_name=group_name,
                root=identifier.split("_")[0].lower(),
            )
        groups[group_name].add_option(derive_option_name(identifier))

    logger.debug(f"Detected conditional groups: {[(g.group_name, g.options) for g in groups.values()]}")
    return list(groups.values())


def _option_key(option: str) -> str:
    return _WHITESPACE_RUN.sub("_", option.strip().lower())


def _match_option(identifier: str, group: ConditionalGroup) -> Optional[str]:
    identifier_lower = identifier.strip().lower()
    root_prefix = group.root + "_"
    remainder = identifier_lower[len(root_prefix):] if identifier_lower.startswith(root_prefix) else ""

    # An identifier naming one of the options exactly never falls through to a partial match
    if remainder:
        derived = derive_option_name(identifier_lower)
        for option in group.options:
            if option.lower() == derived.lower():
                return option

    for option in group.options:
        if _option_key(option) in identifier_lower or option.lower() in identifier_lower:
            return option

    # Shortened identifiers ("period_6") match options whose leading segments they spell out
    if remainder:
        for option in group.options:
            option_key = _option_key(option)
            if option_key == remainder or option_key.startswith(remainder + "_"):
                return option
    return None


def match_identifier(
    identifier: str,
    groups: Sequence[ConditionalGroup],
) -> List[Tuple[ConditionalGroup, Optional[str]]]:
    """
    Resolves a block identifier against the known option groups.

    Args:
        identifier: The block identifier, e.g. "service_full_package"
        groups: Option groups of the document

    Returns:
        (group, option) pairs for every group whose root the identifier
        contains; option is None when no specific option matched
    """
    identifier_lower = identifier.strip().lower()
    matches = []
    for group in groups:
        if group.root and group.root in identifier_lower:
            matches.append((group, _match_option(identifier, group)))
    return matches


def dependency_label(group: ConditionalGroup, option: Optional[str]) -> str:
    return f"{group.group_name}:{option}" if option else group.group_name


def find_conditional_dependencies(
    offset: int,
    blocks: Sequence[ConditionalBlock],
    groups: Sequence[ConditionalGroup],
) -> List[str]:
    """
    Returns the dependencies of a placeholder starting at offset.

    Every block enclosing the offset contributes "<Group>:<Option>", or the
    bare group name when the group matched but no option did. An empty list
    means the placeholder is always shown.
    """
    dependencies: List[str] = []
    for block in blocks:
        if not block.contains(offset):
            continue
        for group, option in match_identifier(block.identifier, groups):
            label = dependency_label(group, option)
            if label not in dependencies:
                dependencies.append(label)
    return dependencies


def resolve_block_state(
    identifier: str,
    groups: Sequence[ConditionalGroup],
    selections: Mapping[str, str],
) -> Optional[bool]:
    """
    Decides what happens to one block given the user's group selections.

    Returns:
        None when the identifier maps to no group (leave it untouched),
        True to keep the block body, False to drop the block
    """
    if not is_group_identifier(identifier):
        return None
    matches = match_identifier(identifier, groups)
    if not matches:
        return None

    for group, option in matches:
        selected = selections.get(group.group_name)
        if not selected:
            return False
        if option is not None and selected != option:
            return False
    return True


def render_conditional_blocks(
    text: str,
    groups: Sequence[ConditionalGroup],
    selections: Mapping[str, str],
) -> str:
    """
    Applies group selections to a document.

    Blocks of the selected option lose their markers and keep their body;
    blocks of other options are removed with their body. Blocks that map to
    no group (control markers such as {{#if x}}) stay verbatim.
    """
    result = text or ""
    while True:
        target = None
        for block in find_conditional_blocks(result):
            state = resolve_block_state(block.identifier, groups, selections)
            if state is not None:
                target = (block, state)
                break

        # Untouched blocks never change, so each pass resolves one block
        if target is None:
            return result

        block, keep = target
        replacement = result[block.body_start:block.body_end] if keep else ""
        logger.debug(f"{'Kept' if keep else 'Removed'} conditional block '{block.identifier}'")
        result = result[:block.start] + replacement + result[block.end:]


def _identifier_for_option(group: ConditionalGroup, option: str) -> str:
    if group.root == PERIOD_GROUP_ROOT:
        number = option.split(" ")[0]
        if option == "1 year":
            unit = "year"
        elif option == "2 years":
            unit = "years"
        else:
            unit = "months"
        return f"{PERIOD_GROUP_ROOT}_{number}_{unit}"
    return f"{group.root}_{_option_key(option)}"


def selection_identifiers(
    groups: Sequence[ConditionalGroup],
    selections: Mapping[str, str],
) -> Dict[str, bool]:
    """
    Builds the identifier -> flag mapping for a set of group selections.

    Each option of a selected group yields "<root>_<option_words>" set to True
    for the selected option and False for the others. Groups without a
    selection contribute nothing.
    """
    flags: Dict[str, bool] = {}
    for group in groups:
        selected = selections.get(group.group_name)
        if not selected:
            continue
        for option in group.options:
            flags[_identifier_for_option(group, option)] = option == selected
    return flags
