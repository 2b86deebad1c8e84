import logging
import re
from typing import Any, Dict, Iterator, List, Mapping, Optional

from docx import Document

from docfill.config import get_settings
from docfill.placeholders.conditionals import render_conditional_blocks, resolve_block_state
from docfill.placeholders.models import ConditionalGroup
from docfill.placeholders.registry import PlaceholderRegistry
from docfill.placeholders.substitution import lookup_key, substitute_placeholders

logger = logging.getLogger(__name__)

MARKER_LINE_PATTERN = re.compile(r"^\{\{([#/])([^}]+)\}\}$")


def _iter_paragraphs(doc) -> Iterator:
    """Body paragraphs, then table cell paragraphs, then header/footer paragraphs."""
    for paragraph in doc.paragraphs:
        yield paragraph
    for table in doc.tables:
        for row in table.rows:
            for cell in row.cells:
                for paragraph in cell.paragraphs:
                    yield paragraph
    for section in doc.sections:
        for part in (section.header, section.footer):
            # Reading a linked header/footer makes python-docx create one
            if part.is_linked_to_previous:
                continue
            for paragraph in part.paragraphs:
                yield paragraph


def _set_paragraph_text(paragraph, text: str) -> None:
    # The first run keeps its formatting and carries the whole text
    runs = paragraph.runs
    if not runs:
        paragraph.add_run(text)
        return
    runs[0].text = text
    for run in runs[1:]:
        run.text = ""


def document_text(doc) -> str:
    return "\n".join(paragraph.text for paragraph in _iter_paragraphs(doc))


def read_docx_text(template_path: str) -> str:
    """Like extract_text_from_docx, but lets python-docx errors propagate."""
    text = document_text(Document(template_path))
    logger.info(f"Extracted {len(text)} characters from {template_path}")
    return text


def extract_text_from_docx(template_path: str) -> str:
    """Reads a Word template and returns its paragraph, table, header and footer text, one paragraph per line."""
    try:
        return read_docx_text(template_path)
    except Exception as e:
        logger.error(f"Error reading template '{template_path}': {e}")
        return ""


def _prune_block_paragraphs(doc, groups: List[ConditionalGroup], selections: Mapping[str, str]) -> int:
    """
    Removes body paragraphs of unselected blocks whose markers sit on paragraphs of their own.

    Marker paragraphs of resolved blocks are removed as well. Returns the
    number of paragraphs removed.
    """
    to_remove = []
    open_blocks = []  # (identifier, keep)

    for paragraph in doc.paragraphs:
        marker = MARKER_LINE_PATTERN.match(paragraph.text.strip())
        if marker:
            kind, identifier = marker.group(1), marker.group(2)
            state = resolve_block_state(identifier, groups, selections)
            if state is not None:
                if kind == "#":
                    open_blocks.append((identifier, state))
                    to_remove.append(paragraph)
                    continue
                if open_blocks and open_blocks[-1][0] == identifier:
                    open_blocks.pop()
                    to_remove.append(paragraph)
                    continue
        if any(not keep for _, keep in open_blocks):
            to_remove.append(paragraph)

    if open_blocks:
        logger.warning(f"Unterminated conditional blocks in document: {[i for i, _ in open_blocks]}")
        return 0

    for paragraph in to_remove:
        element = paragraph._element
        element.getparent().remove(element)
    return len(to_remove)


def _warn_unmatched_values(registry: PlaceholderRegistry, values: Mapping[str, Any], template_path: str) -> None:
    known = {lookup_key(key) for key in registry.canonical_keys}
    for key in values:
        if key not in known:
            logger.warning(f"Value for '{key}' matches no placeholder in {template_path}")

    for group in registry.groups:
        value = values.get(lookup_key(group.canonical_key))
        if (value is None or value == "" or value == []) and not group.is_optional:
            logger.warning(f"Required placeholder '{group.display_key}' has no value in {template_path}")


def fill_docx_template(
    template_path: str,
    values: Mapping[str, Any],
    output_path: str,
    selections: Optional[Mapping[str, str]] = None,
    **options,
) -> Dict[str, int]:
    """
    Fills placeholders in a Word template and saves the result.

    Conditional blocks are resolved first when selections are given: blocks
    whose markers sit on their own paragraphs drop or keep whole paragraphs,
    blocks inside a single paragraph are rendered inline. Placeholders are then
    substituted in body paragraphs, table cells, headers and footers. A
    paragraph's first run keeps its formatting and receives the new text.

    Args:
        template_path: Path to the .docx template
        values: Canonical key -> value
        output_path: Where to save the filled document
        selections: Group name -> selected option, or None to leave blocks alone
        **options: Overrides for the configured substitution options

    Returns:
        Counts of changed and removed paragraphs
    """
    try:
        doc = Document(template_path)
        substitution_options = get_settings().substitution_options()
        substitution_options.update(options)

        registry = PlaceholderRegistry.from_text(
            document_text(doc), substitution_options["reserved_prefixes"]
        )
        _warn_unmatched_values(registry, values, template_path)

        removed = 0
        groups = registry.conditional_groups
        if selections is not None:
            removed = _prune_block_paragraphs(doc, groups, selections)

        changed = 0
        for paragraph in _iter_paragraphs(doc):
            original_text = paragraph.text
            if "{{" not in original_text:
                continue
            new_text = original_text
            if selections is not None:
                new_text = render_conditional_blocks(new_text, groups, selections)
            new_text = substitute_placeholders(new_text, values, **substitution_options)
            if new_text != original_text:
                _set_paragraph_text(paragraph, new_text)
                changed += 1

        doc.save(output_path)
        logger.info(f"Successfully created filled document: {output_path}")
        return {"changed_paragraphs": changed, "removed_paragraphs": removed}

    except Exception as e:
        logger.error(f"Error in fill_docx_template: {e}")
        raise
