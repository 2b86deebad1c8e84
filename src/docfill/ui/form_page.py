"""
Template Form Page

Streamlit page that turns an uploaded template into a fill-in form:
- one select box per conditional option group
- the fields those selections make visible, grouped into sections
- a live preview of the filled text and a download of the filled document
"""

import io
import os
import tempfile
from datetime import date
from typing import Any, Dict

import streamlit as st

from docfill.config import configure_logging, get_settings
from docfill.placeholders import PlaceholderRegistry, build_form_defaults, fill_document, lookup_key
from docfill.placeholders.models import FieldGroup
from docfill.utils.docx_io import extract_text_from_docx, fill_docx_template
from docfill.utils.form_layout import filter_visible_fields, format_label, group_fields_for_form


def _render_field(group: FieldGroup, default: str, widget_key_prefix: str) -> Any:
    label = format_label(group.display_key)
    if not group.is_optional:
        label += " *"
    widget_key = f"{widget_key_prefix}_{group.canonical_key}"
    help_text = f"Default: {group.default_value}" if group.default_value else None

    if group.type == "multiple":
        raw = st.text_area(label, value=default, key=widget_key, help="One entry per line")
        return raw.splitlines()
    if group.type == "multiline":
        return st.text_area(label, value=default, key=widget_key, help=help_text)
    if group.type == "date":
        picked = st.date_input(label, value=None, key=widget_key, help=help_text)
        return picked if isinstance(picked, date) else default
    return st.text_input(label, value=default, key=widget_key, help=help_text)


def _filled_docx_bytes(template_bytes: bytes, values: Dict[str, Any], selections: Dict[str, str]) -> bytes:
    with tempfile.TemporaryDirectory() as tmp_dir:
        template_path = os.path.join(tmp_dir, "template.docx")
        output_path = os.path.join(tmp_dir, "filled.docx")
        with open(template_path, "wb") as f:
            f.write(template_bytes)
        fill_docx_template(template_path, values, output_path, selections=selections)
        with open(output_path, "rb") as f:
            return f.read()


def render_form_page(widget_key_prefix: str = "field") -> None:
    configure_logging()
    settings = get_settings()

    st.title("Document Filler")
    uploaded = st.file_uploader("Upload a template", type=["docx", "txt", "md"])
    if uploaded is None:
        st.info("Upload a .docx or text template containing {{placeholders}} to begin.")
        return

    template_bytes = uploaded.getvalue()
    is_docx = uploaded.name.lower().endswith(".docx")
    if is_docx:
        text = extract_text_from_docx(io.BytesIO(template_bytes))
    else:
        text = template_bytes.decode("utf-8", errors="replace")

    registry = PlaceholderRegistry.from_text(text, settings.control_prefixes)
    if not len(registry):
        st.warning("No placeholders found in this template.")
        return

    selections: Dict[str, str] = {}
    if registry.conditional_groups:
        st.subheader("Document Options")
        for group in registry.conditional_groups:
            choice = st.selectbox(
                group.group_name,
                group.options,
                index=None,
                placeholder="Select an option...",
                key=f"conditional-{group.group_name}",
            )
            if choice:
                selections[group.group_name] = choice

    defaults = build_form_defaults(registry)
    visible = filter_visible_fields(registry.groups, selections)
    st.caption(f"Showing {len(visible)} of {len(registry)} fields")

    values: Dict[str, Any] = {}
    for title, fields in group_fields_for_form(visible):
        st.subheader(title)
        for group in fields:
            values[lookup_key(group.canonical_key)] = _render_field(
                group, defaults.get(group.canonical_key, ""), widget_key_prefix
            )

    filled_text = fill_document(text, values, selections=selections, **settings.substitution_options())
    with st.expander("Preview", expanded=True):
        st.text(filled_text)

    base_name = os.path.splitext(uploaded.name)[0]
    if is_docx:
        try:
            data = _filled_docx_bytes(template_bytes, values, selections)
        except Exception as e:
            st.error(f"Error generating document: {e}")
            return
        st.download_button(
            "Download filled document",
            data=data,
            file_name=f"{base_name}_filled.docx",
            mime="application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        )
    else:
        st.download_button(
            "Download filled document",
            data=filled_text.encode("utf-8"),
            file_name=f"{base_name}_filled.txt",
            mime="text/plain",
        )
