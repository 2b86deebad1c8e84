"""
Pytest configuration and fixtures for the document filler tests.

This module provides shared fixtures for all tests: sample template text,
a python-docx template factory and an isolated settings environment.
"""

import pytest
from pathlib import Path
from typing import List, Optional

from docx import Document

from docfill import config


# ============================================================================
# SAMPLE TEMPLATE TEXT
# ============================================================================

SERVICE_AGREEMENT = """SERVICE AGREEMENT

This agreement is made on {{Effective Date:date}} between {{Company Name}} and {{Client Name}}.
{{COMPANY NAME}} agrees to provide the services described below.

{{#service_full_package}}
Full package price: {{Full Price:number}}
{{/service_full_package}}
{{#service_basic}}
Basic package price: {{Basic Price:number|500}}
{{/service_basic}}

Restraint period:
{{#period_1_year}}One year from termination.{{/period_1_year}}
{{#period_6_months}}Six months from termination.{{/period_6_months}}

Deliverables:
{{Deliverables(s)}}

Notes: {{Notes:multiline?optional}}
Reference: {{Reference|N/A}}
"""


@pytest.fixture
def service_agreement_text() -> str:
    """A template using every placeholder form and two option groups."""
    return SERVICE_AGREEMENT


# ============================================================================
# DOCX FIXTURES
# ============================================================================

@pytest.fixture
def make_docx(tmp_path):
    """
    Factory writing a .docx template into tmp_path.

    Args:
        paragraphs: Body paragraph texts
        table_cells: Texts placed one per cell in a single-row table
        name: File name inside tmp_path

    Returns:
        Path to the saved template
    """
    def _make(paragraphs: List[str], table_cells: Optional[List[str]] = None, name: str = "template.docx") -> Path:
        doc = Document()
        for text in paragraphs:
            doc.add_paragraph(text)
        if table_cells:
            table = doc.add_table(rows=1, cols=len(table_cells))
            for index, text in enumerate(table_cells):
                table.cell(0, index).text = text
        path = tmp_path / name
        doc.save(str(path))
        return path

    return _make


@pytest.fixture
def read_docx():
    """Returns (paragraph texts, table cell texts) of a saved document."""
    def _read(path: Path):
        doc = Document(str(path))
        paragraphs = [p.text for p in doc.paragraphs]
        cells = [cell.text for table in doc.tables for row in table.rows for cell in row.cells]
        return paragraphs, cells

    return _read


# ============================================================================
# SETTINGS ISOLATION
# ============================================================================

@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Clears DOCFILL_* variables and the cached settings around every test."""
    for name in (
        "DOCFILL_EMPTY_MODE",
        "DOCFILL_DATE_FORMAT",
        "DOCFILL_MATCH_CASE",
        "DOCFILL_USE_DEFAULTS",
        "DOCFILL_CONTROL_PREFIXES",
        "DOCFILL_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config, "load_dotenv", lambda *args, **kwargs: False)
    config.reset_settings()
    yield
    config.reset_settings()
