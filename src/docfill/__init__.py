"""
docfill: fills legal and business document templates.

Subpackages:
- placeholders: placeholder detection, conditional sections and substitution
- utils: DOCX adapter and form layout helpers
- ui: Streamlit form page
"""

__version__ = "0.1.0"
