"""
UI modules for the document filler.

Re-exports the Streamlit page used by app.py.
"""

from .form_page import render_form_page

__all__ = [
    'render_form_page',
]
