"""
Collaborator modules around the placeholder engine.
"""

from . import docx_io
from . import form_layout
