"""Parse hand-typed timetables into structured schedule blocks."""

__version__ = "0.1.0"

from .models import Block, Template
from .text_parse import normalize, parse
from .store import Store

__all__ = [
    "Block",
    "Template",
    "Store",
    "normalize",
    "parse",
]
