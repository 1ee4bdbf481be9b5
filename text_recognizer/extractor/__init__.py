"""
Extraction Package

Runs OCR over prepared text areas and cleans what comes back.
"""

from .utils import (
    ALLOWED_CHARACTERS,
    filter_characters,
    collapse_spaces,
    sanitize_text,
    assemble_result,
    normalize_result,
)
from .text_extractor import TextExtractor

__all__ = [
    'ALLOWED_CHARACTERS',
    'filter_characters',
    'collapse_spaces',
    'sanitize_text',
    'assemble_result',
    'normalize_result',
    'TextExtractor',
]
