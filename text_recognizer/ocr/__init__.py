"""
Region-Based OCR Package

Adapters around the two external engines plus the step between them:

Components:
- RegionDetector: Finds candidate text boxes (OpenCV ER cascade)
- TextAreaPreparer: Decides whole-image vs per-box reading and builds
  grayscale / Otsu-binarized text areas
- TesseractEngine: Session-style wrapper around Tesseract

Usage:
    from text_recognizer.ocr import RegionDetector, TextAreaPreparer

    boxes = RegionDetector().detect(image)
    areas = TextAreaPreparer().create_text_areas(image, boxes)
"""

from .region_detector import (
    RegionDetector,
    to_bgr,
)
from .preprocessor import (
    AreaStrategy,
    TextAreaPreparer,
    to_grayscale,
    binarize_otsu,
)
from .ocr_engine import (
    TesseractEngine,
    ocr_session,
)

__all__ = [
    # Region detection
    'RegionDetector',
    'to_bgr',

    # Preprocessing
    'AreaStrategy',
    'TextAreaPreparer',
    'to_grayscale',
    'binarize_otsu',

    # OCR engine
    'TesseractEngine',
    'ocr_session',
]
