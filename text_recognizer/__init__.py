"""
Text Recognizer

Locates and reads machine-printed text in noisy, low-quality photos.

Features:
- Text region detection with the Neumann & Matas ER cascade (OpenCV)
- Geometric deduplication of overlapping detector boxes
- Whole-frame vs per-region reading chosen from box coverage
- Per-region Otsu binarization
- Tesseract OCR with one session per call
- Cleanup of recognition noise without losing punctuation or word breaks

Quick Start:
    from text_recognizer import Recognizer, get_text

    # Simple usage
    print(get_text('photo.jpg'))

    # Advanced usage
    from text_recognizer import RecognizerConfig, ClassifierPaths

    config = RecognizerConfig(
        classifiers=ClassifierPaths().resolve('models/'),
        deduplicate_words=True,
    )
    recognizer = Recognizer(config)
    text = recognizer.get_text(image)   # numpy BGR image
"""

__version__ = '1.0.0'

from .config import (
    ClassifierPaths,
    DetectorConfig,
    RecognizerConfig,
)
from .errors import (
    RecognitionError,
    InputError,
    InitializationError,
    ProcessingError,
)
from .layout.box import Rectangle
from .layout.dedup import remove_duplicates
from .ocr.region_detector import RegionDetector
from .ocr.preprocessor import AreaStrategy, TextAreaPreparer
from .ocr.ocr_engine import TesseractEngine
from .extractor.text_extractor import TextExtractor
from .extractor.utils import sanitize_text, assemble_result, normalize_result
from .recognizer import Recognizer, get_text
from .log import setup_logging

__all__ = [
    # Version
    '__version__',

    # Main API
    'Recognizer',
    'get_text',
    'setup_logging',

    # Configuration
    'ClassifierPaths',
    'DetectorConfig',
    'RecognizerConfig',

    # Errors
    'RecognitionError',
    'InputError',
    'InitializationError',
    'ProcessingError',

    # Components
    'Rectangle',
    'remove_duplicates',
    'RegionDetector',
    'AreaStrategy',
    'TextAreaPreparer',
    'TesseractEngine',
    'TextExtractor',
    'sanitize_text',
    'assemble_result',
    'normalize_result',
]
