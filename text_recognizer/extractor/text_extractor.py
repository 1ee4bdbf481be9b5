"""
Text Extractor

Drives the OCR engine over a list of prepared text areas.

One engine session serves every area of a call, since initialization is
by far the most expensive step. The engine is cleared after each area so
no recognition context leaks from one area into the next, and the session
is released when the call is done. Sessions are never shared between
calls, so concurrent calls each get their own.
"""

from functools import partial
from typing import Callable, List, Optional, Sequence

import numpy as np
from loguru import logger

from ..ocr.ocr_engine import TesseractEngine, ocr_session
from .utils import sanitize_text


class TextExtractor:
    """
    Reads text areas with one OCR session and cleans each result.

    Usage:
        extractor = TextExtractor(language='eng')
        fragments = extractor.extract(areas)   # cleaned, non-empty strings
    """

    def __init__(
        self,
        language: str = 'eng',
        engine_factory: Optional[Callable[[], TesseractEngine]] = None,
        tesseract_config: str = '--psm 6',
        tesseract_cmd: Optional[str] = None,
    ):
        """
        Initialize text extractor.

        Args:
            language: Tesseract language code of the trained dictionary
            engine_factory: Builds a fresh, uninitialized engine per call
            tesseract_config: Options for the default Tesseract engine
            tesseract_cmd: Path to tesseract executable (auto-detected if None)
        """
        self.language = language
        self.engine_factory = engine_factory or partial(
            TesseractEngine,
            tesseract_config=tesseract_config,
            tesseract_cmd=tesseract_cmd,
        )

    def extract(self, areas: Sequence[np.ndarray]) -> List[str]:
        """
        OCR every area in order.

        Args:
            areas: Grayscale or binarized uint8 images

        Returns:
            Non-empty sanitized fragments, in area order

        Raises:
            InitializationError: if the OCR engine can't be initialized
        """
        fragments: List[str] = []
        if not areas:
            return fragments

        with ocr_session(self.engine_factory, self.language) as engine:
            for index, area in enumerate(areas):
                pixels = np.ascontiguousarray(area, dtype=np.uint8)
                height, width = pixels.shape[:2]
                channels = 1 if pixels.ndim == 2 else pixels.shape[2]

                engine.set_image(
                    pixels.tobytes(),
                    width,
                    height,
                    channels,
                    pixels.strides[0],
                )

                if engine.recognize():
                    text = sanitize_text(engine.get_text())
                    if text:
                        fragments.append(text)
                else:
                    logger.debug(f"Area {index} could not be recognized, skipping")

                engine.clear()

        logger.info(f"Recognized {len(fragments)} of {len(areas)} text areas")
        return fragments
