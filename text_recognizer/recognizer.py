"""
Text Recognizer

Main orchestration module: finds and reads machine-printed text in noisy,
low-quality photos.

Pipeline (strictly forward, one pass per image):
    image
      -> RegionDetector        candidate boxes (overlapping, duplicated)
      -> remove_duplicates     non-overlapping boxes
      -> TextAreaPreparer      whole gray frame, or binarized crop per box
      -> TextExtractor         one OCR session, cleaned fragment per area
      -> assemble_result       fragments joined by spaces
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Optional, Union

import cv2
import numpy as np
from loguru import logger
from PIL import Image

from .config import RecognizerConfig
from .errors import InputError, RecognitionError
from .extractor.text_extractor import TextExtractor
from .extractor.utils import assemble_result, normalize_result
from .layout.dedup import remove_duplicates
from .ocr.ocr_engine import TesseractEngine
from .ocr.preprocessor import TextAreaPreparer
from .ocr.region_detector import RegionDetector

ImageSource = Union[str, Path, np.ndarray, Image.Image]


class Recognizer:
    """
    Recognizes English text and numbers in noisy images.

    Each instance owns its configuration; instances with different
    classifiers can run side by side, and one instance may serve calls
    from several threads since every call opens its own OCR session.

    Usage:
        recognizer = Recognizer()
        text = recognizer.get_text('photo.jpg')

        # Classifiers stored elsewhere
        recognizer.set_classifiers(
            'models/trained_classifierNM1.xml',
            'models/trained_classifierNM2.xml',
            'models/trained_classifier_erGrouping.xml',
        )

    Any object with a `detect(image) -> List[Rectangle]` method can stand
    in for the region detector, and any zero-argument callable returning an
    engine with the TesseractEngine methods can stand in for the OCR engine.
    """

    def __init__(
        self,
        config: Optional[RecognizerConfig] = None,
        detector: Optional[Any] = None,
        engine_factory: Optional[Callable[[], TesseractEngine]] = None,
    ):
        """
        Initialize recognizer.

        Args:
            config: Recognizer configuration
            detector: Region detector; built from config if None
            engine_factory: OCR engine factory; Tesseract if None
        """
        self.config = config or RecognizerConfig()
        self._owns_detector = detector is None
        self.detector = detector if detector is not None else self._build_detector()
        self.engine_factory = engine_factory

    def _build_detector(self) -> RegionDetector:
        return RegionDetector(
            classifiers=self.config.classifiers,
            config=self.config.detector,
            max_channel_value=self.config.max_channel_value,
        )

    def set_classifiers(
        self,
        classifier_nm1: str,
        classifier_nm2: str,
        classifier_grouping: str,
    ) -> None:
        """
        Set paths to the detector's trained classifiers.

        Args:
            classifier_nm1: Classifier for stage 1 of the ER cascade
            classifier_nm2: Classifier for stage 2 of the ER cascade
            classifier_grouping: Classifier for region grouping
        """
        self.config = self.config.with_classifiers(
            classifier_nm1,
            classifier_nm2,
            classifier_grouping,
        )
        if self._owns_detector:
            self.detector = self._build_detector()

    def get_text(self, source: ImageSource) -> str:
        """
        Recognize text in an image file or an in-memory image.

        Args:
            source: File path, OpenCV (BGR) numpy image, or PIL image

        Returns:
            Recognized text, each fragment followed by a space;
            empty string when no text was found

        Raises:
            InputError: empty path, unreadable file, or empty image
            InitializationError: classifiers or OCR engine unavailable
            ProcessingError: the detection engine failed
        """
        if isinstance(source, (str, Path)):
            return self.get_text_from_file(source)
        if isinstance(source, Image.Image):
            return self.get_text_from_image(self._pil_to_bgr(source))
        if isinstance(source, np.ndarray):
            return self.get_text_from_image(source)
        raise InputError(f"unsupported image source: {type(source).__name__}")

    def get_text_from_file(self, path: Union[str, Path]) -> str:
        """Load an image file with OpenCV and recognize it."""
        # Path('') collapses to '.'
        if str(path) in ('', '.'):
            raise InputError("bad file name")

        logger.info(f"Recognizing text in: {path}")
        image = cv2.imread(str(path))
        if image is None:
            raise InputError(f"failed to load image: {path}")

        return self.get_text_from_image(image)

    def get_text_from_image(self, image: np.ndarray) -> str:
        """Recognize text in a decoded uint8 image (gray, BGR or BGRA)."""
        if image is None or not isinstance(image, np.ndarray) or image.size == 0:
            raise InputError("failed to load image")
        if image.dtype != np.uint8 or image.ndim not in (2, 3):
            raise InputError(
                f"failed to load image: unsupported {image.dtype} array "
                f"of shape {image.shape}"
            )
        if image.ndim == 3 and image.shape[2] not in (1, 3, 4):
            raise InputError(
                f"failed to load image: unsupported {image.shape[2]}-channel image"
            )

        try:
            return self._run(image)
        except RecognitionError as e:
            logger.error(f"Recognition failed: {e}")
            raise

    def _run(self, image: np.ndarray) -> str:
        boxes = self.detector.detect(image)
        if not boxes:
            logger.info("No text regions detected")
            return ""

        boxes = remove_duplicates(boxes)

        preparer = TextAreaPreparer(
            coverage_threshold=self.config.whole_image_coverage,
            max_value=self.config.max_channel_value,
        )
        areas = preparer.create_text_areas(image, boxes)

        extractor = TextExtractor(
            language=self.config.language,
            engine_factory=self.engine_factory,
            tesseract_config=self.config.tesseract_config,
            tesseract_cmd=self.config.tesseract_cmd,
        )
        fragments = extractor.extract(areas)

        if self.config.deduplicate_words:
            result = normalize_result(fragments)
        else:
            result = assemble_result(fragments)

        logger.info(f"Recognized {len(result)} characters")
        return result

    @staticmethod
    def _pil_to_bgr(image: Image.Image) -> np.ndarray:
        if image.mode not in ('L', 'RGB'):
            image = image.convert('RGB')
        array = np.array(image)
        if array.ndim == 3:
            array = cv2.cvtColor(array, cv2.COLOR_RGB2BGR)
        return array


def get_text(
    source: ImageSource,
    config: Optional[RecognizerConfig] = None,
) -> str:
    """
    Convenience function to recognize text with a one-off Recognizer.

    Args:
        source: File path, OpenCV (BGR) numpy image, or PIL image
        config: Optional configuration

    Returns:
        Recognized text (possibly empty)
    """
    return Recognizer(config).get_text(source)
