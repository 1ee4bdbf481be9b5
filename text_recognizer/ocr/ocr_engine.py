"""
OCR Engine Adapter

Wraps Tesseract (through pytesseract) in a session-style API:

    init(language) -> set_image(...) -> recognize() -> get_text() -> clear()
    ... repeated per text area ...
    end()

Initialization happens once per session and is the only step allowed to
fail hard. A recognition that fails is reported by recognize() returning
False so the caller can skip that one area.

IMPORTANT: Tesseract must be installed separately:
- Windows: Download from https://github.com/UB-Mannheim/tesseract/wiki
- Linux: apt-get install tesseract-ocr
- macOS: brew install tesseract

pytesseract keeps the executable path in one module global
(pytesseract.pytesseract.tesseract_cmd). An engine built with tesseract_cmd
sets that global only for the duration of each tesseract call, under a
process-wide lock, and restores it afterwards. Calls from engines with a
custom path are therefore serialized, and an engine without one uses
whatever path the global holds when it runs.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

import numpy as np
import pytesseract
from loguru import logger
from PIL import Image

from ..errors import InitializationError

# Guards pytesseract.pytesseract.tesseract_cmd
_command_lock = threading.Lock()


@contextmanager
def _tesseract_command(tesseract_cmd: Optional[str]) -> Iterator[None]:
    """Point pytesseract at tesseract_cmd for the duration of the block."""
    if not tesseract_cmd:
        yield
        return

    with _command_lock:
        previous = pytesseract.pytesseract.tesseract_cmd
        pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        try:
            yield
        finally:
            pytesseract.pytesseract.tesseract_cmd = previous


class TesseractEngine:
    """
    One Tesseract session.

    Usage:
        engine = TesseractEngine()
        engine.init('eng')
        engine.set_image(area.tobytes(), w, h, 1, area.strides[0])
        if engine.recognize():
            print(engine.get_text())
        engine.clear()
        engine.end()
    """

    def __init__(
        self,
        tesseract_config: str = '--psm 6',
        tesseract_cmd: Optional[str] = None,
    ):
        """
        Args:
            tesseract_config: Extra command line options for tesseract
            tesseract_cmd: Path to tesseract executable (auto-detected if None).
                Applied per call, see the module docstring.
        """
        self.tesseract_config = tesseract_config
        self.tesseract_cmd = tesseract_cmd
        self.language: Optional[str] = None
        self._image: Optional[Image.Image] = None
        self._text = ''

    @property
    def is_initialized(self) -> bool:
        return self.language is not None

    def init(self, language: str = 'eng') -> None:
        """
        Check that tesseract runs and has the trained data for language.

        Raises:
            InitializationError: tesseract missing or language not installed
        """
        try:
            with _tesseract_command(self.tesseract_cmd):
                version = pytesseract.get_tesseract_version()
                languages = pytesseract.get_languages(config='')
        except (pytesseract.TesseractNotFoundError, pytesseract.TesseractError) as e:
            raise InitializationError(
                f"could not initialize tesseract ocr: {e}",
                original_error=e,
            ) from e

        if language not in languages:
            raise InitializationError(
                f"could not initialize tesseract ocr: "
                f"language '{language}' is not installed"
            )

        logger.debug(f"Tesseract {version} initialized for '{language}'")
        self.language = language

    def set_image(
        self,
        data: bytes,
        width: int,
        height: int,
        channels: int,
        stride: int,
    ) -> None:
        """
        Load a raw 8-bit pixel buffer.

        Args:
            data: Pixel rows, each `stride` bytes long
            width: Image width in pixels
            height: Image height in pixels
            channels: Bytes per pixel (1 gray, 3 BGR, 4 BGRA)
            stride: Bytes per row
        """
        buffer = np.frombuffer(data, dtype=np.uint8)
        rows = buffer[:stride * height].reshape(height, stride)
        pixels = rows[:, :width * channels]

        if channels == 1:
            self._image = Image.fromarray(pixels.reshape(height, width))
        else:
            # OpenCV order (BGR/BGRA) to PIL order (RGB/RGBA)
            array = pixels.reshape(height, width, channels)
            if channels == 3:
                array = np.ascontiguousarray(array[:, :, ::-1])
            elif channels == 4:
                array = np.ascontiguousarray(array[:, :, [2, 1, 0, 3]])
            self._image = Image.fromarray(array)
        self._text = ''

    def recognize(self) -> bool:
        """Run OCR on the loaded image. Returns False if it failed."""
        if not self.is_initialized or self._image is None:
            return False

        try:
            with _tesseract_command(self.tesseract_cmd):
                self._text = pytesseract.image_to_string(
                    self._image,
                    lang=self.language,
                    config=self.tesseract_config,
                )
        except pytesseract.TesseractError as e:
            logger.debug(f"Recognition failed: {e}")
            self._text = ''
            return False
        return True

    def get_text(self) -> str:
        """UTF-8 text of the last successful recognition."""
        return self._text

    def clear(self) -> None:
        """Forget the current image and its result."""
        self._image = None
        self._text = ''

    def end(self) -> None:
        """Release the session."""
        self.clear()
        self.language = None


@contextmanager
def ocr_session(
    engine_factory: Callable[[], TesseractEngine],
    language: str = 'eng',
) -> Iterator[TesseractEngine]:
    """
    Create, initialize and, on exit, release one OCR engine.

    Raises:
        InitializationError: if the engine can't be initialized
    """
    engine = engine_factory()
    engine.init(language)
    try:
        yield engine
    finally:
        engine.end()
