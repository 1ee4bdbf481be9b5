"""
Recognition Errors

Every fatal condition raised by the recognizer is a RecognitionError, so a
caller can catch one type. The subclasses tell input problems apart from
setup problems and from failures inside the detection engine.

Per-area OCR failures are not errors: they are skipped by the extractor.
"""

from __future__ import annotations

from typing import Optional


class RecognitionError(Exception):
    """
    Base error for a failed recognition call.
    
    Keeps the underlying exception (if any) so the original diagnostic
    is never lost.
    """
    
    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.original_error = original_error


class InputError(RecognitionError):
    """Empty path, undecodable file, or empty image."""
    pass


class InitializationError(RecognitionError):
    """Classifier, filter, or OCR engine could not be set up."""
    pass


class ProcessingError(RecognitionError):
    """The detection engine failed while processing an image."""
    pass
