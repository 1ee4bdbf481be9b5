"""
Recognizer Configuration

Configuration objects for the recognition pipeline. They are frozen so a
Recognizer can hold one without other instances (or threads) changing it
underneath; "changing" a setting produces a new object.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union


DEFAULT_CLASSIFIER_NM1 = 'trained_classifierNM1.xml'
DEFAULT_CLASSIFIER_NM2 = 'trained_classifierNM2.xml'
DEFAULT_CLASSIFIER_GROUPING = 'trained_classifier_erGrouping.xml'


@dataclass(frozen=True)
class ClassifierPaths:
    """
    Trained classifier files used by the region detector.

    Attributes:
        nm1: Stage 1 classifier of the Neumann & Matas ER filter
        nm2: Stage 2 classifier of the Neumann & Matas ER filter
        grouping: Classifier used to group regions into text lines
    """
    nm1: str = DEFAULT_CLASSIFIER_NM1
    nm2: str = DEFAULT_CLASSIFIER_NM2
    grouping: str = DEFAULT_CLASSIFIER_GROUPING

    def resolve(self, base_dir: Union[str, Path]) -> 'ClassifierPaths':
        """Anchor relative paths at base_dir. Absolute paths are kept."""
        base = Path(base_dir)

        def _anchor(path: str) -> str:
            p = Path(path)
            return str(p if p.is_absolute() else base / p)

        return ClassifierPaths(
            nm1=_anchor(self.nm1),
            nm2=_anchor(self.nm2),
            grouping=_anchor(self.grouping),
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            'nm1': self.nm1,
            'nm2': self.nm2,
            'grouping': self.grouping,
        }


@dataclass(frozen=True)
class DetectorConfig:
    """
    Parameters for the extremal region filters and the grouping step.
    """
    # Stage 1 filter
    threshold_delta: int = 16
    min_area: float = 0.00015
    max_area: float = 0.13
    nm1_min_probability: float = 0.2
    non_max_suppression: bool = True
    min_probability_diff: float = 0.1

    # Stage 2 filter
    nm2_min_probability: float = 0.5

    # Grouping
    grouping_min_probability: float = 0.5

    # Channels are independent, so their filter passes may run concurrently
    parallel_channels: bool = False
    max_workers: int = 4

    def to_dict(self) -> Dict[str, Any]:
        return {
            'threshold_delta': self.threshold_delta,
            'min_area': self.min_area,
            'max_area': self.max_area,
            'nm1_min_probability': self.nm1_min_probability,
            'non_max_suppression': self.non_max_suppression,
            'min_probability_diff': self.min_probability_diff,
            'nm2_min_probability': self.nm2_min_probability,
            'grouping_min_probability': self.grouping_min_probability,
            'parallel_channels': self.parallel_channels,
            'max_workers': self.max_workers,
        }


@dataclass(frozen=True)
class RecognizerConfig:
    """Configuration for one Recognizer instance."""

    classifiers: ClassifierPaths = field(default_factory=ClassifierPaths)
    detector: DetectorConfig = field(default_factory=DetectorConfig)

    # OCR settings (one trained dictionary)
    language: str = 'eng'
    tesseract_config: str = '--psm 6'
    # pytesseract holds this path process-wide; engines swap it in per call under a lock
    tesseract_cmd: Optional[str] = None

    # Preparation of text areas
    max_channel_value: int = 255
    whole_image_coverage: float = 0.5

    # Result post-processing
    deduplicate_words: bool = False

    def with_classifiers(
        self,
        nm1: str,
        nm2: str,
        grouping: str,
    ) -> 'RecognizerConfig':
        """Return a copy using the given classifier files."""
        return replace(
            self,
            classifiers=ClassifierPaths(nm1=nm1, nm2=nm2, grouping=grouping),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'classifiers': self.classifiers.to_dict(),
            'detector': self.detector.to_dict(),
            'language': self.language,
            'tesseract_config': self.tesseract_config,
            'tesseract_cmd': self.tesseract_cmd,
            'max_channel_value': self.max_channel_value,
            'whole_image_coverage': self.whole_image_coverage,
            'deduplicate_words': self.deduplicate_words,
        }
