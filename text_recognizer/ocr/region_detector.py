"""
Region Detector

Finds rectangles likely to contain text using the Neumann & Matas
extremal region (ER) cascade from OpenCV's text module (opencv-contrib).

Detection Strategy:
1. Split the image into the NM channels (R, G, B, lightness, gradient)
2. Add the inverse of every channel except the gradient one, so both
   dark-on-light and light-on-dark text produce extremal regions
3. Run the two-stage ER filter cascade on each channel
4. Group the surviving regions of each channel into text-line boxes
5. Merge the boxes of all channels, in channel order

The output is raw: boxes from different channels overlap heavily and are
meant to be fed to layout.dedup before use.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, List, Optional, Tuple

import cv2
import numpy as np
from loguru import logger

from ..config import ClassifierPaths, DetectorConfig
from ..errors import InitializationError, ProcessingError
from ..layout.box import Rectangle


def _text_module() -> Any:
    """Return cv2.text, which only ships with opencv-contrib-python."""
    text = getattr(cv2, 'text', None)
    if text is None:
        raise InitializationError(
            "OpenCV text module not available. "
            "Install with: pip install opencv-contrib-python"
        )
    return text


def to_bgr(image: np.ndarray) -> np.ndarray:
    """Bring a gray, BGR or BGRA image to 3-channel BGR."""
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    channels = image.shape[2]
    if channels == 1:
        return cv2.cvtColor(image[:, :, 0], cv2.COLOR_GRAY2BGR)
    if channels == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2BGR)
    return image


class RegionDetector:
    """
    Detects text regions with the ER filter cascade and ER grouping.

    Usage:
        detector = RegionDetector(ClassifierPaths().resolve('models/'))
        boxes = detector.detect(image)   # List[Rectangle], may overlap
    """

    def __init__(
        self,
        classifiers: Optional[ClassifierPaths] = None,
        config: Optional[DetectorConfig] = None,
        max_channel_value: int = 255,
    ):
        """
        Initialize region detector.

        Args:
            classifiers: Trained classifier files (stage 1, stage 2, grouping)
            config: ER filter and grouping parameters
            max_channel_value: Value channels are inverted against
        """
        self.classifiers = classifiers or ClassifierPaths()
        self.config = config or DetectorConfig()
        self.max_channel_value = max_channel_value

    def compute_channels(self, image: np.ndarray) -> List[np.ndarray]:
        """NM channels of the image plus their inverses (gradient excluded)."""
        text = _text_module()
        try:
            channels = list(text.computeNMChannels(to_bgr(image)))
        except cv2.error as e:
            raise ProcessingError(str(e), original_error=e) from e

        for channel in channels[:-1]:
            channels.append(self.max_channel_value - channel)
        return channels

    def _check_classifier_files(self) -> None:
        for path in (self.classifiers.nm1, self.classifiers.nm2, self.classifiers.grouping):
            if not Path(path).is_file():
                raise InitializationError(f"classifier file not found: {path}")

    def _create_filters(self) -> Tuple[Any, Any]:
        """Build the stage 1 and stage 2 ER filters."""
        text = _text_module()
        cfg = self.config
        try:
            er_filter1 = text.createERFilterNM1(
                text.loadClassifierNM1(self.classifiers.nm1),
                cfg.threshold_delta,
                cfg.min_area,
                cfg.max_area,
                cfg.nm1_min_probability,
                cfg.non_max_suppression,
                cfg.min_probability_diff,
            )
            er_filter2 = text.createERFilterNM2(
                text.loadClassifierNM2(self.classifiers.nm2),
                cfg.nm2_min_probability,
            )
        except cv2.error as e:
            raise InitializationError(
                f"could not create external region filters: {e}",
                original_error=e,
            ) from e

        if er_filter1 is None or er_filter2 is None:
            raise InitializationError("could not create external region filters")
        return er_filter1, er_filter2

    def _detect_channel(
        self,
        image: np.ndarray,
        channel: np.ndarray,
        filters: Optional[Tuple[Any, Any]] = None,
    ) -> List[Rectangle]:
        """Run the cascade and grouping on one channel."""
        text = _text_module()
        # ER filters keep state between runs; a worker thread gets its own
        er_filter1, er_filter2 = filters or self._create_filters()

        try:
            regions = text.detectRegions(channel, er_filter1, er_filter2)
            if regions is None or len(regions) == 0:
                return []

            rects = text.erGrouping(
                image,
                channel,
                [np.asarray(r).tolist() for r in regions],
                text.ERGROUPING_ORIENTATION_ANY,
                self.classifiers.grouping,
                self.config.grouping_min_probability,
            )
        except cv2.error as e:
            raise ProcessingError(str(e), original_error=e) from e

        if rects is None:
            return []
        return [Rectangle.from_xywh(r) for r in rects]

    def detect(self, image: np.ndarray) -> List[Rectangle]:
        """
        Find candidate text rectangles.

        Args:
            image: BGR, BGRA or grayscale uint8 image

        Returns:
            Rectangles from all channels, in channel order (may overlap)

        Raises:
            InitializationError: classifiers or filters can't be set up
            ProcessingError: the OpenCV text engine failed
        """
        self._check_classifier_files()

        bgr = to_bgr(image)
        channels = self.compute_channels(bgr)
        logger.debug(f"Running ER cascade on {len(channels)} channels")

        if self.config.parallel_channels and len(channels) > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
                per_channel = list(pool.map(
                    lambda channel: self._detect_channel(bgr, channel),
                    channels,
                ))
        else:
            filters = self._create_filters()
            per_channel = [
                self._detect_channel(bgr, channel, filters)
                for channel in channels
            ]

        boxes = [box for channel_boxes in per_channel for box in channel_boxes]
        logger.debug(f"Detected {len(boxes)} raw text boxes")
        return boxes
