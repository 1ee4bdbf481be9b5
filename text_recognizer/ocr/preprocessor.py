"""
Text Area Preparation

Decides how an image is split up for OCR and builds the images (text
areas) handed to the OCR engine.

Two regimes are distinguished by how much of the image the detected boxes
cover:
- A handful of real text blocks: each box is cropped and binarized on its
  own, so every region gets a threshold fitted to its own histogram
- Dense text over-segmented into many boxes that together cover most of
  the frame: per-box crops are slow and inaccurate, so the whole frame is
  converted to grayscale and read in one go
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

import cv2
import numpy as np
from loguru import logger

from ..layout.box import Rectangle, total_area


class AreaStrategy(Enum):
    """How the image is decomposed into text areas."""
    WHOLE_IMAGE = "whole_image"     # One grayscale area for the full frame
    PER_BOX = "per_box"             # One binarized area per box
    NONE = "none"                   # Nothing detected, nothing to read


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """Convert a BGR/BGRA image to grayscale. Gray input is copied."""
    if image.ndim == 2:
        return image.copy()
    channels = image.shape[2]
    if channels == 1:
        return image[:, :, 0].copy()
    if channels == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)


def binarize_otsu(gray: np.ndarray, max_value: int = 255) -> np.ndarray:
    """Binarize with a global threshold picked by Otsu's method."""
    _, binary = cv2.threshold(
        gray,
        0,
        max_value,
        cv2.THRESH_BINARY + cv2.THRESH_OTSU
    )
    return binary


@dataclass
class TextAreaPreparer:
    """
    Chooses the area strategy and materializes text areas.

    Attributes:
        coverage_threshold: Fraction of the image area that the summed box
            areas must reach (inclusive) to read the image as a whole
        max_value: Value given to foreground pixels when binarizing
    """
    coverage_threshold: float = 0.5
    max_value: int = 255

    def choose_strategy(
        self,
        image_shape: Sequence[int],
        boxes: Sequence[Rectangle],
    ) -> AreaStrategy:
        if not boxes:
            return AreaStrategy.NONE

        height, width = image_shape[:2]
        if total_area(boxes) >= self.coverage_threshold * (width * height):
            return AreaStrategy.WHOLE_IMAGE
        return AreaStrategy.PER_BOX

    def crop_area(self, image: np.ndarray, box: Rectangle) -> Optional[np.ndarray]:
        """Grayscale, Otsu-binarized crop of one box; None if off-image."""
        height, width = image.shape[:2]
        clipped = box.clip(width, height)
        if clipped is None:
            return None
        rows, cols = clipped.to_slices()
        gray = to_grayscale(image[rows, cols])
        return binarize_otsu(gray, self.max_value)

    def create_text_areas(
        self,
        image: np.ndarray,
        boxes: Sequence[Rectangle],
    ) -> List[np.ndarray]:
        """
        Build the images to OCR, in box order.

        Args:
            image: Source image (BGR, BGRA or grayscale)
            boxes: Deduplicated rectangles

        Returns:
            Text areas; a single grayscale frame, or one binarized crop per box
        """
        strategy = self.choose_strategy(image.shape, boxes)
        logger.info(f"Area strategy: {strategy.value} ({len(boxes)} boxes)")

        if strategy is AreaStrategy.NONE:
            return []

        if strategy is AreaStrategy.WHOLE_IMAGE:
            return [to_grayscale(image)]

        areas = []
        for box in boxes:
            area = self.crop_area(image, box)
            if area is None:
                logger.debug(f"Skipping box outside image: {box.to_tuple()}")
                continue
            areas.append(area)
        return areas
