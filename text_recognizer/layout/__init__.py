"""
Layout Package

Geometric primitives for detected text regions and the deduplication
that turns a noisy detector box set into non-overlapping regions.
"""

from .box import (
    Rectangle,
    total_area,
)
from .dedup import (
    remove_contained,
    resolve_overlaps,
    remove_duplicates,
    is_deduplicated,
)

__all__ = [
    # Primitives
    'Rectangle',
    'total_area',

    # Deduplication
    'remove_contained',
    'resolve_overlaps',
    'remove_duplicates',
    'is_deduplicated',
]
