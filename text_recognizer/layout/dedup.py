"""
Box Deduplication

Region detectors running over several channels report the same text many
times: identical boxes, boxes nested inside bigger ones, and boxes that
partially overlap. This module collapses such a set so that no box
contains another and no two boxes share any area.

Surviving boxes are never moved or resized; boxes are only dropped.
Both passes are filters over the input order, so the output keeps the
relative order of the survivors and identical input gives identical output.
"""

from __future__ import annotations

from typing import Iterable, List

from loguru import logger

from .box import Rectangle


def remove_contained(boxes: Iterable[Rectangle]) -> List[Rectangle]:
    """
    Drop every box whose corners both lie inside another box.

    For each pair (A, B) with A before B: if A contains B, B goes; else if
    B contains A, A goes and is not compared any further. Identical boxes
    contain each other, so the first one is kept.
    """
    items = list(boxes)
    alive = [True] * len(items)

    for i, outer in enumerate(items):
        if not alive[i]:
            continue
        for j in range(i + 1, len(items)):
            if not alive[j]:
                continue
            inner = items[j]
            if outer.contains_box(inner):
                alive[j] = False
            elif inner.contains_box(outer):
                alive[i] = False
                break

    return [box for box, keep in zip(items, alive) if keep]


def resolve_overlaps(boxes: Iterable[Rectangle]) -> List[Rectangle]:
    """
    Drop the smaller box of every pair that shares a positive area.

    On equal areas the box that comes first is kept.
    """
    items = list(boxes)
    alive = [True] * len(items)

    for i, outer in enumerate(items):
        if not alive[i]:
            continue
        for j in range(i + 1, len(items)):
            if not alive[j]:
                continue
            inner = items[j]
            if outer.intersection_area(inner) == 0:
                continue
            if outer.area >= inner.area:
                alive[j] = False
            else:
                alive[i] = False
                break

    return [box for box, keep in zip(items, alive) if keep]


def remove_duplicates(boxes: Iterable[Rectangle]) -> List[Rectangle]:
    """
    Collapse a detector's box set into non-overlapping boxes.

    Args:
        boxes: Candidate rectangles in detector order

    Returns:
        Surviving rectangles, in input order
    """
    items = list(boxes)
    result = resolve_overlaps(remove_contained(items))
    logger.debug(f"Deduplicated boxes: {len(items)} -> {len(result)}")
    return result


def is_deduplicated(boxes: Iterable[Rectangle]) -> bool:
    """Check that no box contains or overlaps another."""
    items = list(boxes)
    for i, a in enumerate(items):
        for b in items[i + 1:]:
            if a.contains_box(b) or b.contains_box(a):
                return False
            if a.intersection_area(b) > 0:
                return False
    return True
