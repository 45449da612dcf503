"""
Point geometry helpers
"""

from typing import Iterable, Optional, Sequence, Tuple, TypeVar, Union

import numpy as np

T = TypeVar('T')

PointLike = Union[np.ndarray, Sequence[float]]


def point_distance(p1: PointLike, p2: PointLike) -> float:
    """Euclidean distance between two points"""
    return float(np.linalg.norm(np.asarray(p1, dtype=float) - np.asarray(p2, dtype=float)))


def nearest(point: PointLike, items: Iterable[T], max_distance: Optional[float] = None,
            key=lambda item: item.center) -> Tuple[Optional[T], float]:
    """
    Closest item to a point

    Args:
        point: Reference point in pixels
        items: Objects exposing a center (or the given key)
        max_distance: Only accept items strictly closer than this

    Returns:
        (item, distance); (None, inf) when nothing qualifies
    """
    best, best_distance = None, float('inf')
    for item in items:
        distance = point_distance(point, key(item))
        if distance < best_distance:
            best, best_distance = item, distance
    if best is not None and max_distance is not None and best_distance >= max_distance:
        return None, float('inf')
    return best, best_distance
