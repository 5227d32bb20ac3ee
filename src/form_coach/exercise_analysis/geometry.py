"""
geometry.py - Distance and angle helpers used by the exercise analyzers.

All functions take 2-D points (anything with `x`/`y` attributes or an
indexable (x, y) pair), truncate their result to an int and never raise on
degenerate input. Instead they return the `default` passed by the caller:
pass `default=None` to tell "could not compute" apart from a computed value.
"""
from typing import Optional, Sequence, Union

import numpy as np

from .keypoints import Point2D

# Fallbacks returned for degenerate input unless the caller passes its own default.
DISTANCE_FALLBACK = 0
INCLUDED_ANGLE_FALLBACK = 0
SLOPE_ANGLE_FALLBACK = 90

PointInput = Union[Point2D, Sequence[float]]


def _as_array(point: PointInput) -> np.ndarray:
    if isinstance(point, Point2D):
        return np.array([point.x, point.y], dtype=float)
    return np.array([point[0], point[1]], dtype=float)


def calculate_distance(p1: PointInput, p2: PointInput,
                       default: Optional[int] = DISTANCE_FALLBACK) -> Optional[int]:
    """Euclidean distance between two points, truncated to an int."""
    a, b = _as_array(p1), _as_array(p2)
    if not (np.all(np.isfinite(a)) and np.all(np.isfinite(b))):
        return default
    return int(np.linalg.norm(a - b))


def calculate_included_angle(vertex: PointInput, p1: PointInput, p2: PointInput,
                             default: Optional[int] = INCLUDED_ANGLE_FALLBACK) -> Optional[int]:
    """
    Angle at `vertex` between the rays to `p1` and `p2`, using the law of cosines.

    Args:
        vertex: Point the angle is measured at (e.g. knee for a knee angle)
        p1: First point of interest (e.g. hip)
        p2: Second point of interest (e.g. ankle)
        default: Returned when either ray has zero length

    Returns:
        Angle in whole degrees in [0, 180], or `default` if undefined.
        Collinear points give 0 when `vertex` is at one end and 180 when it
        lies between `p1` and `p2`.
    """
    v, a, b = _as_array(vertex), _as_array(p1), _as_array(p2)
    a2 = float(np.sum((b - a) ** 2))
    b2 = float(np.sum((b - v) ** 2))
    c2 = float(np.sum((a - v) ** 2))
    denominator = np.sqrt(4 * b2 * c2)
    if not np.isfinite(denominator) or denominator == 0:
        return default
    # rounding can push collinear cases just outside [-1, 1]
    cosine = np.clip((b2 + c2 - a2) / denominator, -1.0, 1.0)
    return int(np.degrees(np.arccos(cosine)))


def calculate_slope_angle(top: PointInput, bottom: PointInput,
                          default: Optional[int] = SLOPE_ANGLE_FALLBACK) -> Optional[int]:
    """
    Absolute angle between the segment top->bottom and the horizontal axis.

    A perfectly vertical segment is 90. Coincident points have no direction
    and give `default`.
    """
    t, b = _as_array(top), _as_array(bottom)
    dx = b[0] - t[0]
    dy = b[1] - t[1]
    if not (np.isfinite(dx) and np.isfinite(dy)):
        return default
    if dx == 0:
        return default if dy == 0 else 90
    return abs(int(np.degrees(np.arctan(dy / dx))))
