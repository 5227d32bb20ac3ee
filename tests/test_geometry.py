from __future__ import annotations

import math
import unittest

from form_coach.exercise_analysis.geometry import (
    INCLUDED_ANGLE_FALLBACK,
    SLOPE_ANGLE_FALLBACK,
    calculate_distance,
    calculate_included_angle,
    calculate_slope_angle,
)
from form_coach.exercise_analysis.keypoints import Point2D


class IncludedAngleTests(unittest.TestCase):
    def test_right_angle_is_ninety_degrees(self) -> None:
        self.assertAlmostEqual(calculate_included_angle((0, 0), (10, 0), (0, 10)), 90, delta=1)
        self.assertAlmostEqual(calculate_included_angle((5, 5), (5, -20), (40, 5)), 90, delta=1)

    def test_accepts_point2d(self) -> None:
        angle = calculate_included_angle(Point2D(0, 0), Point2D(10, 0), Point2D(0, 10))
        self.assertAlmostEqual(angle, 90, delta=1)

    def test_collinear_vertex_between_points_is_straight(self) -> None:
        self.assertEqual(calculate_included_angle((5, 0), (0, 0), (10, 0)), 180)

    def test_collinear_vertex_at_end_is_zero(self) -> None:
        self.assertEqual(calculate_included_angle((0, 0), (5, 0), (10, 0)), 0)

    def test_coincident_points_use_fallback(self) -> None:
        self.assertEqual(calculate_included_angle((3, 3), (3, 3), (10, 0)), INCLUDED_ANGLE_FALLBACK)
        self.assertIsNone(calculate_included_angle((3, 3), (3, 3), (10, 0), default=None))

    def test_result_is_truncated_int(self) -> None:
        # 60 degrees, equilateral triangle
        angle = calculate_included_angle((0, 0), (10, 0), (5, 10 * math.sqrt(3) / 2))
        self.assertIsInstance(angle, int)
        self.assertIn(angle, (59, 60))

    def test_repeated_calls_are_identical(self) -> None:
        args = ((12.5, 40.0), (3.0, 7.0), (80.0, 41.0))
        self.assertEqual(calculate_included_angle(*args), calculate_included_angle(*args))


class SlopeAngleTests(unittest.TestCase):
    def test_vertical_segment_is_ninety(self) -> None:
        self.assertEqual(calculate_slope_angle((0, 0), (0, 10)), 90)

    def test_diagonal_is_forty_five(self) -> None:
        self.assertAlmostEqual(calculate_slope_angle((0, 0), (10, 10)), 45, delta=1)

    def test_result_is_absolute_value(self) -> None:
        rising = calculate_slope_angle((0, 10), (10, 0))
        falling = calculate_slope_angle((0, 0), (10, 10))
        self.assertGreaterEqual(rising, 0)
        self.assertEqual(rising, falling)
        self.assertEqual(calculate_slope_angle((10, 10), (0, 0)), calculate_slope_angle((0, 0), (10, 10)))

    def test_horizontal_segment_is_zero(self) -> None:
        self.assertEqual(calculate_slope_angle((0, 5), (20, 5)), 0)

    def test_coincident_points_use_fallback(self) -> None:
        self.assertEqual(calculate_slope_angle((4, 4), (4, 4)), SLOPE_ANGLE_FALLBACK)
        self.assertIsNone(calculate_slope_angle((4, 4), (4, 4), default=None))


class DistanceTests(unittest.TestCase):
    def test_euclidean_distance(self) -> None:
        self.assertEqual(calculate_distance((0, 0), (3, 4)), 5)

    def test_distance_is_truncated(self) -> None:
        self.assertEqual(calculate_distance((0, 0), (1, 1)), 1)

    def test_non_finite_input_uses_default(self) -> None:
        self.assertEqual(calculate_distance((float("nan"), 0), (3, 4)), 0)
        self.assertIsNone(calculate_distance((float("inf"), 0), (3, 4), default=None))


if __name__ == "__main__":
    unittest.main()
