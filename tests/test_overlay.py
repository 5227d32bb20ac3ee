from __future__ import annotations

import unittest

import numpy as np

from form_coach.exercise_analysis import create_analyzer
from form_coach.exercise_analysis.keypoints import BodyPart, KeypointFrame
from form_coach.feedback.overlay import KEYPOINT_COLOR, OverlayRenderer

CANVAS_SIZE = (720, 960)


class OverlayRendererTests(unittest.TestCase):
    def setUp(self) -> None:
        self.renderer = OverlayRenderer()

    def test_model_image_fills_centered_square(self) -> None:
        model_image = np.full((257, 257, 3), 50, dtype=np.uint8)
        canvas, projection = self.renderer.compose_canvas(model_image, CANVAS_SIZE)

        self.assertEqual(canvas.shape, (960, 720, 3))
        self.assertEqual(projection.top, 120)
        self.assertTrue(np.all(canvas[:120] == 0))
        self.assertTrue(np.all(canvas[120:840] == 50))
        self.assertTrue(np.all(canvas[840:] == 0))

    def test_only_reliable_keypoints_are_drawn(self) -> None:
        frame = KeypointFrame.from_points({
            BodyPart.NOSE: (128, 128),
            BodyPart.LEFT_EYE: (50, 50, 0.3),
        })
        projection = self.renderer.projection_for(*CANVAS_SIZE)
        canvas = np.zeros((960, 720, 3), dtype=np.uint8)
        self.renderer.draw_keypoints(canvas, frame, projection)

        nose_x, nose_y = projection.project(128, 128).as_int_tuple()
        eye_x, eye_y = projection.project(50, 50).as_int_tuple()
        self.assertEqual(tuple(canvas[nose_y, nose_x]), KEYPOINT_COLOR)
        self.assertEqual(tuple(canvas[eye_y, eye_x]), (0, 0, 0))

    def test_non_finite_keypoint_is_skipped(self) -> None:
        frame = KeypointFrame.from_points({
            BodyPart.LEFT_HIP: (float("nan"), 100),
            BodyPart.LEFT_KNEE: (100, 150),
        })
        projection = self.renderer.projection_for(*CANVAS_SIZE)
        canvas = np.zeros((960, 720, 3), dtype=np.uint8)
        self.renderer.draw_keypoints(canvas, frame, projection)

        knee_x, knee_y = projection.project(100, 150).as_int_tuple()
        self.assertEqual(tuple(canvas[knee_y, knee_x]), KEYPOINT_COLOR)

    def test_render_draws_verdict_and_footer(self) -> None:
        model_image = np.zeros((257, 257, 3), dtype=np.uint8)
        frame = KeypointFrame.from_points({BodyPart.LEFT_HIP: (100, 100)}, overall_score=0.9)
        verdict = create_analyzer("squat_front").analyze_frame(frame, self.renderer.projection_for(*CANVAS_SIZE))

        canvas = self.renderer.render(model_image, frame, verdict, CANVAS_SIZE, session_seconds=3.0, fps=30.0)

        self.assertEqual(canvas.shape, (960, 720, 3))
        # footer text sits below the drawing area
        self.assertTrue(np.any(canvas[840:] != 0))
        # metrics column at the top left of the drawing area
        self.assertTrue(np.any(canvas[120:200, :300] != 0))

    def test_render_without_detection_shows_only_the_image(self) -> None:
        model_image = np.zeros((257, 257, 3), dtype=np.uint8)
        canvas = self.renderer.render(model_image, None, None, CANVAS_SIZE)
        self.assertFalse(np.any(canvas))


if __name__ == "__main__":
    unittest.main()
