from __future__ import annotations

import io
from contextlib import redirect_stderr, redirect_stdout
import unittest
from unittest import mock

import numpy as np

from form_coach.exercise_analysis.keypoints import BodyPart, KeypointFrame
from form_coach.main import build_parser, main
from form_coach.pose_detection.base_detector import BasePoseDetector
from form_coach.trainer import FormCoachTrainer

STANDING = {
    BodyPart.LEFT_HIP: (110, 100),
    BodyPart.LEFT_KNEE: (110, 200),
    BodyPart.LEFT_ANKLE: (110, 250),
    BodyPart.RIGHT_HIP: (150, 100),
    BodyPart.RIGHT_KNEE: (150, 200),
    BodyPart.RIGHT_ANKLE: (150, 250),
}

SQUAT_DOWN = {
    BodyPart.LEFT_HIP: (110, 100),
    BodyPart.LEFT_KNEE: (110, 200),
    BodyPart.LEFT_ANKLE: (210, 200),
    BodyPart.RIGHT_HIP: (150, 100),
    BodyPart.RIGHT_KNEE: (150, 200),
    BodyPart.RIGHT_ANKLE: (50, 200),
}


class ScriptedDetector(BasePoseDetector):
    """Returns prepared keypoint frames in order, then None."""

    def __init__(self, frames):
        super().__init__()
        self.frames = list(frames)
        self.inputs = []
        self.closed = False

    def detect(self, frame):
        self.inputs.append(frame.shape)
        return self.frames.pop(0) if self.frames else None

    def close(self):
        self.closed = True


class FormCoachTrainerTests(unittest.TestCase):
    def _trainer(self, *points, exercise_type: str = "squat_front", inference_rate: int = 1) -> FormCoachTrainer:
        detector = ScriptedDetector(KeypointFrame.from_points(p, overall_score=0.9) for p in points)
        return FormCoachTrainer(exercise_type=exercise_type, detector=detector, voice=False,
                                inference_rate=inference_rate)

    def test_frames_flow_through_detector_and_analyzer(self) -> None:
        trainer = self._trainer(SQUAT_DOWN, STANDING)
        camera_frame = np.zeros((480, 640, 3), dtype=np.uint8)

        first = trainer.process_frame(camera_frame)
        second = trainer.process_frame(camera_frame)

        self.assertEqual(trainer.pose_detector.inputs, [(257, 257, 3), (257, 257, 3)])
        self.assertFalse(first["verdict"].rep_completed)
        self.assertTrue(second["verdict"].rep_completed)
        self.assertEqual(second["canvas"].shape, (960, 720, 3))
        self.assertIsNone(second["feedback"])
        self.assertEqual(trainer.num_frames, 2)

    def test_frame_without_person_has_no_verdict(self) -> None:
        trainer = self._trainer()
        result = trainer.process_frame(np.zeros((480, 640, 3), dtype=np.uint8))
        self.assertIsNone(result["keypoint_frame"])
        self.assertIsNone(result["verdict"])
        self.assertEqual(result["canvas"].shape, (960, 720, 3))

    def test_exercise_is_fixed_for_the_session(self) -> None:
        trainer = self._trainer(exercise_type="plank")
        self.assertEqual(trainer.exercise_analyzer.get_exercise_name(), "plank")

    def test_unknown_exercise_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            self._trainer(exercise_type="lunge")

    def test_detection_runs_on_every_nth_frame(self) -> None:
        trainer = self._trainer(SQUAT_DOWN, STANDING, inference_rate=3)
        camera_frame = np.zeros((480, 640, 3), dtype=np.uint8)

        results = [trainer.process_frame(camera_frame) for _ in range(6)]

        self.assertEqual([r is None for r in results], [True, True, False, True, True, False])
        self.assertEqual(len(trainer.pose_detector.inputs), 2)
        self.assertTrue(results[5]["verdict"].rep_completed)
        # skipped frames still count towards the FPS
        self.assertEqual(trainer.num_frames, 6)

    def test_inference_rate_must_be_positive(self) -> None:
        with self.assertRaises(ValueError):
            self._trainer(inference_rate=0)

    def test_stop_closes_detector(self) -> None:
        trainer = self._trainer()
        with mock.patch("form_coach.trainer.cv2.destroyAllWindows"):
            trainer.stop()
        self.assertTrue(trainer.pose_detector.closed)


class CommandLineTests(unittest.TestCase):
    def test_exercise_choices(self) -> None:
        args = build_parser().parse_args(["--exercise", "squat_side", "--no-voice"])
        self.assertEqual(args.exercise, "squat_side")
        self.assertTrue(args.no_voice)
        self.assertEqual(args.inference_rate, 3)
        with redirect_stderr(io.StringIO()), self.assertRaises(SystemExit):
            build_parser().parse_args(["--exercise", "lunge"])

    def test_video_mode_requires_existing_file(self) -> None:
        with redirect_stdout(io.StringIO()):
            self.assertEqual(main(["--mode", "video"]), 1)
            self.assertEqual(main(["--mode", "video", "--video", "/nonexistent/clip.mp4"]), 1)


if __name__ == "__main__":
    unittest.main()
