import logging
import time
from typing import Dict, Optional, Tuple

import cv2
import numpy as np

from .exercise_analysis.base_analyzer import ExerciseVariant, create_analyzer
from .exercise_analysis.config_utils import load_exercise_config
from .feedback.overlay import OverlayRenderer
from .feedback.voice_feedback import VoiceFeedback
from .pose_detection.base_detector import BasePoseDetector
from .pose_detection.preprocessing import prepare_model_input

logger = logging.getLogger("FormCoach")
if not logger.hasHandlers():
    handler = logging.StreamHandler()
    formatter = logging.Formatter('%(asctime)s %(levelname)s %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
logger.setLevel(logging.INFO)

WINDOW_NAME = "Form Coach"


class FormCoachTrainer:
    """Drives one exercise-tracking session: capture, detect, analyze, render, speak."""

    def __init__(self, exercise_type: str = "squat_front", detector: Optional[BasePoseDetector] = None,
                 canvas_size: Tuple[int, int] = (720, 960), voice: bool = True,
                 inference_rate: int = 3):
        """
        Initialize the trainer.

        Args:
            exercise_type: Exercise variant analyzed for the whole session
            detector: Pose detector; defaults to MediaPipe at the configured model size
            canvas_size: (width, height) of the display window
            voice: Speak form cues
            inference_rate: Run pose detection on one camera frame out of this many
        """
        config = load_exercise_config()
        model_width = config["model_input"]["width"]
        model_height = config["model_input"]["height"]
        if inference_rate < 1:
            raise ValueError(f"inference_rate must be at least 1, got {inference_rate}")

        if detector is None:
            from .pose_detection.mediapipe_detector import MediaPipePoseDetector
            detector = MediaPipePoseDetector(model_width=model_width, model_height=model_height)
        self.pose_detector = detector
        self.variant = ExerciseVariant(exercise_type)
        self.exercise_analyzer = create_analyzer(self.variant, config=config)
        self.renderer = OverlayRenderer(model_width, model_height, self.exercise_analyzer.min_confidence)
        self.voice_feedback = VoiceFeedback() if voice else None
        self.canvas_size = canvas_size
        self.inference_rate = inference_rate

        self.cap = None
        self.is_running = False
        self.session_start = None
        self.num_frames = 0
        self._frame_counter = 0

    def start(self, camera_id: int = 0) -> None:
        """
        Start the trainer with the specified camera.

        Args:
            camera_id: Camera device ID
        """
        self.cap = cv2.VideoCapture(camera_id)
        if not self.cap.isOpened():
            raise RuntimeError("Failed to open camera")
        self.run(self.cap)

    def run(self, cap) -> None:
        """Process frames from an opened capture until it ends or 'q' is pressed."""
        self.cap = cap
        self.is_running = True
        self.session_start = time.time()
        logger.info(f"Session started: {self.variant.value}")
        try:
            while self.is_running:
                try:
                    ret, frame = self.cap.read()
                    if not ret:
                        break
                    result = self.process_frame(frame)
                    if result is not None:
                        cv2.imshow(WINDOW_NAME, result["canvas"])
                    if cv2.waitKey(1) & 0xFF == ord('q'):
                        break
                except KeyboardInterrupt:
                    logger.info("KeyboardInterrupt received. Exiting gracefully...")
                    break
        finally:
            self.stop()

    def stop(self) -> None:
        """Stop the trainer and release resources."""
        self.is_running = False
        if self.cap is not None:
            self.cap.release()
            self.cap = None
        if self.voice_feedback is not None:
            self.voice_feedback.stop()
        self.pose_detector.close()
        cv2.destroyAllWindows()
        logger.info(f"Session summary: {self.exercise_analyzer.get_session_summary()}")

    def process_frame(self, frame: np.ndarray) -> Optional[Dict]:
        """
        Process a single camera frame.

        Every frame counts towards the FPS, but only one frame out of
        `inference_rate` goes through the detector and the analyzer.

        Args:
            frame: Input BGR frame

        Returns:
            Dictionary with the keypoint frame, the verdict and the rendered canvas,
            or None for frames skipped by the inference rate
        """
        if self.session_start is None:
            self.session_start = time.time()
        self.num_frames += 1
        self._frame_counter = (self._frame_counter + 1) % self.inference_rate
        if self._frame_counter != 0:
            return None

        model_image = prepare_model_input(frame, self.pose_detector.model_input_size)
        keypoint_frame = self.pose_detector.detect(model_image)

        verdict = None
        feedback = None
        if keypoint_frame is not None:
            projection = self.renderer.projection_for(*self.canvas_size)
            verdict = self.exercise_analyzer.analyze_frame(keypoint_frame, projection)
            if self.voice_feedback is not None:
                feedback = self.voice_feedback.generate_feedback(verdict)
                if feedback:
                    self.voice_feedback.speak_async(feedback)

        elapsed = time.time() - self.session_start
        fps = self.num_frames / elapsed if elapsed > 0 else None
        canvas = self.renderer.render(model_image, keypoint_frame, verdict, self.canvas_size, elapsed, fps)

        return {
            "keypoint_frame": keypoint_frame,
            "verdict": verdict,
            "feedback": feedback,
            "canvas": canvas,
        }
