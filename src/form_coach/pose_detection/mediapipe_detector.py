import logging
from typing import Optional, Sequence

import mediapipe as mp
import numpy as np

from ..exercise_analysis.keypoints import BodyPart, Keypoint, KeypointFrame
from .base_detector import BasePoseDetector
from .preprocessing import to_rgb

logger = logging.getLogger("PoseDetector")

# MediaPipe landmark index for each of the 17 body parts.
MEDIAPIPE_LANDMARK_INDEX = {
    BodyPart.NOSE: 0,
    BodyPart.LEFT_EYE: 2,
    BodyPart.RIGHT_EYE: 5,
    BodyPart.LEFT_EAR: 7,
    BodyPart.RIGHT_EAR: 8,
    BodyPart.LEFT_SHOULDER: 11,
    BodyPart.RIGHT_SHOULDER: 12,
    BodyPart.LEFT_ELBOW: 13,
    BodyPart.RIGHT_ELBOW: 14,
    BodyPart.LEFT_WRIST: 15,
    BodyPart.RIGHT_WRIST: 16,
    BodyPart.LEFT_HIP: 23,
    BodyPart.RIGHT_HIP: 24,
    BodyPart.LEFT_KNEE: 25,
    BodyPart.RIGHT_KNEE: 26,
    BodyPart.LEFT_ANKLE: 27,
    BodyPart.RIGHT_ANKLE: 28,
}


def landmarks_to_keypoint_frame(landmarks: Sequence, model_width: int, model_height: int) -> KeypointFrame:
    """
    Convert MediaPipe's normalized landmarks to a KeypointFrame in model pixels.

    Args:
        landmarks: MediaPipe landmark list (objects with x, y and visibility)
        model_width: Model input width the coordinates are scaled to
        model_height: Model input height the coordinates are scaled to

    Returns:
        KeypointFrame whose overall score is the mean keypoint confidence
    """
    keypoints = []
    for part in BodyPart:
        landmark = landmarks[MEDIAPIPE_LANDMARK_INDEX[part]]
        keypoints.append(Keypoint(
            part=part,
            x=landmark.x * model_width,
            y=landmark.y * model_height,
            confidence=float(np.clip(np.nan_to_num(landmark.visibility), 0.0, 1.0)),
        ))
    overall_score = float(np.mean([k.confidence for k in keypoints]))
    return KeypointFrame(tuple(keypoints), overall_score)


class MediaPipePoseDetector(BasePoseDetector):
    """MediaPipe implementation of pose detection."""

    def __init__(self, model_width: int = 257, model_height: int = 257,
                 min_detection_confidence: float = 0.5, min_tracking_confidence: float = 0.5,
                 model_complexity: int = 1):
        """
        Initialize the MediaPipe pose detector.

        Args:
            model_width: Width of the model input frames
            model_height: Height of the model input frames
            min_detection_confidence: Minimum confidence for pose detection
            min_tracking_confidence: Minimum confidence for pose tracking
            model_complexity: Complexity of the pose landmark model (0, 1, or 2)
        """
        super().__init__(model_width, model_height)
        self.mp_pose = mp.solutions.pose
        self.pose = self.mp_pose.Pose(
            static_image_mode=False,
            model_complexity=model_complexity,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence
        )

    def detect(self, frame: np.ndarray) -> Optional[KeypointFrame]:
        results = self.pose.process(to_rgb(frame))
        if not results.pose_landmarks:
            logger.debug("No pose detected")
            return None
        return landmarks_to_keypoint_frame(results.pose_landmarks.landmark, self.model_width, self.model_height)

    def close(self) -> None:
        """Release the MediaPipe graph."""
        self.pose.close()
