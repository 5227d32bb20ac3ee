from dataclasses import dataclass
import time
from typing import Any, Callable, Dict, List, Optional

from .base_analyzer import (
    BaseExerciseAnalyzer,
    ExerciseVariant,
    FeedbackGenerator,
    FrameVerdict,
    logger,
    register_exercise_analyzer,
)
from .geometry import calculate_distance
from .keypoints import BodyPart, KeypointFrame, Point2D


@dataclass
class PlankState:
    session_start_timestamp: float


@register_exercise_analyzer(ExerciseVariant.PLANK)
class PlankAnalyzer(BaseExerciseAnalyzer):
    """
    Plank hold detection.

    The plank is held when at least one arm is bent within the arm range and
    at least one shoulder-hip-ankle line is within the hip range. The hold
    time reported is wall-clock time since the session started; it is not
    paused when the plank is interrupted.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None, min_confidence: Optional[float] = None,
                 clock: Callable[[], float] = time.time):
        super().__init__(config, min_confidence)
        self._clock = clock
        self.state = PlankState(session_start_timestamp=clock())

    def get_required_landmarks(self) -> List[BodyPart]:
        return [
            BodyPart.NOSE,
            BodyPart.LEFT_SHOULDER, BodyPart.RIGHT_SHOULDER,
            BodyPart.LEFT_ELBOW, BodyPart.RIGHT_ELBOW,
            BodyPart.LEFT_WRIST, BodyPart.RIGHT_WRIST,
            BodyPart.LEFT_HIP, BodyPart.RIGHT_HIP,
            BodyPart.LEFT_ANKLE, BodyPart.RIGHT_ANKLE,
        ]

    def get_required_ranges(self) -> List[str]:
        return ["arm", "hip"]

    @property
    def elapsed_seconds(self) -> float:
        return self._clock() - self.state.session_start_timestamp

    def get_session_summary(self) -> Dict[str, Any]:
        return {"elapsed_seconds": self.elapsed_seconds}

    def is_held(self, left_arm_angle: Optional[int], right_arm_angle: Optional[int],
                left_hip_angle: Optional[int], right_hip_angle: Optional[int]) -> bool:
        arm_range = self.angle_ranges["arm"]
        hip_range = self.angle_ranges["hip"]
        return ((left_arm_angle in arm_range or right_arm_angle in arm_range)
                and (left_hip_angle in hip_range or right_hip_angle in hip_range))

    @staticmethod
    def _nose_distance(nose: Optional[Point2D], other: Optional[Point2D]) -> Optional[int]:
        if nose is None or other is None:
            return None
        return calculate_distance(nose, other, default=None)

    def _analyze_points(self, points: Dict[BodyPart, Optional[Point2D]], frame: KeypointFrame) -> FrameVerdict:
        # bend at the elbow between the shoulder and the wrist
        left_arm_angle = self._joint_angle(points, BodyPart.LEFT_ELBOW, BodyPart.LEFT_SHOULDER, BodyPart.LEFT_WRIST)
        right_arm_angle = self._joint_angle(points, BodyPart.RIGHT_ELBOW, BodyPart.RIGHT_SHOULDER, BodyPart.RIGHT_WRIST)
        # straightness of the shoulder-hip-ankle line
        left_hip_angle = self._joint_angle(points, BodyPart.LEFT_HIP, BodyPart.LEFT_SHOULDER, BodyPart.LEFT_ANKLE)
        right_hip_angle = self._joint_angle(points, BodyPart.RIGHT_HIP, BodyPart.RIGHT_SHOULDER, BodyPart.RIGHT_ANKLE)

        angles = {
            "left_arm_angle": left_arm_angle,
            "right_arm_angle": right_arm_angle,
            "left_hip_angle": left_hip_angle,
            "right_hip_angle": right_hip_angle,
            "nose_left_ankle_distance": self._nose_distance(points[BodyPart.NOSE], points[BodyPart.LEFT_ANKLE]),
            "nose_right_ankle_distance": self._nose_distance(points[BodyPart.NOSE], points[BodyPart.RIGHT_ANKLE]),
        }
        logger.debug(f"plank angles: {angles}")

        if all(a is None for a in (left_arm_angle, right_arm_angle, left_hip_angle, right_hip_angle)):
            return self._incomplete_verdict(angles, points)

        held = self.is_held(left_arm_angle, right_arm_angle, left_hip_angle, right_hip_angle)
        messages = []
        hold_seconds = None
        if held:
            hold_seconds = self.elapsed_seconds
            messages.extend([FeedbackGenerator.PLANK_HELD, FeedbackGenerator.hold_time(hold_seconds)])

        return FrameVerdict(
            name=self.get_exercise_name(),
            angles=angles,
            counters=self._counters(),
            faults={"plank_broken": not held},
            messages=messages,
            is_correct_form=held,
            hold_seconds=hold_seconds,
        )
