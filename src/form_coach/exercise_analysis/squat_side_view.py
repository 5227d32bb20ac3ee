from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .base_analyzer import (
    BaseExerciseAnalyzer,
    ExerciseVariant,
    FeedbackGenerator,
    FrameVerdict,
    logger,
    register_exercise_analyzer,
)
from .geometry import calculate_slope_angle
from .keypoints import BodyPart, KeypointFrame, Point2D


@dataclass
class SquatSideState:
    rep_count: int = 0
    squat_down_flag: bool = False
    no_forward_lean_flag: bool = True
    knees_not_over_toes_flag: bool = True
    forward_lean_count: int = 0
    knees_over_toes_count: int = 0


@register_exercise_analyzer(ExerciseVariant.SQUAT_SIDE)
class SideSquatAnalyzer(BaseExerciseAnalyzer):
    """
    Squat seen from the side: counts reps, forward lean and knees over toes.

    From the side only one leg is reliably visible, so every metric takes the
    smaller of the left and right values. A side whose parts are below the
    confidence gate does not take part in the minimum.

    Fault counters grow on every frame the fault is visible, not once per rep.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None, min_confidence: Optional[float] = None):
        super().__init__(config, min_confidence)
        self.state = SquatSideState()

    def get_required_landmarks(self) -> List[BodyPart]:
        return [
            BodyPart.LEFT_SHOULDER, BodyPart.RIGHT_SHOULDER,
            BodyPart.LEFT_HIP, BodyPart.RIGHT_HIP,
            BodyPart.LEFT_KNEE, BodyPart.RIGHT_KNEE,
            BodyPart.LEFT_ANKLE, BodyPart.RIGHT_ANKLE,
        ]

    def get_required_ranges(self) -> List[str]:
        return ["squat_knee", "stand_knee", "knee_ankle", "torso"]

    def get_session_summary(self) -> Dict[str, Any]:
        return {
            "rep_count": self.state.rep_count,
            "forward_lean_count": self.state.forward_lean_count,
            "knees_over_toes_count": self.state.knees_over_toes_count,
        }

    @staticmethod
    def _shin_angle(knee: Optional[Point2D], ankle: Optional[Point2D]) -> Optional[int]:
        if knee is None or ankle is None:
            return None
        return calculate_slope_angle(knee, ankle, default=None)

    def _analyze_points(self, points: Dict[BodyPart, Optional[Point2D]], frame: KeypointFrame) -> FrameVerdict:
        state = self.state
        squat_range = self.angle_ranges["squat_knee"]
        stand_range = self.angle_ranges["stand_knee"]
        ankle_range = self.angle_ranges["knee_ankle"]
        torso_range = self.angle_ranges["torso"]

        # thigh vs calf, for depth
        left_knee_angle = self._joint_angle(points, BodyPart.LEFT_KNEE, BodyPart.LEFT_HIP, BodyPart.LEFT_ANKLE)
        right_knee_angle = self._joint_angle(points, BodyPart.RIGHT_KNEE, BodyPart.RIGHT_HIP, BodyPart.RIGHT_ANKLE)
        # torso vs thigh, for forward lean
        left_torso_angle = self._joint_angle(points, BodyPart.LEFT_HIP, BodyPart.LEFT_SHOULDER, BodyPart.LEFT_KNEE)
        right_torso_angle = self._joint_angle(points, BodyPart.RIGHT_HIP, BodyPart.RIGHT_SHOULDER, BodyPart.RIGHT_KNEE)
        # shin vs horizontal, for knees over toes
        left_ankle_angle = self._shin_angle(points[BodyPart.LEFT_KNEE], points[BodyPart.LEFT_ANKLE])
        right_ankle_angle = self._shin_angle(points[BodyPart.RIGHT_KNEE], points[BodyPart.RIGHT_ANKLE])

        knee_angle = self._min_available(left_knee_angle, right_knee_angle)
        torso_angle = self._min_available(left_torso_angle, right_torso_angle)
        ankle_angle = self._min_available(left_ankle_angle, right_ankle_angle)

        angles = {
            "left_knee_angle": left_knee_angle,
            "right_knee_angle": right_knee_angle,
            "left_torso_angle": left_torso_angle,
            "right_torso_angle": right_torso_angle,
            "left_ankle_angle": left_ankle_angle,
            "right_ankle_angle": right_ankle_angle,
            "knee_angle": knee_angle,
            "torso_angle": torso_angle,
            "ankle_angle": ankle_angle,
        }
        logger.debug(f"squat_side angles: {angles}")

        if knee_angle is None and torso_angle is None and ankle_angle is None:
            return self._incomplete_verdict(angles, points)

        messages = []
        is_correct_form = None
        if ankle_angle in ankle_range and torso_angle in torso_range:
            if knee_angle in squat_range:
                messages.append(FeedbackGenerator.GOOD_FORM)
                is_correct_form = True
                state.squat_down_flag = True
                state.knees_not_over_toes_flag = True
                state.no_forward_lean_flag = True

        knees_over_toes = ankle_angle is not None and ankle_angle not in ankle_range
        if knees_over_toes:
            messages.append(FeedbackGenerator.KNEES_OVER_TOES)
            state.knees_over_toes_count += 1
            state.knees_not_over_toes_flag = False
            state.squat_down_flag = False

        forward_lean = torso_angle is not None and torso_angle not in torso_range
        if forward_lean:
            messages.append(FeedbackGenerator.FORWARD_LEAN)
            state.forward_lean_count += 1
            state.no_forward_lean_flag = False
            state.squat_down_flag = False

        if knees_over_toes or forward_lean:
            is_correct_form = False

        rep_completed = False
        visible_knees = [a for a in (left_knee_angle, right_knee_angle) if a is not None]
        standing = bool(visible_knees) and all(a in stand_range for a in visible_knees)
        if state.squat_down_flag and state.no_forward_lean_flag and state.knees_not_over_toes_flag and standing:
            state.squat_down_flag = False
            state.no_forward_lean_flag = False
            state.knees_not_over_toes_flag = False
            state.rep_count += 1
            rep_completed = True
            logger.info(f"squat_side rep completed: {state.rep_count}")

        return FrameVerdict(
            name=self.get_exercise_name(),
            angles=angles,
            counters=self._counters(),
            faults={"knees_over_toes": knees_over_toes, "forward_lean": forward_lean},
            messages=messages,
            is_correct_form=is_correct_form,
            rep_completed=rep_completed,
        )
