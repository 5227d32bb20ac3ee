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
from .keypoints import BodyPart, KeypointFrame, Point2D


@dataclass
class SquatFrontState:
    rep_count: int = 0
    squat_down_flag: bool = False
    knees_not_caving_flag: bool = True
    knees_caving_count: int = 0


@register_exercise_analyzer(ExerciseVariant.SQUAT_FRONT)
class FrontSquatAnalyzer(BaseExerciseAnalyzer):
    """
    Squat seen from the front: counts reps and knees caving in.

    A rep is credited when the athlete reaches depth with both knees tracking
    outside the hips and then stands up. Caving during the descent cancels
    the rep and is counted once the athlete stands.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None, min_confidence: Optional[float] = None):
        super().__init__(config, min_confidence)
        self.state = SquatFrontState()
        self.offset_tolerance = int(self.variant_config.get("knee_hip_offset_tolerance", -5))

    def get_required_landmarks(self) -> List[BodyPart]:
        return [
            BodyPart.LEFT_HIP, BodyPart.RIGHT_HIP,
            BodyPart.LEFT_KNEE, BodyPart.RIGHT_KNEE,
            BodyPart.LEFT_ANKLE, BodyPart.RIGHT_ANKLE,
        ]

    def get_required_ranges(self) -> List[str]:
        return ["squat_knee", "stand_knee"]

    def get_session_summary(self) -> Dict[str, Any]:
        return {
            "rep_count": self.state.rep_count,
            "knees_caving_count": self.state.knees_caving_count,
        }

    @staticmethod
    def _offset(outer: Optional[Point2D], inner: Optional[Point2D]) -> Optional[int]:
        # positive while the knee stays outside the hip line
        if outer is None or inner is None:
            return None
        return int(outer.x - inner.x)

    def _analyze_points(self, points: Dict[BodyPart, Optional[Point2D]], frame: KeypointFrame) -> FrameVerdict:
        state = self.state
        squat_range = self.angle_ranges["squat_knee"]
        stand_range = self.angle_ranges["stand_knee"]

        left_knee_angle = self._joint_angle(points, BodyPart.LEFT_KNEE, BodyPart.LEFT_HIP, BodyPart.LEFT_ANKLE)
        right_knee_angle = self._joint_angle(points, BodyPart.RIGHT_KNEE, BodyPart.RIGHT_HIP, BodyPart.RIGHT_ANKLE)
        left_offset = self._offset(points[BodyPart.LEFT_KNEE], points[BodyPart.LEFT_HIP])
        right_offset = self._offset(points[BodyPart.RIGHT_HIP], points[BodyPart.RIGHT_KNEE])

        angles = {
            "left_knee_angle": left_knee_angle,
            "right_knee_angle": right_knee_angle,
            "left_knee_hip_offset": left_offset,
            "right_knee_hip_offset": right_offset,
        }
        logger.debug(f"squat_front angles: {angles}")

        if None in angles.values():
            # both legs are needed from the front; leave the state untouched
            return self._incomplete_verdict(angles, points)

        messages = []
        caving = False
        is_correct_form = None
        if left_offset >= self.offset_tolerance and right_offset >= self.offset_tolerance:
            if left_knee_angle in squat_range and right_knee_angle in squat_range:
                messages.append(FeedbackGenerator.GOOD_FORM)
                is_correct_form = True
                state.squat_down_flag = True
                state.knees_not_caving_flag = True
        else:
            caving = True
            is_correct_form = False
            messages.append(FeedbackGenerator.KNEES_CAVING)
            state.knees_not_caving_flag = False
            state.squat_down_flag = False

        rep_completed = False
        if left_knee_angle in stand_range and right_knee_angle in stand_range:
            if state.squat_down_flag:
                state.squat_down_flag = False
                state.rep_count += 1
                rep_completed = True
                logger.info(f"squat_front rep completed: {state.rep_count}")
            if not state.knees_not_caving_flag:
                state.knees_caving_count += 1
                state.knees_not_caving_flag = True
                logger.info(f"squat_front knees caved in: {state.knees_caving_count}")

        return FrameVerdict(
            name=self.get_exercise_name(),
            angles=angles,
            counters=self._counters(),
            faults={"knees_caving": caving},
            messages=messages,
            is_correct_form=is_correct_form,
            rep_completed=rep_completed,
        )
