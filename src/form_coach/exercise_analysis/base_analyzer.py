from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from enum import Enum
import logging
from typing import Any, Dict, List, Optional

from .config_utils import AngleRange, get_min_confidence, get_variant_config, load_exercise_config, parse_angle_ranges
from .geometry import calculate_included_angle
from .keypoints import BodyPart, KeypointFrame, Point2D, ProjectionParams

_EXERCISE_CONFIG = load_exercise_config()

# --- Logger Setup ---
logger = logging.getLogger("ExerciseAnalyzer")
if not logger.hasHandlers():
    handler = logging.StreamHandler()
    formatter = logging.Formatter('%(asctime)s %(levelname)s %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
logger.setLevel(logging.INFO)


class ExerciseVariant(Enum):
    """Exercise tracked by a session. Selected once, when the analyzer is created."""
    SQUAT_FRONT = "squat_front"
    SQUAT_SIDE = "squat_side"
    PLANK = "plank"


# --- Feedback Templates ---
class FeedbackGenerator:
    GOOD_FORM = "Good!"
    KNEES_CAVING = "KNEES CAVING IN!"
    KNEES_OVER_TOES = "KNEES OVER TOES!"
    FORWARD_LEAN = "EXCESSIVE FORWARD LEAN!"
    PLANK_HELD = "Plank"
    UNMEASURABLE = "Could not measure joint angles in this frame."

    @staticmethod
    def missing_landmark(part: BodyPart) -> str:
        return f"Missing landmark: {part.label}"

    @staticmethod
    def low_confidence(score: float) -> str:
        return f"Low confidence in pose detection ({score:.2f})."

    @staticmethod
    def hold_time(seconds: float) -> str:
        return f"Time elapsed: {seconds:.2f} s"


@dataclass
class FrameVerdict:
    """
    Per-frame output handed to the overlay renderer and voice feedback.

    `angles` holds every computed angle and offset (None when the parts it
    needs were not reliable), `counters` the session counters after this
    frame, and `faults` the form errors detected in this frame only.
    """
    name: str
    angles: Dict[str, Optional[int]]
    counters: Dict[str, int]
    faults: Dict[str, bool] = field(default_factory=dict)
    messages: List[str] = field(default_factory=list)
    is_correct_form: Optional[bool] = None
    confidence: float = 0.0  # overall pose score of the frame
    analysis_reliable: bool = True
    missing_parts: List[str] = field(default_factory=list)
    error_message: Optional[str] = None
    hold_seconds: Optional[float] = None
    rep_completed: bool = False

    @property
    def rep_count(self) -> int:
        return self.counters.get("rep_count", 0)

    @property
    def fault_detected(self) -> bool:
        return any(self.faults.values())


# --- Analyzer Registry ---
EXERCISE_ANALYZER_REGISTRY = {}


def register_exercise_analyzer(variant: ExerciseVariant):
    def decorator(cls):
        EXERCISE_ANALYZER_REGISTRY[variant] = cls
        cls.variant = variant
        return cls
    return decorator


def create_analyzer(variant, **kwargs) -> "BaseExerciseAnalyzer":
    """
    Create the analyzer for one exercise-tracking session.

    Args:
        variant: ExerciseVariant or its string value (e.g. "squat_side")
        **kwargs: Passed to the analyzer constructor (config, min_confidence, ...)

    Returns:
        A fresh analyzer with zeroed counters
    """
    try:
        variant = ExerciseVariant(variant) if not isinstance(variant, ExerciseVariant) else variant
        analyzer_cls = EXERCISE_ANALYZER_REGISTRY[variant]
    except (ValueError, KeyError):
        raise ValueError(f"Unsupported exercise type: {variant}") from None
    return analyzer_cls(**kwargs)


class BaseExerciseAnalyzer(ABC):
    """Base class for the per-exercise state machines."""

    variant: ExerciseVariant

    def __init__(self, config: Optional[Dict[str, Any]] = None, min_confidence: Optional[float] = None):
        """
        Initialize the analyzer with configuration parameters.

        Args:
            config: Full exercise config; defaults to the bundled exercise_config.json
            min_confidence: Overrides the confidence gate from the config
        """
        self.config = config if config is not None else _EXERCISE_CONFIG
        self.variant_config = get_variant_config(self.config, self.variant.value)
        self.angle_ranges: Dict[str, AngleRange] = parse_angle_ranges(self.variant_config.get("angle_ranges", {}))
        self.min_confidence = get_min_confidence(self.config, min_confidence)
        for name in self.get_required_ranges():
            if name not in self.angle_ranges:
                raise ValueError(f"Missing angle range '{name}' for {self.variant.value}")

    def get_exercise_name(self) -> str:
        return self.variant.value

    def get_state(self) -> Dict[str, Any]:
        """Snapshot of the flags and counters of the session."""
        return asdict(self.state)

    @abstractmethod
    def get_required_landmarks(self) -> List[BodyPart]:
        """Body parts whose positions the analyzer reads each frame."""
        pass

    @abstractmethod
    def get_required_ranges(self) -> List[str]:
        """Names of the angle ranges that must be present in the config."""
        pass

    @abstractmethod
    def get_session_summary(self) -> Dict[str, Any]:
        """Counters accumulated since the analyzer was created."""
        pass

    @abstractmethod
    def _analyze_points(self, points: Dict[BodyPart, Optional[Point2D]], frame: KeypointFrame) -> FrameVerdict:
        """
        Run the state machine on one frame's reliable positions.

        Args:
            points: Projected position per required body part, None if below the gate
            frame: The frame being analyzed

        Returns:
            FrameVerdict for the frame
        """
        pass

    def analyze_frame(self, frame: KeypointFrame, projection: Optional[ProjectionParams] = None) -> FrameVerdict:
        """
        Analyze one keypoint frame and update the session state.

        Args:
            frame: Keypoints from the pose model, in model input coordinates
            projection: Display projection shared with the overlay renderer

        Returns:
            FrameVerdict with the metrics, counters and faults of this frame
        """
        if projection is None:
            projection = ProjectionParams()
        if not frame.is_reliable(self.min_confidence):
            logger.warning(f"Skipping frame for {self.get_exercise_name()}: pose score {frame.overall_score:.2f}")
            return self._skipped_verdict(frame, FeedbackGenerator.low_confidence(frame.overall_score))

        required = self.get_required_landmarks()
        points = frame.reliable_positions(required, projection, self.min_confidence)
        verdict = self._analyze_points(points, frame)
        verdict.confidence = frame.overall_score
        verdict.missing_parts = [part.label for part in required if points[part] is None]
        if verdict.missing_parts:
            logger.debug(f"{self.get_exercise_name()}: missing parts {verdict.missing_parts}")
        return verdict

    def _skipped_verdict(self, frame: KeypointFrame, error_message: str) -> FrameVerdict:
        return FrameVerdict(
            name=self.get_exercise_name(),
            angles={},
            counters=self._counters(),
            confidence=frame.overall_score,
            analysis_reliable=False,
            error_message=error_message,
        )

    def _incomplete_verdict(self, angles: Dict[str, Optional[int]],
                            points: Dict[BodyPart, Optional[Point2D]]) -> FrameVerdict:
        """Verdict for a frame whose tests were skipped; the session state is left as is."""
        missing = [part for part, point in points.items() if point is None]
        return FrameVerdict(
            name=self.get_exercise_name(),
            angles=angles,
            counters=self._counters(),
            analysis_reliable=False,
            error_message=FeedbackGenerator.missing_landmark(missing[0]) if missing else FeedbackGenerator.UNMEASURABLE,
        )

    def _counters(self) -> Dict[str, int]:
        return {k: v for k, v in self.get_session_summary().items() if isinstance(v, int)}

    @staticmethod
    def _joint_angle(points: Dict[BodyPart, Optional[Point2D]], vertex: BodyPart,
                     first: BodyPart, second: BodyPart) -> Optional[int]:
        """Included angle at `vertex`, or None if a part is missing or the geometry is degenerate."""
        if points[vertex] is None or points[first] is None or points[second] is None:
            return None
        return calculate_included_angle(points[vertex], points[first], points[second], default=None)

    @staticmethod
    def _min_available(*values: Optional[int]) -> Optional[int]:
        available = [v for v in values if v is not None]
        return min(available) if available else None
