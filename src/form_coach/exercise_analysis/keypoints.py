"""
keypoints.py - Keypoint frame model and projection into display space.
"""
from dataclasses import dataclass
from enum import Enum
import math
from typing import Dict, Iterable, Mapping, Optional, Sequence, Tuple, Union

DEFAULT_MIN_CONFIDENCE = 0.65


class BodyPart(Enum):
    """Body parts reported by the pose model, in model output order."""
    NOSE = 0
    LEFT_EYE = 1
    RIGHT_EYE = 2
    LEFT_EAR = 3
    RIGHT_EAR = 4
    LEFT_SHOULDER = 5
    RIGHT_SHOULDER = 6
    LEFT_ELBOW = 7
    RIGHT_ELBOW = 8
    LEFT_WRIST = 9
    RIGHT_WRIST = 10
    LEFT_HIP = 11
    RIGHT_HIP = 12
    LEFT_KNEE = 13
    RIGHT_KNEE = 14
    LEFT_ANKLE = 15
    RIGHT_ANKLE = 16

    @classmethod
    def from_index(cls, index: int) -> "BodyPart":
        """
        Look up a body part by its model output index.

        Raises:
            ValueError: if the index is not one of the 17 known parts
        """
        try:
            return cls(index)
        except ValueError:
            raise ValueError(f"Body part index out of range: {index}") from None

    @property
    def label(self) -> str:
        return self.name.lower()


# Pairs of parts connected when drawing the skeleton.
BODY_JOINTS: Tuple[Tuple[BodyPart, BodyPart], ...] = (
    (BodyPart.LEFT_WRIST, BodyPart.LEFT_ELBOW),
    (BodyPart.LEFT_ELBOW, BodyPart.LEFT_SHOULDER),
    (BodyPart.LEFT_SHOULDER, BodyPart.RIGHT_SHOULDER),
    (BodyPart.RIGHT_SHOULDER, BodyPart.RIGHT_ELBOW),
    (BodyPart.RIGHT_ELBOW, BodyPart.RIGHT_WRIST),
    (BodyPart.LEFT_SHOULDER, BodyPart.LEFT_HIP),
    (BodyPart.LEFT_HIP, BodyPart.RIGHT_HIP),
    (BodyPart.RIGHT_HIP, BodyPart.RIGHT_SHOULDER),
    (BodyPart.LEFT_HIP, BodyPart.LEFT_KNEE),
    (BodyPart.LEFT_KNEE, BodyPart.LEFT_ANKLE),
    (BodyPart.RIGHT_HIP, BodyPart.RIGHT_KNEE),
    (BodyPart.RIGHT_KNEE, BodyPart.RIGHT_ANKLE),
)


@dataclass(frozen=True)
class Point2D:
    x: float
    y: float

    def as_int_tuple(self) -> Tuple[int, int]:
        return int(self.x), int(self.y)


# Returned by projected_position() when a part cannot be found.
ORIGIN = Point2D(0.0, 0.0)


@dataclass(frozen=True)
class Keypoint:
    """A single body landmark in model input coordinates."""
    part: BodyPart
    x: float
    y: float
    confidence: float  # detection score in [0, 1]

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Confidence of {self.part.label} must be in [0, 1], got {self.confidence}")

    @property
    def has_finite_position(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)

    def is_reliable(self, min_confidence: float = DEFAULT_MIN_CONFIDENCE) -> bool:
        """Above the confidence gate and at a usable (finite) position."""
        return self.confidence > min_confidence and self.has_finite_position


@dataclass(frozen=True)
class ProjectionParams:
    """
    Maps model-space coordinates onto the display canvas.

    Pixel thresholds such as the knee/hip offset tolerance are defined in
    projected space, so the analyzer and the overlay must share one instance
    per frame.
    """
    width_ratio: float = 1.0
    height_ratio: float = 1.0
    left: int = 0
    top: int = 0

    @classmethod
    def for_canvas(cls, canvas_width: int, canvas_height: int,
                   model_width: int, model_height: int) -> "ProjectionParams":
        """
        Build the projection for a square drawing area centered on the canvas.

        Args:
            canvas_width: Display canvas width in pixels
            canvas_height: Display canvas height in pixels
            model_width: Pose model input width
            model_height: Pose model input height

        Returns:
            ProjectionParams for the current canvas size
        """
        if canvas_height > canvas_width:
            screen_size = canvas_width
            left, top = 0, (canvas_height - canvas_width) // 2
        else:
            screen_size = canvas_height
            left, top = (canvas_width - canvas_height) // 2, 0
        return cls(
            width_ratio=screen_size / model_width,
            height_ratio=screen_size / model_height,
            left=left,
            top=top,
        )

    def project(self, x: float, y: float) -> Point2D:
        return Point2D(x * self.width_ratio + self.left, y * self.height_ratio + self.top)


PointLike = Union[Tuple[float, float], Tuple[float, float, float]]


@dataclass(frozen=True)
class KeypointFrame:
    """One pose model inference: a keypoint per body part plus the pose score."""
    keypoints: Tuple[Keypoint, ...]
    overall_score: float

    def __post_init__(self):
        object.__setattr__(self, "keypoints", tuple(self.keypoints))
        if not 0.0 <= self.overall_score <= 1.0:
            raise ValueError(f"Overall score must be in [0, 1], got {self.overall_score}")
        if len(self.keypoints) != len(BodyPart):
            raise ValueError(
                f"Expected {len(BodyPart)} keypoints, got {len(self.keypoints)}"
            )
        for expected, keypoint in zip(BodyPart, self.keypoints):
            if keypoint.part is not expected:
                raise ValueError(
                    f"Keypoint for {keypoint.part.label} found at position of {expected.label}"
                )

    @classmethod
    def from_points(cls, points: Mapping[BodyPart, PointLike], overall_score: float = 1.0,
                    default_confidence: float = 1.0) -> "KeypointFrame":
        """
        Build a frame from a partial mapping of body part positions.

        Args:
            points: Body part -> (x, y) or (x, y, confidence)
            overall_score: Pose score for the whole frame
            default_confidence: Confidence used for parts given as (x, y)

        Returns:
            KeypointFrame in which parts missing from `points` have zero confidence
        """
        keypoints = []
        for part in BodyPart:
            if part in points:
                value = points[part]
                confidence = value[2] if len(value) > 2 else default_confidence
                keypoints.append(Keypoint(part, float(value[0]), float(value[1]), float(confidence)))
            else:
                keypoints.append(Keypoint(part, 0.0, 0.0, 0.0))
        return cls(tuple(keypoints), overall_score)

    def __getitem__(self, part: BodyPart) -> Keypoint:
        return self.keypoints[part.value]

    def is_reliable(self, min_confidence: float = DEFAULT_MIN_CONFIDENCE) -> bool:
        """Overall-frame gate deciding whether analysis runs at all."""
        return self.overall_score > min_confidence

    def projected_position(self, part: Union[BodyPart, int],
                           projection: ProjectionParams) -> Point2D:
        """
        Project a part's raw position regardless of its confidence.

        Returns ORIGIN when the model did not report the part at all (zero
        confidence) or reported a non-finite position. Use reliable_position()
        for analysis.
        """
        if not isinstance(part, BodyPart):
            part = BodyPart.from_index(part)
        keypoint = self[part]
        if keypoint.confidence <= 0.0 or not keypoint.has_finite_position:
            return ORIGIN
        return projection.project(keypoint.x, keypoint.y)

    def reliable_position(self, part: BodyPart, projection: ProjectionParams,
                          min_confidence: float = DEFAULT_MIN_CONFIDENCE) -> Optional[Point2D]:
        """Projected position of a part, or None if it is below the gate or not finite."""
        keypoint = self[part]
        if not keypoint.is_reliable(min_confidence):
            return None
        point = projection.project(keypoint.x, keypoint.y)
        if not (math.isfinite(point.x) and math.isfinite(point.y)):
            return None
        return point

    def reliable_positions(self, parts: Iterable[BodyPart], projection: ProjectionParams,
                           min_confidence: float = DEFAULT_MIN_CONFIDENCE) -> Dict[BodyPart, Optional[Point2D]]:
        return {part: self.reliable_position(part, projection, min_confidence) for part in parts}

    def missing_parts(self, parts: Sequence[BodyPart],
                      min_confidence: float = DEFAULT_MIN_CONFIDENCE) -> list:
        return [part for part in parts if not self[part].is_reliable(min_confidence)]
