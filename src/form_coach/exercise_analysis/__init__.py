"""
Exercise analysis package: keypoint geometry and per-exercise form state machines.
"""

from .base_analyzer import (
    EXERCISE_ANALYZER_REGISTRY,
    BaseExerciseAnalyzer,
    ExerciseVariant,
    FrameVerdict,
    create_analyzer,
)
from .config_utils import AngleRange, load_exercise_config
from .geometry import calculate_distance, calculate_included_angle, calculate_slope_angle
from .keypoints import BODY_JOINTS, BodyPart, Keypoint, KeypointFrame, Point2D, ProjectionParams
from .plank_analyzer import PlankAnalyzer
from .squat_front_view import FrontSquatAnalyzer
from .squat_side_view import SideSquatAnalyzer

__all__ = [
    'AngleRange',
    'BaseExerciseAnalyzer',
    'BODY_JOINTS',
    'BodyPart',
    'EXERCISE_ANALYZER_REGISTRY',
    'ExerciseVariant',
    'FrameVerdict',
    'FrontSquatAnalyzer',
    'Keypoint',
    'KeypointFrame',
    'PlankAnalyzer',
    'Point2D',
    'ProjectionParams',
    'SideSquatAnalyzer',
    'calculate_distance',
    'calculate_included_angle',
    'calculate_slope_angle',
    'create_analyzer',
    'load_exercise_config',
]
