from abc import ABC, abstractmethod
from typing import Optional, Tuple

import numpy as np

from ..exercise_analysis.keypoints import KeypointFrame


class BasePoseDetector(ABC):
    """Base class for pose detection implementations."""

    def __init__(self, model_width: int = 257, model_height: int = 257):
        self.model_width = model_width
        self.model_height = model_height

    @property
    def model_input_size(self) -> Tuple[int, int]:
        return self.model_width, self.model_height

    @abstractmethod
    def detect(self, frame: np.ndarray) -> Optional[KeypointFrame]:
        """
        Detect pose keypoints in the given frame.

        Args:
            frame: Input BGR frame as numpy array, already cropped and scaled
                to the model input size

        Returns:
            KeypointFrame in model input coordinates, or None if no person was found
        """
        pass

    def close(self) -> None:
        """Release the model resources held by the detector."""
        pass
