"""
preprocessing.py - Fit camera frames to the pose model input.
"""
from typing import Tuple

import cv2
import numpy as np

# Aspect ratio difference below which a frame is used without cropping.
MAX_RATIO_DIFFERENCE = 1e-5


def crop_to_aspect_ratio(frame: np.ndarray, model_width: int, model_height: int) -> np.ndarray:
    """
    Center-crop a frame to the aspect ratio of the model input.

    Args:
        frame: Image as an (H, W, C) array
        model_width: Model input width
        model_height: Model input height

    Returns:
        A view of `frame` with the model's height/width ratio
    """
    height, width = frame.shape[:2]
    frame_ratio = height / width
    model_ratio = model_height / model_width

    if abs(model_ratio - frame_ratio) < MAX_RATIO_DIFFERENCE:
        return frame
    if model_ratio < frame_ratio:
        # taller than the model input: trim top and bottom
        crop_height = height - width / model_ratio
        start = int(crop_height / 2)
        return frame[start:start + int(height - crop_height), :]
    crop_width = width - height * model_ratio
    start = int(crop_width / 2)
    return frame[:, start:start + int(width - crop_width)]


def prepare_model_input(frame: np.ndarray, model_size: Tuple[int, int]) -> np.ndarray:
    """Crop to the model aspect ratio and scale to (width, height) of the model input."""
    model_width, model_height = model_size
    cropped = crop_to_aspect_ratio(frame, model_width, model_height)
    return cv2.resize(cropped, (model_width, model_height), interpolation=cv2.INTER_LINEAR)


def to_rgb(frame: np.ndarray) -> np.ndarray:
    return cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
