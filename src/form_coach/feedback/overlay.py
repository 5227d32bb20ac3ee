from typing import Optional, Tuple

import cv2
import numpy as np

from ..exercise_analysis.base_analyzer import FeedbackGenerator, FrameVerdict
from ..exercise_analysis.keypoints import BODY_JOINTS, DEFAULT_MIN_CONFIDENCE, KeypointFrame, ProjectionParams

# BGR colors
KEYPOINT_COLOR = (0, 255, 255)
LINE_COLOR = (255, 255, 255)
METRIC_COLOR = (0, 0, 255)
COUNTER_COLOR = (228, 172, 24)
GOOD_COLOR = (0, 255, 0)
FAULT_COLOR = (0, 0, 255)
FOOTER_COLOR = (255, 255, 255)


def _label(name: str) -> str:
    return name.replace("_", " ").capitalize()


class OverlayRenderer:
    """Draws the model input, the detected skeleton and a FrameVerdict onto a display canvas."""

    def __init__(self, model_width: int = 257, model_height: int = 257,
                 min_confidence: float = DEFAULT_MIN_CONFIDENCE, circle_radius: int = 9):
        self.model_width = model_width
        self.model_height = model_height
        self.min_confidence = min_confidence
        self.circle_radius = circle_radius

    def projection_for(self, canvas_width: int, canvas_height: int) -> ProjectionParams:
        return ProjectionParams.for_canvas(canvas_width, canvas_height, self.model_width, self.model_height)

    def compose_canvas(self, model_image: np.ndarray, canvas_size: Tuple[int, int]) -> Tuple[np.ndarray, ProjectionParams]:
        """
        Place the model input image in the centered square of a blank canvas.

        Args:
            model_image: Frame at model input resolution (BGR)
            canvas_size: (width, height) of the display canvas

        Returns:
            Tuple of (canvas, projection matching the placement)
        """
        canvas_width, canvas_height = canvas_size
        canvas = np.zeros((canvas_height, canvas_width, 3), dtype=np.uint8)
        projection = self.projection_for(canvas_width, canvas_height)
        side = min(canvas_width, canvas_height)
        scaled = cv2.resize(model_image, (side, side), interpolation=cv2.INTER_LINEAR)
        canvas[projection.top:projection.top + side, projection.left:projection.left + side] = scaled
        return canvas, projection

    def draw_keypoints(self, canvas: np.ndarray, frame: KeypointFrame, projection: ProjectionParams) -> None:
        for keypoint in frame.keypoints:
            if keypoint.is_reliable(self.min_confidence):
                center = projection.project(keypoint.x, keypoint.y).as_int_tuple()
                cv2.circle(canvas, center, self.circle_radius, KEYPOINT_COLOR, -1)

        for first, second in BODY_JOINTS:
            if frame[first].is_reliable(self.min_confidence) and frame[second].is_reliable(self.min_confidence):
                start = projection.project(frame[first].x, frame[first].y).as_int_tuple()
                end = projection.project(frame[second].x, frame[second].y).as_int_tuple()
                cv2.line(canvas, start, end, LINE_COLOR, 2)

    def _put_text(self, canvas: np.ndarray, text: str, x: float, y: float,
                  projection: ProjectionParams, color, scale: float = 0.5) -> None:
        origin = (int(x * projection.width_ratio), int(y * projection.height_ratio + projection.top))
        cv2.putText(canvas, text, origin, cv2.FONT_HERSHEY_SIMPLEX, scale, color, 1 if scale < 0.7 else 2)

    def draw_verdict(self, canvas: np.ndarray, verdict: FrameVerdict, projection: ProjectionParams) -> None:
        """Draw metrics and counters on the left, the rep count and banners on the right."""
        row = 15.0
        for name, value in verdict.angles.items():
            shown = "--" if value is None else f"{value:d}"
            self._put_text(canvas, f"{_label(name)}: {shown}", 10.0, row, projection, METRIC_COLOR)
            row += 15.0
        for name, value in verdict.counters.items():
            if name == "rep_count":
                continue
            self._put_text(canvas, f"{_label(name)}: {value}", 10.0, row, projection, METRIC_COLOR)
            row += 15.0

        if "rep_count" in verdict.counters:
            self._put_text(canvas, f"Reps: {verdict.rep_count}", 150.0, 20.0, projection, COUNTER_COLOR, scale=0.9)

        banner_row = 40.0
        for message in verdict.messages:
            color = GOOD_COLOR if message == FeedbackGenerator.GOOD_FORM else FAULT_COLOR
            self._put_text(canvas, message, 150.0, banner_row, projection, color, scale=0.9)
            banner_row += 20.0

        if not verdict.analysis_reliable and verdict.error_message:
            self._put_text(canvas, verdict.error_message, 10.0, row + 10.0, projection, FAULT_COLOR)

    def draw_footer(self, canvas: np.ndarray, score: float, projection: ProjectionParams,
                    session_seconds: Optional[float] = None, fps: Optional[float] = None) -> None:
        """Pose score, session time and FPS below the drawing area."""
        side = min(canvas.shape[0], canvas.shape[1])
        bottom = projection.top + side
        lines = [f"Score: {score:.2f}"]
        if session_seconds is not None:
            lines.append(f"Time Elapsed: {session_seconds:.2f} s")
        if fps is not None:
            lines.append(f"FPS: {fps:.2f}")
        for idx, line in enumerate(lines):
            y = bottom + int((20 + 20 * idx) * projection.height_ratio)
            if y >= canvas.shape[0]:
                # no room below a landscape drawing area; stack over the bottom instead
                y = bottom - int((20 * (len(lines) - idx)) * projection.height_ratio)
            cv2.putText(canvas, line, (int(15 * projection.width_ratio), y),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.5, FOOTER_COLOR, 1)

    def render(self, model_image: np.ndarray, frame: Optional[KeypointFrame], verdict: Optional[FrameVerdict],
               canvas_size: Tuple[int, int], session_seconds: Optional[float] = None,
               fps: Optional[float] = None) -> np.ndarray:
        canvas, projection = self.compose_canvas(model_image, canvas_size)
        if frame is not None:
            self.draw_keypoints(canvas, frame, projection)
            if verdict is not None:
                self.draw_verdict(canvas, verdict, projection)
            self.draw_footer(canvas, frame.overall_score, projection, session_seconds, fps)
        return canvas
