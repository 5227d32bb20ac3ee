import queue
import threading
import time
from typing import Callable, Optional

import pyttsx3

from ..exercise_analysis.base_analyzer import FrameVerdict


class VoiceFeedback:
    """Voice feedback system for exercise form correction."""

    def __init__(self, rate: int = 150, volume: float = 1.0, cooldown: float = 4.0,
                 clock: Callable[[], float] = time.time):
        """
        Initialize the voice feedback system.

        Args:
            rate: Speech rate (words per minute)
            volume: Speech volume (0.0 to 1.0)
            cooldown: Minimum seconds between two fault cues
            clock: Time source, replaceable in tests
        """
        self.engine = pyttsx3.init()
        self.engine.setProperty('rate', rate)
        self.engine.setProperty('volume', volume)

        self._tts_queue = queue.Queue()
        self._tts_thread = threading.Thread(target=self._tts_worker, daemon=True)
        self._tts_thread.start()

        self._clock = clock
        self.feedback_cooldown = cooldown
        self.last_feedback_time = None
        self._last_feedback_message = None

        # Feedback messages for the faults reported in FrameVerdict.faults
        self.feedback_messages = {
            "knees_caving": "Push your knees out over your toes",
            "knees_over_toes": "Sit back, keep your knees behind your toes",
            "forward_lean": "Keep your chest up and torso more upright",
            "plank_broken": "Straighten your body and hold the plank",
            "low_confidence": "Make sure your whole body is visible to the camera",
        }

    def generate_feedback(self, verdict: FrameVerdict) -> Optional[str]:
        """
        Pick the cue to speak for a frame, if any.

        A completed rep is always announced. Fault and visibility cues are
        rate-limited by the cooldown and not repeated back to back.

        Args:
            verdict: Analysis result of the current frame

        Returns:
            Feedback message if any, None otherwise
        """
        if verdict.rep_completed:
            return f"{verdict.rep_count}"

        if not verdict.analysis_reliable:
            feedback = self.feedback_messages["low_confidence"]
        else:
            faults = [name for name, detected in verdict.faults.items() if detected]
            if not faults:
                self._last_feedback_message = None
                return None
            feedback = self.feedback_messages.get(faults[0], faults[0].replace("_", " "))

        now = self._clock()
        if self.last_feedback_time is not None and now - self.last_feedback_time < self.feedback_cooldown:
            return None
        if feedback == self._last_feedback_message:
            return None
        self._last_feedback_message = feedback
        self.last_feedback_time = now
        return feedback

    def speak_async(self, message: str) -> None:
        """
        Queue the given message to be spoken asynchronously by the background TTS thread.

        Args:
            message: Message to speak
        """
        self._tts_queue.put(message)

    def _tts_worker(self):
        while True:
            msg = self._tts_queue.get()
            if msg is None:
                break
            self.engine.say(msg)
            self.engine.runAndWait()

    def stop(self) -> None:
        self._tts_queue.put(None)
