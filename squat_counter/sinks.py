# squat_counter/sinks.py

import logging
from threading import Thread
from typing import Iterable, Optional, Sequence, Tuple

import cv2
import numpy as np
import pyttsx3

from .config import VISIBILITY_THRESHOLD
from .frame_pump import VideoFrame
from .landmarks import POSE_CONNECTIONS, Landmark, PoseFrame
from .models import FeedbackUpdate, StatusCategory

logger = logging.getLogger(__name__)

WINDOW_NAME = "Squat Counter"

# BGR
LINE_COLOR = (255, 200, 100)
POINT_COLOR = (50, 205, 50)
STATUS_COLORS = {
    StatusCategory.READY: (200, 255, 200),
    StatusCategory.DESCENDING: (0, 200, 255),
    StatusCategory.KEEP_GOING: (0, 200, 255),
    StatusCategory.DEPTH_REACHED: (0, 255, 0),
}


def draw_skeleton(
    image: np.ndarray,
    landmarks: Sequence[Landmark],
    connections: Iterable[Tuple[int, int]] = POSE_CONNECTIONS,
    threshold: float = VISIBILITY_THRESHOLD,
) -> np.ndarray:
    """
    Draw bones and joints in place. A bone is drawn only if both ends are
    visible above the threshold; joints below it are skipped.
    """
    h, w = image.shape[:2]

    def px(lm: Landmark):
        return int(lm.x * w), int(lm.y * h)

    for start, end in connections:
        if start >= len(landmarks) or end >= len(landmarks):
            continue
        p1, p2 = landmarks[start], landmarks[end]
        if p1.visibility > threshold and p2.visibility > threshold:
            cv2.line(image, px(p1), px(p2), LINE_COLOR, 2)

    for lm in landmarks:
        if lm.visibility > threshold:
            cv2.circle(image, px(lm), 4, POINT_COLOR, -1)

    return image


class LoggingSink:
    def on_frame(self, frame: VideoFrame) -> None:
        pass

    def on_pose(self, pose: PoseFrame) -> None:
        pass

    def on_update(self, update: FeedbackUpdate) -> None:
        logger.debug(
            "depth=%d%% knee=%d hip=%d reps=%d status=%s",
            update.depth_percent, update.knee_angle_degrees, update.hip_angle_degrees,
            update.rep_count, update.status.value,
        )
        if update.rep_completed:
            logger.info("=== REP COMPLETED (total=%d) ===", update.rep_count)

    def on_error(self, message: str) -> None:
        logger.error(message)


class OverlaySink:
    """Skeleton plus depth / reps / status text in an OpenCV window."""

    def __init__(self, window_name: str = WINDOW_NAME):
        self.window_name = window_name
        self.display_frame: Optional[np.ndarray] = None
        self.last_update: Optional[FeedbackUpdate] = None
        self.error_message: Optional[str] = None

    def on_frame(self, frame: VideoFrame) -> None:
        self.display_frame = frame.image.copy()

    def on_pose(self, pose: PoseFrame) -> None:
        if self.display_frame is not None:
            draw_skeleton(self.display_frame, pose.landmarks)

    def on_update(self, update: FeedbackUpdate) -> None:
        self.last_update = update

    def on_error(self, message: str) -> None:
        self.error_message = message

    def render(self) -> Optional[np.ndarray]:
        if self.display_frame is None:
            return None
        image = self.display_frame.copy()

        update = self.last_update
        if update is not None:
            cv2.putText(image, f"Reps: {update.rep_count}", (20, 40),
                        cv2.FONT_HERSHEY_SIMPLEX, 1.0, (0, 255, 0), 2)
            cv2.putText(image, f"Depth: {update.depth_percent}%", (20, 75),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.7, (255, 255, 255), 2)
            cv2.putText(image, f"Knee: {update.knee_angle_degrees} deg", (20, 105),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.7, (255, 255, 255), 2)
            cv2.putText(image, f"{update.indicator_text} ({update.status_text})", (20, 140),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.8, STATUS_COLORS[update.status], 2)

        if self.error_message:
            cv2.putText(image, self.error_message, (20, image.shape[0] - 30),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.6, (0, 0, 255), 2)
        return image

    def wants_quit(self) -> bool:
        """Show the latest frame and poll the keyboard; True once 'q' is pressed."""
        image = self.render()
        if image is not None:
            cv2.imshow(self.window_name, image)
        return cv2.waitKey(1) & 0xFF == ord("q")

    def close(self):
        cv2.destroyAllWindows()


class VoiceSink:
    """Announces each completed rep."""

    def __init__(self, rate: int = 165):
        self.rate = rate

    def on_frame(self, frame: VideoFrame) -> None:
        pass

    def on_pose(self, pose: PoseFrame) -> None:
        pass

    def on_update(self, update: FeedbackUpdate) -> None:
        if update.rep_completed:
            self.say(f"Rep {update.rep_count}")

    def on_error(self, message: str) -> None:
        pass

    def say(self, text: str) -> None:
        if text:
            Thread(target=self._announce, args=(text,), daemon=True).start()

    def _announce(self, text: str) -> None:
        # one pyttsx3 engine per announcement, owned by this thread
        try:
            voice = pyttsx3.init()
            voice.setProperty("rate", self.rate)
            voice.say(text)
            voice.runAndWait()
        except (RuntimeError, OSError) as e:
            logger.warning("Could not announce %r: %s", text, e)


class CompositeSink:
    """Fans every callback out to several sinks, in order."""

    def __init__(self, *sinks):
        self.sinks = list(sinks)

    def on_frame(self, frame: VideoFrame) -> None:
        for sink in self.sinks:
            sink.on_frame(frame)

    def on_pose(self, pose: PoseFrame) -> None:
        for sink in self.sinks:
            sink.on_pose(pose)

    def on_update(self, update: FeedbackUpdate) -> None:
        for sink in self.sinks:
            sink.on_update(update)

    def on_error(self, message: str) -> None:
        for sink in self.sinks:
            sink.on_error(message)
