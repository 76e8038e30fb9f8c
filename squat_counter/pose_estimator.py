# squat_counter/pose_estimator.py

import logging
import os
import time
from typing import List, Optional

os.environ.setdefault("TF_CPP_MIN_LOG_LEVEL", "3")

import cv2
import mediapipe as mp
from mediapipe.tasks import python as mp_tasks
from mediapipe.tasks.python import vision

from .config import DEFAULT_MODEL_PATH, VIDEO_HEIGHT, VIDEO_WIDTH
from .exceptions import CameraError, PoseEngineError
from .frame_pump import VideoFrame
from .landmarks import Landmark, landmark_from_result

logger = logging.getLogger(__name__)


class PoseEstimator:
    """
    MediaPipe PoseLandmarker running in VIDEO mode (one person).
    detect() expects strictly increasing timestamps, which the frame pump guarantees.
    """

    def __init__(self, model_path: str = DEFAULT_MODEL_PATH,
                 min_detection_confidence: float = 0.5,
                 min_tracking_confidence: float = 0.5):
        if not os.path.exists(model_path):
            raise PoseEngineError(f"Pose model not found: {model_path}")

        options = vision.PoseLandmarkerOptions(
            base_options=mp_tasks.BaseOptions(model_asset_path=model_path),
            running_mode=vision.RunningMode.VIDEO,
            num_poses=1,
            min_pose_detection_confidence=min_detection_confidence,
            min_pose_presence_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )
        try:
            self.landmarker = vision.PoseLandmarker.create_from_options(options)
        except (RuntimeError, ValueError) as e:
            raise PoseEngineError(f"Could not create pose landmarker from {model_path}: {e}") from e

        logger.info("Pose landmarker loaded from %s", model_path)

    def detect(self, image_bgr, timestamp_ms: int) -> Optional[List[Landmark]]:
        """
        Input: BGR frame from OpenCV.
        Output: landmarks of the first detected pose, or None if nobody is in frame.
        """
        rgb = cv2.cvtColor(image_bgr, cv2.COLOR_BGR2RGB)
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb)
        results = self.landmarker.detect_for_video(mp_image, int(timestamp_ms))

        if not results.pose_landmarks:
            return None
        return [landmark_from_result(lm) for lm in results.pose_landmarks[0]]

    def close(self):
        self.landmarker.close()


class CameraSource:
    """cv2.VideoCapture wrapped as a PoseSource."""

    def __init__(self, index: int = 0, width: int = VIDEO_WIDTH, height: int = VIDEO_HEIGHT,
                 clock=time.monotonic):
        self.clock = clock
        self.cap = cv2.VideoCapture(index)
        if not self.cap.isOpened():
            raise CameraError(f"Could not open camera {index}")

        # ideal size only; the driver may pick something else
        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)

        self._opened_at = self.clock()
        self._last_ts = -1
        self._open = True
        logger.info(
            "Camera %d opened at %dx%d", index,
            int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
            int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
        )

    def read(self) -> Optional[VideoFrame]:
        if not self._open:
            return None
        ret, frame = self.cap.read()
        if not ret:
            logger.warning("Camera stopped delivering frames")
            self._open = False
            return None

        ts = int((self.clock() - self._opened_at) * 1000)
        # mediapipe VIDEO mode rejects repeated timestamps
        ts = max(ts, self._last_ts + 1)
        self._last_ts = ts
        return VideoFrame(image=frame, timestamp_ms=ts)

    def is_open(self) -> bool:
        return self._open

    def release(self):
        self._open = False
        self.cap.release()
