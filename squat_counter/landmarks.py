# squat_counter/landmarks.py

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Tuple

from .config import VISIBILITY_THRESHOLD


@dataclass(frozen=True)
class Landmark:
    """
    One body-joint estimate from the pose engine.
    x, y are normalized to the frame ([0, 1] when inside the image).
    """
    x: float
    y: float
    z: Optional[float] = None
    visibility: float = 1.0

    def is_visible(self, threshold: float = VISIBILITY_THRESHOLD) -> bool:
        return self.visibility > threshold


@dataclass(frozen=True)
class PoseFrame:
    landmarks: Tuple[Landmark, ...]
    timestamp_ms: int


class PoseLandmark(IntEnum):
    """33-point body numbering used by the MediaPipe pose models."""
    NOSE = 0
    LEFT_EYE_INNER = 1
    LEFT_EYE = 2
    LEFT_EYE_OUTER = 3
    RIGHT_EYE_INNER = 4
    RIGHT_EYE = 5
    RIGHT_EYE_OUTER = 6
    LEFT_EAR = 7
    RIGHT_EAR = 8
    MOUTH_LEFT = 9
    MOUTH_RIGHT = 10
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW = 13
    RIGHT_ELBOW = 14
    LEFT_WRIST = 15
    RIGHT_WRIST = 16
    LEFT_PINKY = 17
    RIGHT_PINKY = 18
    LEFT_INDEX = 19
    RIGHT_INDEX = 20
    LEFT_THUMB = 21
    RIGHT_THUMB = 22
    LEFT_HIP = 23
    RIGHT_HIP = 24
    LEFT_KNEE = 25
    RIGHT_KNEE = 26
    LEFT_ANKLE = 27
    RIGHT_ANKLE = 28
    LEFT_HEEL = 29
    RIGHT_HEEL = 30
    LEFT_FOOT_INDEX = 31
    RIGHT_FOOT_INDEX = 32


# shoulder, hip, knee, ankle per side
LEG_CHAINS = {
    "left": (
        PoseLandmark.LEFT_SHOULDER,
        PoseLandmark.LEFT_HIP,
        PoseLandmark.LEFT_KNEE,
        PoseLandmark.LEFT_ANKLE,
    ),
    "right": (
        PoseLandmark.RIGHT_SHOULDER,
        PoseLandmark.RIGHT_HIP,
        PoseLandmark.RIGHT_KNEE,
        PoseLandmark.RIGHT_ANKLE,
    ),
}

# Skeleton topology (unordered joint pairs)
POSE_CONNECTIONS = frozenset([
    # Head
    (0, 1), (1, 2), (2, 3), (3, 7),
    (0, 4), (4, 5), (5, 6), (6, 8),
    # Mouth
    (9, 10),
    # Left arm
    (11, 13), (13, 15),
    # Right arm
    (12, 14), (14, 16),
    # Left leg
    (23, 25), (25, 27), (27, 29), (29, 31),
    # Right leg
    (24, 26), (26, 28), (28, 30), (30, 32),
    # Torso
    (11, 12), (11, 23), (12, 24), (23, 24),
])


def landmark_from_result(obj) -> Landmark:
    """
    Adapt a pose-engine landmark (anything with x / y / z / visibility
    attributes, e.g. MediaPipe NormalizedLandmark) into a Landmark.
    """
    visibility = getattr(obj, "visibility", None)
    return Landmark(
        x=float(obj.x),
        y=float(obj.y),
        z=None if getattr(obj, "z", None) is None else float(obj.z),
        visibility=0.0 if visibility is None else float(visibility),
    )
