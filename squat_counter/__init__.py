# squat_counter/__init__.py

from .landmarks import Landmark, PoseFrame, PoseLandmark, POSE_CONNECTIONS
from .pose_utils import DepthReading, angle_between, depth_from_knee_angle, estimate_squat_depth
from .rep_logic import (
    DEFAULT_THRESHOLDS,
    RepCounter,
    RepCounterState,
    RepThresholds,
    classify_status,
    update_rep_state,
)
from .models import FeedbackUpdate, StatusCategory

__version__ = "0.1.0"

__all__ = [
    "Landmark",
    "PoseFrame",
    "PoseLandmark",
    "POSE_CONNECTIONS",
    "DepthReading",
    "angle_between",
    "depth_from_knee_angle",
    "estimate_squat_depth",
    "DEFAULT_THRESHOLDS",
    "RepCounter",
    "RepCounterState",
    "RepThresholds",
    "classify_status",
    "update_rep_state",
    "FeedbackUpdate",
    "StatusCategory",
]
