# squat_counter/config.py

import os
from dataclasses import dataclass

import dotenv

# ---------- Fixed session constants ----------
TARGET_KNEE_ANGLE = 90            # degrees, full-depth squat
TARGET_DEPTH_BAND = (85, 95)      # informational, not used by the counter
ENTER_THRESHOLD = 60              # depth % to start a squat
EXIT_THRESHOLD = 20               # depth % to return to standing
VALID_REP_THRESHOLD = 60          # peak depth % for a rep to count
VIDEO_WIDTH = 640
VIDEO_HEIGHT = 480
VISIBILITY_THRESHOLD = 0.5        # below this a joint is not drawn

DEFAULT_MODEL_PATH = "pose_landmarker_lite.task"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """
    Session plumbing read from the environment (and a .env file if present).
    Counting thresholds are deliberately not part of this.
    """
    camera_index: int = 0
    model_path: str = DEFAULT_MODEL_PATH
    voice: bool = False
    side: str = "left"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, load_dotenv: bool = True) -> "Settings":
        if load_dotenv:
            dotenv.load_dotenv()

        side = os.getenv("SQUAT_SIDE", "left").strip().lower()
        if side not in ("left", "right"):
            raise ValueError(f"SQUAT_SIDE must be 'left' or 'right', got {side!r}")

        return cls(
            camera_index=int(os.getenv("SQUAT_CAMERA_INDEX", "0")),
            model_path=os.getenv("SQUAT_MODEL_PATH", DEFAULT_MODEL_PATH),
            voice=os.getenv("SQUAT_VOICE", "").strip().lower() in _TRUTHY,
            side=side,
            log_level=os.getenv("SQUAT_LOG_LEVEL", "INFO").upper(),
        )
