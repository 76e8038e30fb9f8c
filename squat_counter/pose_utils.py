# squat_counter/pose_utils.py

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from .config import TARGET_KNEE_ANGLE
from .landmarks import LEG_CHAINS, Landmark

STANDING_KNEE_ANGLE = 180.0


def _xy(p):
    if isinstance(p, Landmark):
        return p.x, p.y
    return p[0], p[1]


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (np.round would round half to even)."""
    return int(np.floor(value + 0.5))


def angle_between(a, b, c) -> float:
    """
    Returns the angle (in degrees) at point b formed by points a-b-c.
    Points are Landmarks or (x, y) pairs. Result is always in [0, 180];
    coincident points give a finite value since atan2(0, 0) == 0.
    """
    ax, ay = _xy(a)
    bx, by = _xy(b)
    cx, cy = _xy(c)

    radians = np.arctan2(cy - by, cx - bx) - np.arctan2(ay - by, ax - bx)
    angle = float(np.abs(np.degrees(radians)))
    if angle > 180.0:
        angle = 360.0 - angle
    return angle


def depth_from_knee_angle(knee_angle: float) -> int:
    """
    Map a knee angle to squat depth in percent.
    180 deg (upright) -> 0, 90 deg (full squat) -> 100, linear in between.
    """
    span = STANDING_KNEE_ANGLE - TARGET_KNEE_ANGLE
    depth = np.clip((STANDING_KNEE_ANGLE - knee_angle) / span * 100.0, 0.0, 100.0)
    return round_half_up(float(depth))


@dataclass(frozen=True)
class DepthReading:
    depth: int
    knee_angle: int
    hip_angle: int
    is_valid: bool = True
    # all four leg-chain joints above the visibility cutoff; informational only
    is_confident: bool = True

    @classmethod
    def invalid(cls) -> "DepthReading":
        return cls(depth=0, knee_angle=0, hip_angle=0, is_valid=False, is_confident=False)


def estimate_squat_depth(landmarks: Optional[Sequence[Landmark]], side: str = "left") -> DepthReading:
    """
    Compute squat depth from one frame's landmarks using a fixed body side.

    The side is never picked by visibility; pass side="right" explicitly if the
    camera sees the right leg. Too few landmarks give DepthReading.invalid().
    """
    try:
        chain = LEG_CHAINS[side]
    except KeyError:
        raise ValueError(f"side must be 'left' or 'right', got {side!r}") from None

    if not landmarks or len(landmarks) <= max(chain):
        return DepthReading.invalid()

    shoulder, hip, knee, ankle = (landmarks[i] for i in chain)

    knee_angle = angle_between(hip, knee, ankle)
    hip_angle = angle_between(shoulder, hip, knee)

    return DepthReading(
        depth=depth_from_knee_angle(knee_angle),
        knee_angle=round_half_up(knee_angle),
        hip_angle=round_half_up(hip_angle),
        is_confident=all(p.is_visible() for p in (shoulder, hip, knee, ankle)),
    )
