# squat_counter/models.py
from enum import Enum
from typing import Dict, Tuple

from pydantic import BaseModel, Field


class StatusCategory(str, Enum):
    READY = "ready"
    DESCENDING = "descending"
    KEEP_GOING = "keep_going"
    DEPTH_REACHED = "depth_reached"


# (indicator text, status text) shown for each category
STATUS_LABELS: Dict[StatusCategory, Tuple[str, str]] = {
    StatusCategory.READY: ("Standing", "Ready"),
    StatusCategory.DESCENDING: ("Going Down...", "Squatting"),
    StatusCategory.KEEP_GOING: ("Keep Going...", "Squatting"),
    StatusCategory.DEPTH_REACHED: ("DEPTH REACHED!", "Target Depth!"),
}


class FeedbackUpdate(BaseModel):
    """Per-frame payload handed to UI collaborators."""
    depth_percent: int = Field(ge=0, le=100)
    knee_angle_degrees: int = Field(ge=0, le=180)
    hip_angle_degrees: int = Field(default=0, ge=0, le=180)
    rep_count: int = Field(ge=0)
    status: StatusCategory
    timestamp_ms: int = 0
    rep_completed: bool = False
    is_confident: bool = True

    @property
    def indicator_text(self) -> str:
        return STATUS_LABELS[self.status][0]

    @property
    def status_text(self) -> str:
        return STATUS_LABELS[self.status][1]
