# squat_counter/rep_logic.py

import logging
from dataclasses import dataclass, replace
from typing import Optional

from .config import ENTER_THRESHOLD, EXIT_THRESHOLD, VALID_REP_THRESHOLD
from .models import StatusCategory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RepThresholds:
    enter: int = ENTER_THRESHOLD      # depth > enter  -> squatting
    exit: int = EXIT_THRESHOLD        # depth < exit   -> standing
    valid: int = VALID_REP_THRESHOLD  # peak >= valid  -> rep counts


DEFAULT_THRESHOLDS = RepThresholds()


@dataclass(frozen=True)
class RepCounterState:
    rep_count: int = 0
    is_squatting: bool = False       # False = Standing, True = Squatting
    max_depth_this_rep: int = 0


# -------------------------------------------------------------
# Main update function
# -------------------------------------------------------------

def update_rep_state(
    state: RepCounterState,
    depth: int,
    thresholds: RepThresholds = DEFAULT_THRESHOLDS,
) -> RepCounterState:
    """
    Advance the standing/squatting machine by one frame of depth.

    - Standing -> Squatting when depth > enter; the peak is seeded with depth.
    - While squatting the peak tracks the deepest frame.
    - Squatting -> Standing when depth < exit; the rep counts only if the
      peak reached `valid`. The peak is cleared either way.
    Depths between exit and enter never change state (hysteresis).
    """
    if not state.is_squatting:
        if depth > thresholds.enter:
            return replace(state, is_squatting=True, max_depth_this_rep=depth)
        return state

    peak = max(state.max_depth_this_rep, depth)

    if depth < thresholds.exit:
        rep_count = state.rep_count
        if peak >= thresholds.valid:
            rep_count += 1
        return RepCounterState(rep_count=rep_count, is_squatting=False, max_depth_this_rep=0)

    return replace(state, max_depth_this_rep=peak)


def classify_status(depth: int) -> StatusCategory:
    """Display-only classification of the current depth."""
    if depth < 30:
        return StatusCategory.READY
    if depth < 50:
        return StatusCategory.DESCENDING
    if depth < 80:
        return StatusCategory.KEEP_GOING
    return StatusCategory.DEPTH_REACHED


class RepCounter:
    """Holds the current RepCounterState for one session."""

    def __init__(self, thresholds: RepThresholds = DEFAULT_THRESHOLDS,
                 state: Optional[RepCounterState] = None):
        self.thresholds = thresholds
        self.state = state or RepCounterState()

    @property
    def rep_count(self) -> int:
        return self.state.rep_count

    def update(self, depth: int) -> RepCounterState:
        previous = self.state
        self.state = update_rep_state(previous, depth, self.thresholds)

        if self.state.is_squatting and not previous.is_squatting:
            logger.debug("Squat started at depth %d", depth)
        elif previous.is_squatting and not self.state.is_squatting:
            if self.state.rep_count > previous.rep_count:
                logger.info("Rep %d completed (peak depth %d%%)",
                            self.state.rep_count, previous.max_depth_this_rep)
            else:
                logger.info("Squat too shallow, not counted (peak depth %d%%)",
                            previous.max_depth_this_rep)
        return self.state
