# squat_counter/frame_pump.py

"""
Frame pump: pulls frames from a PoseSource, runs them through the pose
engine and the depth / rep logic, and pushes results to a FeedbackSink.

Two policies guard the pipeline:
  - skip-if-stale: a frame whose timestamp is not newer than the last one
    seen is ignored, so the same frame is never counted twice.
  - single-in-flight: with an executor, a new frame that arrives while an
    inference is still pending is dropped.
"""

import logging
import time
from concurrent.futures import Executor, Future
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional, Protocol, Sequence, Tuple

from .landmarks import Landmark, PoseFrame
from .models import FeedbackUpdate
from .pose_utils import estimate_squat_depth
from .rep_logic import RepCounter, classify_status

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VideoFrame:
    image: Any
    timestamp_ms: int


class PoseSource(Protocol):
    def read(self) -> Optional[VideoFrame]:
        ...

    def is_open(self) -> bool:
        ...


class PoseEngine(Protocol):
    def detect(self, image: Any, timestamp_ms: int) -> Optional[List[Landmark]]:
        ...


class FeedbackSink(Protocol):
    def on_frame(self, frame: VideoFrame) -> None:
        ...

    def on_pose(self, pose: PoseFrame) -> None:
        ...

    def on_update(self, update: FeedbackUpdate) -> None:
        ...

    def on_error(self, message: str) -> None:
        ...


class StepResult(Enum):
    NO_FRAME = "no_frame"
    STALE = "stale"
    DROPPED = "dropped"
    SUBMITTED = "submitted"
    PROCESSED = "processed"
    FAILED = "failed"


class FramePump:
    def __init__(
        self,
        source: PoseSource,
        engine: PoseEngine,
        sink: FeedbackSink,
        counter: Optional[RepCounter] = None,
        executor: Optional[Executor] = None,
        side: str = "left",
        idle_sleep: float = 0.001,
    ):
        self.source = source
        self.engine = engine
        self.sink = sink
        self.counter = counter or RepCounter()
        self.executor = executor
        self.side = side
        self.idle_sleep = idle_sleep

        self.last_timestamp_ms: Optional[int] = None
        self._pending: Optional[Tuple[Future, VideoFrame]] = None

        # Statistics
        self.frames_processed = 0
        self.frames_stale = 0
        self.frames_dropped = 0
        self.frames_without_pose = 0
        self.frames_unusable = 0
        self.frames_failed = 0

    # ---------- polling ----------

    def step(self) -> StepResult:
        """Run one poll cycle. Never blocks on a pending inference."""
        if self._pending is not None and self._pending[0].done():
            self._collect_pending()

        frame = self.source.read()
        if frame is None:
            return StepResult.NO_FRAME

        if self.last_timestamp_ms is not None and frame.timestamp_ms <= self.last_timestamp_ms:
            self.frames_stale += 1
            return StepResult.STALE
        self.last_timestamp_ms = frame.timestamp_ms

        if self._pending is not None:
            self.frames_dropped += 1
            logger.debug("Inference still pending, dropping frame at %d ms", frame.timestamp_ms)
            return StepResult.DROPPED

        if self.executor is None:
            try:
                landmarks = self.engine.detect(frame.image, frame.timestamp_ms)
            except Exception as e:
                self._report_engine_error(e)
                return StepResult.FAILED
            self.process(frame, landmarks)
            return StepResult.PROCESSED

        future = self.executor.submit(self.engine.detect, frame.image, frame.timestamp_ms)
        self._pending = (future, frame)
        return StepResult.SUBMITTED

    def finish(self) -> None:
        """Wait for the in-flight inference, if any, and process it."""
        if self._pending is not None:
            self._collect_pending()

    def run(self, should_stop: Optional[Callable[[], bool]] = None) -> None:
        """Poll until the source closes or should_stop() returns True."""
        logger.info("Frame pump started")
        while self.source.is_open():
            if should_stop is not None and should_stop():
                break
            result = self.step()
            if result in (StepResult.NO_FRAME, StepResult.STALE, StepResult.DROPPED, StepResult.FAILED):
                time.sleep(self.idle_sleep)
        self.finish()
        logger.info(
            "Frame pump stopped: reps=%d processed=%d stale=%d dropped=%d no_pose=%d unusable=%d failed=%d",
            self.counter.rep_count,
            self.frames_processed,
            self.frames_stale,
            self.frames_dropped,
            self.frames_without_pose,
            self.frames_unusable,
            self.frames_failed,
        )

    # ---------- per-frame pipeline ----------

    def process(self, frame: VideoFrame, landmarks: Optional[Sequence[Landmark]]) -> Optional[FeedbackUpdate]:
        """
        Feed one detection result through depth -> rep state -> sink.
        Returns None when the frame is a non-event (no pose, too few landmarks).
        """
        self.sink.on_frame(frame)

        if not landmarks:
            self.frames_without_pose += 1
            return None

        self.sink.on_pose(PoseFrame(tuple(landmarks), frame.timestamp_ms))

        reading = estimate_squat_depth(landmarks, side=self.side)
        if not reading.is_valid:
            self.frames_unusable += 1
            logger.debug("Too few landmarks (%d) at %d ms", len(landmarks), frame.timestamp_ms)
            return None

        previous_count = self.counter.rep_count
        state = self.counter.update(reading.depth)

        update = FeedbackUpdate(
            depth_percent=reading.depth,
            knee_angle_degrees=reading.knee_angle,
            hip_angle_degrees=reading.hip_angle,
            rep_count=state.rep_count,
            status=classify_status(reading.depth),
            timestamp_ms=frame.timestamp_ms,
            rep_completed=state.rep_count > previous_count,
            is_confident=reading.is_confident,
        )
        self.frames_processed += 1
        self.sink.on_update(update)
        return update

    def _collect_pending(self) -> None:
        future, frame = self._pending
        self._pending = None
        try:
            landmarks = future.result()
        except Exception as e:
            self._report_engine_error(e)
            return
        self.process(frame, landmarks)

    def _report_engine_error(self, error: Exception) -> None:
        self.frames_failed += 1
        logger.error("Pose engine failed: %s", error)
        self.sink.on_error(f"Pose detection failed: {error}")
