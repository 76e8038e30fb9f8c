# squat_counter/rep_demo.py

import logging
import sys
from concurrent.futures import ThreadPoolExecutor

from .config import Settings
from .exceptions import SquatCounterError
from .frame_pump import FramePump
from .pose_estimator import CameraSource, PoseEstimator
from .sinks import CompositeSink, LoggingSink, OverlaySink, VoiceSink

logger = logging.getLogger(__name__)
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def main() -> int:
    try:
        settings = Settings.from_env()
    except ValueError as e:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
        logger.error("Invalid configuration: %s", e)
        return 1
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)

    overlay = OverlaySink()
    sinks = [LoggingSink(), overlay]
    if settings.voice:
        sinks.append(VoiceSink())
    sink = CompositeSink(*sinks)

    # 1) Start camera + pose engine (fatal for the session if either fails)
    camera = None
    estimator = None
    try:
        camera = CameraSource(settings.camera_index)
        estimator = PoseEstimator(settings.model_path)
    except SquatCounterError as e:
        logger.error("Initialization failed: %s", e)
        sink.on_error(f"Error: {e}")
        if camera is not None:
            camera.release()
        return 1

    logger.info("Ready to squat! Tracking the %s leg. Press 'q' to quit.", settings.side)

    # 2) Run the pump; one inference in flight at a time
    try:
        with ThreadPoolExecutor(max_workers=1, thread_name_prefix="pose") as executor:
            pump = FramePump(camera, estimator, sink, executor=executor, side=settings.side)
            try:
                pump.run(should_stop=overlay.wants_quit)
            except KeyboardInterrupt:
                logger.info("Interrupted")
            finally:
                camera.release()
                overlay.close()
    finally:
        # executor has drained here; no inference still holds the landmarker
        estimator.close()

    print(f"Session finished: {pump.counter.rep_count} reps")
    return 0


if __name__ == "__main__":
    sys.exit(main())
