import numpy as np
import pytest

from pose_helpers import build_pose
from squat_counter import rep_demo
from squat_counter.exceptions import CameraError, PoseEngineError
from squat_counter.frame_pump import VideoFrame
from squat_counter.sinks import OverlaySink

ENV_VARS = ["SQUAT_CAMERA_INDEX", "SQUAT_MODEL_PATH", "SQUAT_VOICE", "SQUAT_SIDE", "SQUAT_LOG_LEVEL"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class FakeCamera:
    def __init__(self, index=0, frames=6):
        self.frames = [VideoFrame(np.zeros((48, 64, 3), dtype=np.uint8), ts) for ts in range(1, frames + 1)]
        self.released = False

    def read(self):
        return self.frames.pop(0) if self.frames else None

    def is_open(self):
        return bool(self.frames) and not self.released

    def release(self):
        self.released = True


class FakeEstimator:
    def __init__(self, model_path=None):
        self.closed = False

    def detect(self, image, timestamp_ms):
        return build_pose(90 if timestamp_ms % 2 else 180)

    def close(self):
        self.closed = True


class HeadlessOverlay(OverlaySink):
    def wants_quit(self):
        return False

    def close(self):
        pass


@pytest.fixture
def session(monkeypatch):
    created = {}

    def make_camera(index):
        created["camera"] = FakeCamera(index)
        return created["camera"]

    def make_estimator(model_path):
        created["estimator"] = FakeEstimator(model_path)
        return created["estimator"]

    monkeypatch.setattr(rep_demo, "CameraSource", make_camera)
    monkeypatch.setattr(rep_demo, "PoseEstimator", make_estimator)
    monkeypatch.setattr(rep_demo, "OverlaySink", HeadlessOverlay)
    return created


def test_invalid_side_exits_with_error(clean_env, caplog):
    clean_env.setenv("SQUAT_SIDE", "both")
    assert rep_demo.main() == 1
    assert "Invalid configuration" in caplog.text


def test_invalid_camera_index_exits_with_error(clean_env):
    clean_env.setenv("SQUAT_CAMERA_INDEX", "front")
    assert rep_demo.main() == 1


def test_camera_failure_exits_with_error(monkeypatch, caplog):
    def no_camera(index):
        raise CameraError(f"Could not open camera {index}")

    def unexpected(model_path):
        raise AssertionError("pose engine must not start without a camera")

    monkeypatch.setattr(rep_demo, "CameraSource", no_camera)
    monkeypatch.setattr(rep_demo, "PoseEstimator", unexpected)

    assert rep_demo.main() == 1
    assert "Could not open camera 0" in caplog.text


def test_engine_failure_releases_camera(session, monkeypatch):
    def no_engine(model_path):
        raise PoseEngineError(f"Pose model not found: {model_path}")

    monkeypatch.setattr(rep_demo, "PoseEstimator", no_engine)

    assert rep_demo.main() == 1
    assert session["camera"].released


def test_session_runs_and_cleans_up(session, capsys):
    assert rep_demo.main() == 0

    assert session["camera"].released
    assert session["estimator"].closed
    assert "Session finished" in capsys.readouterr().out


def test_estimator_closed_when_pump_fails(session, monkeypatch):
    class BrokenPump:
        def __init__(self, *args, **kwargs):
            pass

        def run(self, should_stop=None):
            raise RuntimeError("sink exploded")

    monkeypatch.setattr(rep_demo, "FramePump", BrokenPump)

    with pytest.raises(RuntimeError):
        rep_demo.main()
    assert session["estimator"].closed
    assert session["camera"].released
