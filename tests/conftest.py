import pytest

from pose_helpers import build_pose


@pytest.fixture
def pose_for_angle():
    return build_pose
