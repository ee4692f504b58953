import pytest

from pose_fixtures import MOUNTAIN, T_POSE, make_frame, make_pose


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def mountain_frame():
    return make_frame(MOUNTAIN, confidence=0.9)


@pytest.fixture
def catalog():
    return (make_pose("Mountain Pose", MOUNTAIN), make_pose("T Pose", T_POSE))
