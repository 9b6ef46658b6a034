import pytest

from sculptnet.hand_tracking import Landmark, LANDMARK_COUNT
from sculptnet.image_generator import GenerationResult
from sculptnet.recorder import SessionRecorder
from sculptnet.scheduler import ManualClock, Scheduler


START_EPOCH_MS = 1_700_000_000_000.0


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def scheduler(clock):
    return Scheduler(clock)


@pytest.fixture
def recorder(clock, scheduler):
    return SessionRecorder(
        clock=clock,
        scheduler=scheduler,
        client_info="SculptNet/test",
        wall_clock=lambda: START_EPOCH_MS + clock.now_ms(),
    )


@pytest.fixture
def landmarks():
    return [Landmark(i * 0.05, i * 0.05, 0.0) for i in range(LANDMARK_COUNT)]


@pytest.fixture
def make_generation():
    return _make_generation


def _make_generation(n=1, seed=12345):
    return GenerationResult(
        image_url=f"https://example.com/image-{n}.png",
        prompt={'short_description': 'test', 'lighting': {'mood': 'warm'}},
        timestamp=START_EPOCH_MS,
        seed=seed,
        request_id=f"req-{n}",
    )
