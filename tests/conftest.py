import pytest

from hadal.assessment import (
    EnforcementPolicyEngine,
    LevelConfig,
    LevelConfigProvider,
    SubscoreWeights,
)
from hadal.config import Config
from hadal.recording import RecordingSessionController, SessionEventBus
from hadal.testing import FakeCaptureDevice, ManualClock, ScriptedTranscriber


@pytest.fixture
def provider() -> LevelConfigProvider:
    return LevelConfigProvider()


@pytest.fixture
def level1(provider):
    return provider.get(1)


@pytest.fixture
def short_level() -> LevelConfig:
    """A level short enough to drive with real timers."""
    return LevelConfig(
        level_number=1,
        name="BEGINNER",
        min_duration_seconds=1,
        max_duration_seconds=3,
        pass_threshold_percent=50,
        subscore_weights=SubscoreWeights(30, 15, 25, 30),
    )


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def engine(provider, clock) -> EnforcementPolicyEngine:
    return EnforcementPolicyEngine(level_provider=provider, clock=clock)


@pytest.fixture
def device() -> FakeCaptureDevice:
    return FakeCaptureDevice()


@pytest.fixture
def transcriber() -> ScriptedTranscriber:
    return ScriptedTranscriber()


@pytest.fixture
def bus() -> SessionEventBus:
    return SessionEventBus()


@pytest.fixture
def events(bus):
    """Every event emitted on `bus`, in order."""
    seen = []
    bus.subscribe_all(seen.append)
    return seen


@pytest.fixture
def controller(device, transcriber, bus, clock):
    ctrl = RecordingSessionController(device, transcriber, event_bus=bus, clock=clock)
    yield ctrl
    ctrl.close()


@pytest.fixture
def config(tmp_path) -> Config:
    return Config(workdir=str(tmp_path), log_file=str(tmp_path / "hadal.log"))
