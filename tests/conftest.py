from datetime import UTC, datetime, timedelta

import pytest

from unibrain.domain.models import Flashcard


class StubRandom:
    """Deterministic stand-in for random.Random that replays fixed jitter values."""

    def __init__(self, values=(0.0,)):
        self.values = list(values)
        self.calls = []
        self._i = 0

    def uniform(self, a, b):
        self.calls.append((a, b))
        value = self.values[self._i % len(self.values)]
        self._i += 1
        return value


class StepClock:
    """Clock that advances one second per call."""

    def __init__(self, start=datetime(2025, 1, 1, tzinfo=UTC)):
        self.now = start

    def __call__(self):
        self.now = self.now + timedelta(seconds=1)
        return self.now


@pytest.fixture
def flashcards():
    return [
        Flashcard(question="Capital of France?", answer="Paris"),
        Flashcard(question="Largest planet?", answer="Jupiter"),
        Flashcard(question="Process plants use to make food?", answer="Photosynthesis"),
    ]


@pytest.fixture
def stub_random():
    return StubRandom()


@pytest.fixture
def make_random():
    return StubRandom


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config/logs
    monkeypatch.setenv("HOME", str(home))
    for var in ("UNIBRAIN_DECK_PATH", "UNIBRAIN_SEED", "UNIBRAIN_SERVER_PORT"):
        monkeypatch.delenv(var, raising=False)
    return home
