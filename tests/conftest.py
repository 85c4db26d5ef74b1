import pytest

from nvcore.core.event_bus import EventBus


class RecordingSink:
    """Log sink that keeps every (message, severity) pair."""

    def __init__(self):
        self.records = []

    def __call__(self, message, severity):
        self.records.append((message, severity))

    def messages(self, severity=None):
        return [m for m, s in self.records if severity is None or s == severity]


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def bus(sink):
    return EventBus(sink=sink)
