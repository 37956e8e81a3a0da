"""Mock implementations for testing."""

from tests.mocks.feed import RecordingNotifier, StaticSnapshotClient
from tests.mocks.websocket import EventRecorder, MockTransport, ScriptedConnector, wait_until


__all__ = [
    "EventRecorder",
    "MockTransport",
    "RecordingNotifier",
    "ScriptedConnector",
    "StaticSnapshotClient",
    "wait_until",
]
