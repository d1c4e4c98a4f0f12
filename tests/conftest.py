"""Pytest configuration and fixtures for VenkyAI tests."""

import pytest
import tempfile
import logging
from datetime import datetime
from unittest.mock import MagicMock
from pubsub import pub

from venkyai.backend.base import AbstractAssistantBackend
from venkyai.models.session import Session, SessionPurpose
from venkyai.services import (
    SessionStore,
    StreamAggregator,
    TranscriptionIngestor,
    CaptureScheduler,
    SessionController,
)


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@pytest.fixture(autouse=True)
def isolated_pubsub():
    """Drop every pub/sub listener a test left behind."""
    yield
    pub.unsubAll()


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def sample_session():
    return Session(
        id="s-1",
        title="Sync",
        purpose=SessionPurpose.MEETING,
        start_time=datetime(2026, 10, 17, 9, 30),
    )


@pytest.fixture
def mock_backend(sample_session):
    """Mock backend whose async commands all succeed."""
    backend = MagicMock(spec=AbstractAssistantBackend)
    backend.create_session.return_value = sample_session
    backend.end_session.return_value = None
    backend.start_audio_capture.return_value = None
    backend.stop_audio_capture.return_value = None
    backend.stop_system_audio_capture.return_value = None
    backend.transcribe_audio.return_value = "hello from the mic"
    backend.capture_screen.return_value = None
    backend.stream_chat.return_value = "Hi there"
    backend.add_transcript_entry.return_value = None
    return backend


@pytest.fixture
def components(mock_backend):
    """Store, aggregator, ingestor, scheduler and controller over the mock backend."""
    store = SessionStore()
    aggregator = StreamAggregator()
    ingestor = TranscriptionIngestor(mock_backend, store)
    scheduler = CaptureScheduler(mock_backend, "screen", default_interval_ms=10)
    controller = SessionController(mock_backend, store, aggregator, ingestor, scheduler)
    return {
        "store": store,
        "aggregator": aggregator,
        "ingestor": ingestor,
        "scheduler": scheduler,
        "controller": controller,
    }
