"""Unit tests for EventBusAdapter, EventPublisher and the Orchestrator wiring."""

import asyncio
import threading
import pytest
from pubsub import pub

from venkyai.events import EventKind, EventPublisher
from venkyai.models.conversation import ConversationItem
from venkyai.models.session import SessionStatus
from venkyai.models.transcript import TranscriptRole
from venkyai.services import Orchestrator, SessionPhase


def publish(kind, payload=None):
    pub.sendMessage(kind.topic, payload=payload)


@pytest.mark.unit
class TestEventRouting:

    def test_live_session_scenario(self, mock_backend):
        orchestrator = Orchestrator(mock_backend)

        async def scenario():
            async with orchestrator:
                session = await orchestrator.controller.start_session("Sync", "meeting", "")
                assert session.status is SessionStatus.ACTIVE
                assert orchestrator.ingestor.transcript == []

                publish(EventKind.TRANSCRIPTION_CHUNK, "hello")
                transcript = orchestrator.ingestor.transcript
                assert [(e.role, e.content) for e in transcript] == [(TranscriptRole.TRANSCRIPTION, "hello")]

                publish(EventKind.GENERATION_START)
                assert orchestrator.aggregator.buffer == ""
                publish(EventKind.GENERATION_TOKEN, "Hi")
                publish(EventKind.GENERATION_TOKEN, " there")
                assert orchestrator.aggregator.buffer == "Hi there"
                publish(EventKind.GENERATION_END, "Hi there")

                assert orchestrator.aggregator.conversation == [ConversationItem.assistant("Hi there")]
                assert orchestrator.aggregator.buffer == ""
                await asyncio.sleep(0.01)

        asyncio.run(scenario())

        mock_backend.add_transcript_entry.assert_awaited_once_with("transcription", "hello")

    def test_auto_start_event_adopts_session(self, mock_backend):
        orchestrator = Orchestrator(mock_backend)

        async def scenario():
            async with orchestrator:
                publish(EventKind.SESSION_AUTO_STARTED, {"id": "s1", "title": "Standup"})
                return orchestrator.snapshot()

        snapshot = asyncio.run(scenario())

        assert snapshot.session.id == "s1"
        assert snapshot.transcript == []
        assert snapshot.is_recording is True
        assert snapshot.is_capturing is True
        assert snapshot.phase is SessionPhase.AUTO_ADOPTED
        mock_backend.start_audio_capture.assert_not_called()
        mock_backend.capture_screen.assert_not_called()

    def test_double_generation_start_discards_partial(self, mock_backend):
        orchestrator = Orchestrator(mock_backend)

        async def scenario():
            async with orchestrator:
                publish(EventKind.GENERATION_START)
                publish(EventKind.GENERATION_TOKEN, "first partial")
                publish(EventKind.GENERATION_START)
                return orchestrator.snapshot()

        snapshot = asyncio.run(scenario())

        assert snapshot.streaming_text == ""
        assert snapshot.is_streaming is True
        assert snapshot.conversation == []

    def test_visibility_and_meeting_events(self, mock_backend):
        orchestrator = Orchestrator(mock_backend)

        async def scenario():
            async with orchestrator:
                publish(EventKind.VISIBILITY_CHANGE, False)
                publish(EventKind.MEETING_DETECTED, "Zoom Meeting")
                return orchestrator.snapshot()

        snapshot = asyncio.run(scenario())

        assert snapshot.overlay_visible is False
        assert snapshot.session is None
        assert snapshot.conversation == []

    def test_live_suggestion_event(self, mock_backend):
        orchestrator = Orchestrator(mock_backend, silence_sentinel="[SILENCE]")

        async def scenario():
            async with orchestrator:
                publish(EventKind.LIVE_SUGGESTION, "Ask about budget")
                publish(EventKind.LIVE_SUGGESTION, "[SILENCE]")
                return orchestrator.snapshot()

        snapshot = asyncio.run(scenario())

        assert snapshot.conversation == [ConversationItem.assistant("Ask about budget")]

    @pytest.mark.parametrize("kind,payload", [
        (EventKind.GENERATION_TOKEN, 42),
        (EventKind.GENERATION_END, None),
        (EventKind.VISIBILITY_CHANGE, "yes"),
        (EventKind.SESSION_AUTO_STARTED, {"title": "No id"}),
        (EventKind.SESSION_AUTO_STARTED, None),
        (EventKind.TRANSCRIPTION_CHUNK, None),
    ])
    def test_malformed_payload_is_ignored(self, mock_backend, kind, payload):
        orchestrator = Orchestrator(mock_backend)

        async def scenario():
            async with orchestrator:
                publish(EventKind.GENERATION_START)
                before = orchestrator.snapshot()
                publish(kind, payload)
                after = orchestrator.snapshot()
                assert orchestrator.event_bus.rejected == 1
                return before, after

        before, after = asyncio.run(scenario())

        assert before == after


@pytest.mark.unit
class TestSubscriptionLifecycle:

    def test_subscribe_only_once(self, components):
        from venkyai.services import EventBusAdapter
        adapter = EventBusAdapter(components["store"], components["aggregator"],
                                  components["ingestor"], components["controller"])

        assert adapter.subscribe() is True
        assert adapter.subscribe() is False

        publish(EventKind.LIVE_SUGGESTION, "once")
        assert len(components["aggregator"].conversation) == 1
        adapter.teardown()

    def test_no_delivery_after_teardown(self, mock_backend):
        orchestrator = Orchestrator(mock_backend)

        async def scenario():
            await orchestrator.__aenter__()
            await orchestrator.close()
            publish(EventKind.LIVE_SUGGESTION, "too late")
            publish(EventKind.VISIBILITY_CHANGE, False)

        asyncio.run(scenario())

        assert orchestrator.aggregator.conversation == []
        assert orchestrator.store.overlay_visible is True
        assert orchestrator.event_bus.subscribe() is False

    def test_marshalled_event_dropped_after_teardown(self, mock_backend):
        orchestrator = Orchestrator(mock_backend)

        async def scenario():
            orchestrator.start()
            publisher = EventPublisher(asyncio.get_running_loop())
            worker = threading.Thread(
                target=publisher.publish, args=(EventKind.LIVE_SUGGESTION, "queued"))
            worker.start()
            worker.join()
            # Delivery is queued on the loop; tear down before it runs
            await orchestrator.close()
            await asyncio.sleep(0.01)

        asyncio.run(scenario())

        assert orchestrator.aggregator.conversation == []

    def test_close_stops_capture_timer(self, mock_backend):
        orchestrator = Orchestrator(mock_backend, capture_interval_ms=10)

        async def scenario():
            async with orchestrator:
                orchestrator.controller.start_capture()
                assert orchestrator.scheduler.is_running
            assert not orchestrator.scheduler.is_running

        asyncio.run(scenario())


@pytest.mark.unit
class TestEventPublisher:

    def test_publish_from_other_thread_is_delivered_on_loop(self, mock_backend):
        orchestrator = Orchestrator(mock_backend)
        delivered_on = []

        async def scenario():
            async with orchestrator:
                loop_thread = threading.get_ident()
                original = orchestrator.aggregator.on_live_suggestion

                def recording_handler(text):
                    delivered_on.append(threading.get_ident() == loop_thread)
                    original(text)

                orchestrator.event_bus._routes[EventKind.LIVE_SUGGESTION] = (
                    recording_handler, orchestrator.event_bus._routes[EventKind.LIVE_SUGGESTION][1])

                publisher = EventPublisher(asyncio.get_running_loop())
                worker = threading.Thread(
                    target=publisher.publish, args=(EventKind.LIVE_SUGGESTION, "from a thread"))
                worker.start()
                worker.join()
                await asyncio.sleep(0.01)

        asyncio.run(scenario())

        assert delivered_on == [True]
        assert orchestrator.aggregator.conversation == [ConversationItem.assistant("from a thread")]

    def test_unbound_publisher_delivers_inline(self, components):
        from venkyai.services import EventBusAdapter
        adapter = EventBusAdapter(components["store"], components["aggregator"],
                                  components["ingestor"], components["controller"])
        adapter.subscribe()

        EventPublisher().publish(EventKind.VISIBILITY_CHANGE, False)

        assert components["store"].overlay_visible is False
        adapter.teardown()
