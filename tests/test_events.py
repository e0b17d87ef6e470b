from hadal.recording import (
    AssessmentCompletedEvent,
    AutoSubmitEvent,
    ErrorOccurredEvent,
    EventType,
    SessionEventBus,
    SessionMetrics,
    SilenceClearedEvent,
    SilenceWarningEvent,
    StateChangedEvent,
    TranscriptUpdatedEvent,
)


def test_subscribers_receive_matching_events(bus):
    received = []
    bus.subscribe(EventType.TRANSCRIPT_UPDATED, received.append)
    bus.emit(TranscriptUpdatedEvent("s1", 1.0, "hello", "hello"))
    bus.emit(StateChangedEvent("s1", 1.0, "recording", "idle"))
    assert [e.event_type for e in received] == [EventType.TRANSCRIPT_UPDATED]
    assert received[0].data == {"text": "hello", "segment": "hello"}


def test_failing_handler_does_not_block_others(bus):
    received = []

    def broken(event):
        raise RuntimeError("handler bug")

    bus.subscribe(EventType.AUTO_SUBMIT, broken)
    bus.subscribe(EventType.AUTO_SUBMIT, received.append)
    bus.subscribe_all(broken)
    bus.subscribe_all(received.append)
    bus.emit(AutoSubmitEvent("s1", 2.0, "silence", 39))
    assert len(received) == 2


def test_unsubscribe_and_clear(bus):
    received = []
    bus.subscribe(EventType.ERROR_OCCURRED, received.append)
    bus.unsubscribe(EventType.ERROR_OCCURRED, received.append)
    # unknown handler is ignored
    bus.unsubscribe(EventType.ERROR_OCCURRED, received.append)
    bus.emit(ErrorOccurredEvent("s1", 1.0, "RuntimeError", "boom", "transcription"))
    assert received == []

    bus.subscribe_all(received.append)
    bus.clear_handlers()
    bus.emit(ErrorOccurredEvent("s1", 1.0, "RuntimeError", "boom", "transcription"))
    assert received == []


def test_metrics_count_one_warning_per_countdown():
    metrics = SessionMetrics()
    bus = SessionEventBus()
    bus.subscribe_all(metrics.handle_event)

    bus.emit(StateChangedEvent("s1", 0.0, "recording", "idle"))
    bus.emit(TranscriptUpdatedEvent("s1", 1.0, "hi", "hi"))
    for remaining in (3, 2):
        bus.emit(SilenceWarningEvent("s1", 2.0, remaining))
    bus.emit(SilenceClearedEvent("s1", 3.0, "speech"))
    for remaining in (3, 2, 1):
        bus.emit(SilenceWarningEvent("s1", 4.0, remaining))
    bus.emit(AutoSubmitEvent("s1", 5.0, "silence", 40))
    bus.emit(StateChangedEvent("s1", 5.0, "processing", "recording"))
    bus.emit(StateChangedEvent("s1", 5.0, "recorded", "processing"))
    bus.emit(AssessmentCompletedEvent("s1", 6.0, 1, 73, True, "primary"))
    bus.emit(StateChangedEvent("s2", 7.0, "failed", "idle"))
    bus.emit(ErrorOccurredEvent("s2", 7.0, "DeviceUnavailable", "denied", "capture"))

    assert metrics.get_metrics() == {
        "sessions_started": 1,
        "sessions_recorded": 1,
        "sessions_failed": 1,
        "transcript_segments": 1,
        "silence_warnings": 2,
        "auto_submits": 1,
        "assessments_completed": 1,
        "assessments_passed": 1,
        "errors_occurred": 1,
    }

    metrics.reset()
    assert set(metrics.get_metrics().values()) == {0}


def test_controller_events_feed_metrics(controller, bus, clock, level1):
    metrics = SessionMetrics()
    bus.subscribe_all(metrics.handle_event)
    controller.start(level1)
    for _ in range(40):
        clock.advance(1)
        if controller.tick() is not None:
            break
    snapshot = metrics.get_metrics()
    assert snapshot["sessions_started"] == 1
    assert snapshot["sessions_recorded"] == 1
    assert snapshot["silence_warnings"] == 1
    assert snapshot["auto_submits"] == 1
