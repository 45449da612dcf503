import pytest

from basketball_fusion.analytics.smoothing import (
    clamp_to_clip, filter_low_confidence, finalize_events, merge_sources, smooth_events
)
from basketball_fusion.core.models import EventType, GameEvent

from conftest import shot_event


def event(kind, timestamp, confidence=0.7, team_id="teamA", source="ball-tracking", **kwargs):
    return GameEvent(kind, team_id, timestamp, confidence, source, **kwargs)


class TestSmoothing:
    def test_near_duplicate_shots_merge(self):
        first = shot_event(1.0, confidence=0.6, notes="first look")
        second = shot_event(1.3, confidence=0.55, player_id="8")
        [merged] = smooth_events([first, second])

        assert merged.type is EventType.SHOT_ATTEMPT
        assert merged.timestamp == pytest.approx(1.15)
        assert merged.confidence == pytest.approx(0.575)
        assert merged.player_id == "8"
        assert merged.notes == "Merged 2 similar detections. first look"
        assert merged.id == "smoothed-" + first.id

    def test_different_team_or_type_kept_apart(self):
        events = [shot_event(1.0), shot_event(1.2, team_id="teamB"),
                  event(EventType.PASS, 1.1), shot_event(2.5)]
        assert smooth_events(events) == events

    def test_sources_are_unioned_in_order(self):
        a = event(EventType.PASS, 3.0, source="ball-tracking")
        b = event(EventType.PASS, 3.4, source="pose-analysis+ball-tracking")
        [merged] = smooth_events([a, b])
        assert merged.source == "ball-tracking+pose-analysis"
        assert merge_sources([b, a]) == "pose-analysis+ball-tracking"

    def test_idempotent(self):
        events = [shot_event(t, confidence=0.5 + t / 20) for t in (0.0, 0.8, 1.6, 2.4, 3.2, 5.0)]
        once = smooth_events(events)
        assert smooth_events(once) == once

    def test_no_survivors_within_window(self):
        events = [shot_event(t) for t in (0.0, 0.8, 1.6, 2.4, 3.2)]
        smoothed = sorted(e.timestamp for e in smooth_events(events))
        assert all(b - a > 1.0 for a, b in zip(smoothed, smoothed[1:]))

    def test_output_follows_input_order(self):
        events = [event(EventType.PASS, 5.0), shot_event(1.0), event(EventType.PASS, 5.5)]
        smoothed = smooth_events(events)
        assert [e.type for e in smoothed] == [EventType.PASS, EventType.SHOT_ATTEMPT]
        assert smoothed[0].timestamp == pytest.approx(5.25)

    def test_smoothed_id_not_prefixed_twice(self):
        [merged] = smooth_events([shot_event(1.0), shot_event(1.5)])
        [again] = smooth_events([merged, shot_event(1.6)])
        assert again.id.count("smoothed-") == 1

    def test_empty(self):
        assert smooth_events([]) == []


def test_filter_keeps_events_at_floor():
    events = [shot_event(1.0, confidence=0.3), shot_event(2.0, confidence=0.29), shot_event(3.0, confidence=0.9)]
    assert [e.timestamp for e in filter_low_confidence(events, 0.3)] == [1.0, 3.0]
    assert filter_low_confidence(events, 0.0) == events


def test_finalize_sorts_and_clamps():
    events = [shot_event(12.0), shot_event(1.0), event(EventType.PASS, 1.0)]
    finalized = finalize_events(events, duration=10.0)
    assert [e.timestamp for e in finalized] == [1.0, 1.0, 10.0]
    assert finalized[0].type is EventType.SHOT_ATTEMPT
    assert finalize_events(events) == sorted(events, key=lambda e: e.timestamp)


def test_clamped_events_merge_when_smoothed():
    events = clamp_to_clip([shot_event(6.0), shot_event(8.0), shot_event(2.0)], duration=5.0)
    assert [e.timestamp for e in events] == [5.0, 5.0, 2.0]
    assert [e.timestamp for e in smooth_events(events)] == [5.0, 2.0]
    assert clamp_to_clip(events) == events
