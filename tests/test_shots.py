import pytest

from basketball_fusion.analytics.shots import ShotAttemptDetector
from basketball_fusion.core.models import EventType

from conftest import ball, box_at, bundle, frame, person, pose, shot_candidate


@pytest.fixture
def detector(settings):
    return ShotAttemptDetector(settings)


class TestBallMotion:
    def test_ball_above_and_near_shooter(self, detector):
        frames = [frame(5.0, [ball(640, 330)])]
        assert detector.ball_motion_confidence(5.0, box_at(640, 400), frames) == 0.8

    def test_ball_near_but_below(self, detector):
        frames = [frame(5.2, [ball(650, 450)])]
        assert detector.ball_motion_confidence(5.0, box_at(640, 400), frames) == 0.4

    def test_ball_far_or_outside_window(self, detector):
        frames = [frame(5.0, [ball(900, 300)]), frame(6.0, [ball(640, 330)])]
        assert detector.ball_motion_confidence(5.0, box_at(640, 400), frames) == 0.0


class TestPoseCandidates:
    def test_pose_and_ball_corroborate(self, detector):
        signals = bundle(shot_candidates=[shot_candidate(5.0, confidence=0.9)],
                         ball_frames=[frame(5.0, [ball(640, 330)])])
        [event] = detector.detect(signals)
        assert event.type is EventType.SHOT_ATTEMPT
        assert event.source == "pose+ball-heuristic"
        assert event.confidence == pytest.approx(0.9 * 0.65 + 0.8 * 0.35 + 0.1)
        assert event.position == (640.0, 400.0)
        assert detector.warnings == []

    def test_pose_alone_without_ball_data(self, detector):
        signals = bundle(shot_candidates=[shot_candidate(10.0, confidence=0.95)])
        [event] = detector.detect(signals)
        assert event.source == "pose-analysis"
        assert event.confidence == pytest.approx(0.95 * 0.65)
        assert event.confidence >= 0.3

    def test_weak_candidate_raised_to_floor(self, detector):
        signals = bundle(shot_candidates=[shot_candidate(3.0, confidence=0.2)])
        [event] = detector.detect(signals)
        assert event.confidence == pytest.approx(0.3)

    def test_untagged_candidate_resolved_from_nearby_pose(self, detector):
        signals = bundle(shot_candidates=[shot_candidate(2.0, team_id=None)],
                         pose_frames=[frame(2.0, [pose(650, 400, team_id="teamB")])])
        [event] = detector.detect(signals)
        assert event.team_id == "teamB"

    def test_unresolved_candidate_gets_default_team(self, detector):
        signals = bundle(shot_candidates=[shot_candidate(2.0, team_id=None)],
                         pose_frames=[frame(2.0, [pose(900, 400, team_id="teamB")])])
        [event] = detector.detect(signals)
        assert event.team_id == "teamA"

    def test_candidates_sorted_by_time(self, detector):
        signals = bundle(shot_candidates=[shot_candidate(8.0), shot_candidate(1.0)])
        assert [e.timestamp for e in detector.detect(signals)] == [1.0, 8.0]


class TestDegradedModes:
    def test_ball_trajectory_fallback(self, detector):
        ball_frames = [frame(t / 10, [ball(600, 500 - (40 if t == 5 else 0))]) for t in range(8)]
        person_frames = [frame(0.5, [person(590, 520, team_id="teamB", player_id="7")])]
        signals = bundle(ball_frames=ball_frames, person_frames=person_frames)

        events = detector.detect(signals)
        assert len(events) == 1
        event = events[0]
        assert event.source == "ball-trajectory"
        assert event.timestamp == pytest.approx(0.5)
        assert event.team_id == "teamB"
        assert event.player_id == "7"
        assert event.confidence == pytest.approx(0.5)
        assert [w.fallback for w in detector.warnings] == ["ball-trajectory shot synthesis"]

    def test_person_presence_fallback_round_robin(self, detector):
        players = [person(300, 400, "teamA", "4"), person(900, 400, "teamB", "11")]
        person_frames = [frame(i / 10, players) for i in range(60)]
        signals = bundle(person_frames=person_frames)

        events = detector.detect(signals)
        assert [e.timestamp for e in events] == pytest.approx([1.0, 2.5, 4.0])
        assert [e.team_id for e in events] == ["teamA", "teamB", "teamA"]
        assert all(e.source == "person-presence" for e in events)
        assert all(e.confidence == pytest.approx(0.35) for e in events)
        assert len(detector.warnings) == 1

    def test_no_signals_yields_nothing(self, detector):
        assert detector.detect(bundle()) == []
