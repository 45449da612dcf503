import math

import numpy as np
import pytest

from basketball_fusion.core.exceptions import InputDataError, InvalidEventError
from basketball_fusion.core.models import (
    BoundingBox, DetectionFrame, EventType, GameEvent, ShotType, SignalBundle, TeamAssignment,
    clamp_confidence
)
from basketball_fusion.utils.geometry import nearest, point_distance

from conftest import box_at, frame, person, pose, two_teams


class TestBoundingBox:
    def test_center_and_extent(self):
        bbox = BoundingBox(10, 20, 40, 100)
        assert np.allclose(bbox.center, [30, 70])
        assert bbox.x2 == 50 and bbox.y2 == 120
        assert bbox.area == 4000

    @pytest.mark.parametrize("values", [
        [math.nan, 0, 10, 10],
        [0, 0, -1, 10],
        [0, math.inf, 10, 10],
    ])
    def test_malformed_geometry_rejected(self, values):
        with pytest.raises(InputDataError):
            BoundingBox.from_xywh(values)

    def test_wrong_arity_rejected(self):
        with pytest.raises(InputDataError):
            BoundingBox.from_xywh([1, 2, 3])

    def test_geometry_helpers(self):
        a, b = box_at(0, 0), box_at(30, 40)
        assert point_distance(a.center, b.center) == pytest.approx(50.0)
        assert BoundingBox(640, 360, 128, 72).as_list() == [640, 360, 128, 72]

    def test_nearest_respects_max_distance(self):
        people = [person(100, 100), person(300, 100)]
        match, distance = nearest((110, 100), people, max_distance=50)
        assert match is people[0]
        assert distance == pytest.approx(10.0)
        assert nearest((200, 400), people, max_distance=50) == (None, float('inf'))


class TestDetectionFrame:
    def test_timestamp_derives_from_fps(self):
        f = DetectionFrame.at(45, 15.0, [person(0, 0)])
        assert f.timestamp == pytest.approx(3.0)
        assert not f.is_empty

    def test_rejects_bad_fps_and_timestamps(self):
        with pytest.raises(InputDataError):
            DetectionFrame.at(1, 0.0)
        with pytest.raises(InputDataError):
            DetectionFrame(0, -1.0)

    def test_normalize(self):
        f = frame(0.0)
        assert f.normalize(np.array([640, 180])) == pytest.approx((0.5, 0.25))


class TestPose:
    def test_keypoint_lookup(self):
        p = pose(100, 200, overrides={"left_wrist": (80, 120, 0.4)})
        wrist = p.keypoint("left_wrist")
        assert (wrist.x, wrist.y, wrist.confidence) == (80, 120, 0.4)
        assert p.keypoint("tail") is None


class TestTeamAssignment:
    def test_nearest_team_and_default(self):
        teams = two_teams()
        assert teams.nearest_team((210, 20, 40)) == "teamA"
        assert teams.nearest_team((250, 250, 250)) == "teamB"
        assert teams.default_team_id == "teamA"
        assert teams.opponent_of("teamA") == "teamB"

    def test_without_clusters(self):
        teams = TeamAssignment()
        assert teams.nearest_team((0, 0, 0)) is None
        assert teams.default_team_id == "teamA"
        assert teams.opponent_of("teamA") is None


class TestGameEvent:
    def test_confidence_is_clamped(self):
        event = GameEvent(EventType.PASS, "teamA", 1.0, 1.7, "ball-tracking")
        assert event.confidence == 1.0
        assert clamp_confidence(-0.2) == 0.0
        assert clamp_confidence(float('nan')) == 0.0

    def test_id_is_deterministic(self):
        a = GameEvent(EventType.STEAL, "teamB", 2.5, 0.7, "possession-heuristic")
        b = GameEvent(EventType.STEAL, "teamB", 2.5, 0.7, "possession-heuristic")
        assert a.id == b.id
        assert a.id.startswith("steal-2500-")

    def test_score_requires_consistent_delta(self):
        with pytest.raises(InvalidEventError):
            GameEvent(EventType.SCORE, "teamA", 1.0, 0.8, "ocr", score_delta=3, shot_type=ShotType.TWO_POINT)
        with pytest.raises(InvalidEventError):
            GameEvent(EventType.SCORE, "teamA", 1.0, 0.8, "ocr", score_delta=4, shot_type=ShotType.THREE_POINT)

    def test_kind_specific_fields(self):
        with pytest.raises(InvalidEventError):
            GameEvent(EventType.ASSIST, "teamA", 1.0, 0.5, "event-correlation", score_delta=2)
        with pytest.raises(InvalidEventError):
            GameEvent(EventType.BLOCK, "teamA", 1.0, 0.5, "pose-analysis", shot_type=ShotType.TWO_POINT)

    def test_requires_team_and_valid_timestamp(self):
        with pytest.raises(InvalidEventError):
            GameEvent(EventType.PASS, "", 1.0, 0.5, "ball-tracking")
        with pytest.raises(InvalidEventError):
            GameEvent(EventType.PASS, "teamA", -0.1, 0.5, "ball-tracking")

    def test_dict_round_trip_keeps_fields(self):
        event = GameEvent(EventType.SCORE, "teamA", 6.0, 0.9, "ocr", player_id="23",
                          score_delta=1, shot_type=ShotType.ONE_POINT, notes="free throw")
        data = event.to_dict()
        assert data["teamId"] == "teamA"
        assert data["shotType"] == "1pt"
        assert GameEvent.from_dict(data) == event

    def test_with_changes_returns_new_event(self):
        event = GameEvent(EventType.SHOT_ATTEMPT, "teamA", 1.0, 0.6, "pose-analysis")
        tagged = event.with_changes(shot_type=ShotType.THREE_POINT)
        assert event.shot_type is None
        assert tagged.shot_type is ShotType.THREE_POINT


class TestSignalBundle:
    def test_clip_duration_falls_back_to_latest_timestamp(self):
        signals = SignalBundle(fps=10, person_frames=[frame(0.0), frame(4.2)])
        assert signals.clip_duration == pytest.approx(4.2)
        assert SignalBundle(fps=10, duration=12.0).clip_duration == 12.0

    def test_rejects_non_positive_fps(self):
        with pytest.raises(InputDataError):
            SignalBundle(fps=0)
