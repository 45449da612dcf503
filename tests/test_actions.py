import pytest

from basketball_fusion.analytics.pose import ActionDetector, count_extrema, wrist_raised
from basketball_fusion.core.models import EventType, ShotType

from conftest import ball, bundle, frame, person, pose, score_event, shot_event

PASSER = person(200, 400, "teamA", "4")
RECEIVER = person(300, 400, "teamA", "9")


@pytest.fixture
def detector(settings):
    return ActionDetector(settings)


def test_count_extrema():
    assert count_extrema([0, 1, 0, 1, 0]) == 3
    assert count_extrema([1, 2, 3, 4]) == 0
    assert count_extrema([1, 2]) == 0


def test_wrist_raised_needs_confident_keypoint():
    raised = pose(100, 400, overrides={"left_wrist": (90, 340)})
    assert wrist_raised(raised, "left", 30)
    assert not wrist_raised(raised, "right", 30)
    hidden = pose(100, 400, overrides={"left_wrist": (90, 340, 0.2)})
    assert not wrist_raised(hidden, "left", 30)


class TestBlocks:
    def test_defender_with_raised_arm_near_shooter(self, detector):
        defender = pose(700, 400, "teamB", "15", overrides={"right_wrist": (710, 340)})
        [block] = detector.detect_blocks([shot_event(5.0)], [frame(5.0, [defender])], [])
        assert block.type is EventType.BLOCK
        assert block.team_id == "teamB"
        assert block.player_id == "15"
        assert block.confidence == pytest.approx(0.65)

    def test_teammate_or_distant_defender_ignored(self, detector):
        teammate = pose(700, 400, "teamA", overrides={"right_wrist": (710, 340)})
        far = pose(900, 400, "teamB", overrides={"right_wrist": (910, 340)})
        assert detector.detect_blocks([shot_event(5.0)], [frame(5.0, [teammate, far])], []) == []


class TestPassesAndAssists:
    def frames(self, gap=0.5):
        balls = [frame(0.0, [ball(200, 400)]), frame(gap, [ball(300, 400)])]
        people = [frame(0.0, [PASSER, RECEIVER]), frame(gap, [PASSER, RECEIVER])]
        return balls, people

    def test_ball_between_teammates_is_pass(self, detector):
        [pass_event] = detector.detect_passes(*self.frames())
        assert pass_event.type is EventType.PASS
        assert pass_event.team_id == "teamA"
        assert pass_event.player_id == "4"
        assert pass_event.timestamp == 0.5
        assert pass_event.confidence == pytest.approx(0.6)

    def test_slow_transfer_is_not_pass(self, detector):
        assert detector.detect_passes(*self.frames(gap=2.5)) == []

    def test_assist_links_latest_pass_to_score(self, detector):
        passes = detector.detect_passes(*self.frames()) + detector.detect_passes(*self.frames(gap=1.0))
        [assist] = detector.detect_assists(passes, [score_event(1.5, "teamA")])

        assert assist.type is EventType.ASSIST
        assert assist.timestamp == 1.0
        assert assist.player_id == "4"
        assert assist.confidence == pytest.approx(0.7 * 0.7)
        assert assist.source == "event-correlation"

    def test_no_assist_outside_window_or_other_team(self, detector):
        passes = detector.detect_passes(*self.frames())
        scores = [score_event(2.5, "teamA"), score_event(1.0, "teamB")]
        assert detector.detect_assists(passes, scores) == []


class TestDunksAndLayups:
    def test_dunk_near_rim(self, detector):
        dunker = pose(640, 150, "teamA", "23", overrides={"right_wrist": (650, 50)})
        [dunk] = detector.detect_dunks([shot_event(7.0, position=(640.0, 150.0))], [frame(7.0, [dunker])])
        assert dunk.type is EventType.DUNK
        assert dunk.player_id == "23"
        assert dunk.confidence == pytest.approx(0.75)

    def test_no_dunk_far_from_rim(self, detector):
        jumper = pose(640, 400, "teamA", overrides={"right_wrist": (650, 280)})
        assert detector.detect_dunks([shot_event(7.0)], [frame(7.0, [jumper])]) == []

    def test_layup_from_rising_hand(self, detector):
        frames = [frame(2.8, [pose(640, 250, "teamA")]),
                  frame(3.0, [pose(640, 250, "teamA", overrides={"right_wrist": (650, 230)})])]
        [layup] = detector.detect_layups([shot_event(3.0, position=(640.0, 250.0))], frames)
        assert layup.type is EventType.LAYUP
        assert layup.confidence == pytest.approx(0.7)

    def test_no_layup_without_rise(self, detector):
        frames = [frame(2.8, [pose(640, 250, "teamA")]), frame(3.0, [pose(640, 250, "teamA")])]
        assert detector.detect_layups([shot_event(3.0)], frames) == []


class TestDribbles:
    def test_bouncing_ball_next_to_player(self, detector):
        balls = [frame(i / 10, [ball(210, 400 if i % 2 else 420)]) for i in range(15)]
        people = [frame(i / 10, [PASSER]) for i in range(15)]
        [dribble] = detector.detect_dribbles(balls, people)

        assert dribble.type is EventType.DRIBBLE
        assert dribble.player_id == "4"
        assert dribble.timestamp == pytest.approx(0.9)
        assert dribble.confidence == pytest.approx(0.6)

    def test_untagged_holder_or_still_ball(self, detector):
        bouncing = [frame(i / 10, [ball(210, 400 if i % 2 else 420)]) for i in range(12)]
        untagged = [frame(i / 10, [person(200, 400, None)]) for i in range(12)]
        assert detector.detect_dribbles(bouncing, untagged) == []

        still = [frame(i / 10, [ball(210, 410)]) for i in range(12)]
        assert detector.detect_dribbles(still, [frame(i / 10, [PASSER]) for i in range(12)]) == []


class TestFoulShots:
    def signals(self, defender_x=1000):
        people = [frame(10.0, [person(640, 400, "teamA", "30"), person(defender_x, 400, "teamB")])]
        balls = [frame(t, [ball(645, 400)]) for t in (9.4, 9.5, 9.6)]
        return people, balls

    def test_isolated_shooter_with_still_ball(self, detector):
        people, balls = self.signals()
        [foul_shot] = detector.detect_foul_shots([shot_event(10.0)], people, balls)
        assert foul_shot.type is EventType.FOUL_SHOT
        assert foul_shot.shot_type is ShotType.ONE_POINT
        assert foul_shot.player_id == "30"
        assert foul_shot.confidence == pytest.approx(0.55)
        assert foul_shot.source == "isolation-heuristic"

    def test_defender_close_by(self, detector):
        people, balls = self.signals(defender_x=700)
        assert detector.detect_foul_shots([shot_event(10.0)], people, balls) == []

    def test_moving_ball(self, detector):
        people, _ = self.signals()
        balls = [frame(9.4, [ball(645, 400)]), frame(9.6, [ball(645, 430)])]
        assert detector.detect_foul_shots([shot_event(10.0)], people, balls) == []

    def test_tag_foul_shots(self, detector):
        people, balls = self.signals()
        shots = [shot_event(10.0, shot_type=ShotType.THREE_POINT), shot_event(20.0)]
        foul_shots = detector.detect_foul_shots(shots, people, balls)
        tagged = ActionDetector.tag_foul_shots(shots, foul_shots)
        assert [s.shot_type for s in tagged] == [ShotType.ONE_POINT, None]


def test_detect_all_collects_every_rule(detector):
    balls = [frame(0.0, [ball(200, 400)]), frame(0.5, [ball(300, 400)])]
    people = [frame(0.0, [PASSER, RECEIVER]), frame(0.5, [PASSER, RECEIVER])]
    signals = bundle(ball_frames=balls, person_frames=people)
    actions = detector.detect([], [score_event(1.0, "teamA")], signals)
    assert sorted(a.type.value for a in actions) == ["assist", "pass"]
