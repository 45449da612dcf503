"""
Rebound detection after missed shots
"""

from typing import List, Optional, Sequence, Tuple

from basketball_fusion.analytics.attribution import find_player_id, is_known_team
from basketball_fusion.analytics.confidence import Signal, combine
from basketball_fusion.analytics.events.detector import EventDetector
from basketball_fusion.config import FusionSettings
from basketball_fusion.core.interfaces import EventRule
from basketball_fusion.core.models import (
    BallFrame, EventType, GameEvent, PersonDetection, PersonFrame, SignalBundle, TeamAssignment
)
from basketball_fusion.utils.frames import frames_between, nearest_frame
from basketball_fusion.utils.geometry import nearest

# Ball scan starts shortly after the shot
REBOUND_SCAN_DELAY = 0.2
# Hoop-presence fallback window after the shot
INFERRED_WINDOW = (0.3, 1.5)
UNKNOWN_TEAM_CERTAINTY = 0.5


def rebound_team(rebounder: PersonDetection, shooting_team: str,
                 teams: TeamAssignment) -> Tuple[str, bool, bool]:
    """
    Team credited with a rebound

    Returns:
        (team id, offensive, team known); an untagged rebounder is credited to
        the opponent of the shooting team when one is known
    """
    if is_known_team(rebounder.team_id):
        return rebounder.team_id, rebounder.team_id == shooting_team, True
    opponent = teams.opponent_of(shooting_team)
    if opponent is not None:
        return opponent, False, False
    return shooting_team, True, False


class ReboundDetector(EventDetector, EventRule):
    """Classify who secures the ball after a miss, with a hoop-presence fallback"""

    stage = "rebounds"

    def __init__(self, settings: Optional[FusionSettings] = None):
        super().__init__(settings)

    def detect(self, shot_events: List[GameEvent], score_events: List[GameEvent],
               signals: SignalBundle) -> List[GameEvent]:
        """
        Detect rebounds following missed shots

        Args:
            shot_events: Events containing missed_shot records
            score_events: Unused; made shots have no rebound
            signals: Ball and person streams

        Returns:
            offensive_rebound / defensive_rebound events
        """
        self.reset()
        misses = sorted((e for e in shot_events if e.type is EventType.MISSED_SHOT),
                        key=lambda e: e.timestamp)
        if not misses:
            return []

        ball_frames = signals.ball_frames_with_detections
        sparse = ball_frames < self.settings.min_ball_frames
        if sparse:
            self._record_fallback(f"ball seen in only {ball_frames} frames",
                                  "hoop-region presence rebound inference")

        events = []
        for miss in misses:
            if sparse:
                event = self.infer_from_presence(miss, signals.person_frames, signals.team_assignment)
            else:
                event = self.find_rebound(miss, signals.ball_frames, signals.person_frames,
                                          signals.team_assignment)
            if event is not None:
                events.append(event)

        self.logger.info(f"Detected {len(events)} rebounds after {len(misses)} missed shots")
        return events

    def find_rebound(self, miss: GameEvent, ball_frames: Sequence[BallFrame],
                     person_frames: Sequence[PersonFrame],
                     teams: TeamAssignment) -> Optional[GameEvent]:
        """First ball frame after the miss with a player within reach of the ball"""
        start = miss.timestamp + REBOUND_SCAN_DELAY
        end = miss.timestamp + self.settings.rebound_window
        proximity = self.settings.rebound_proximity

        for ball_frame in frames_between(ball_frames, start, end):
            if ball_frame.is_empty:
                continue
            person_frame = nearest_frame(person_frames, ball_frame.timestamp,
                                         self.settings.frame_match_tolerance)
            if person_frame is None:
                continue

            ball = max(ball_frame.detections, key=lambda b: b.confidence)
            rebounder, distance = nearest(ball.center, person_frame.detections, max_distance=proximity)
            if rebounder is None:
                continue

            team_id, offensive, known = rebound_team(rebounder, miss.team_id, teams)
            confidence = combine([
                Signal("ball-proximity", 1.0 - distance / proximity, self.settings.proximity_weight),
                Signal("team-id", 1.0 if known else UNKNOWN_TEAM_CERTAINTY, self.settings.team_id_weight),
            ], bonus=self.settings.corroboration_bonus, threshold=self.settings.corroboration_threshold)

            player_id = rebounder.player_id or find_player_id(
                ball_frame.timestamp, team_id, person_frames,
                window=self.settings.frame_match_tolerance, anchor=None
            )
            center = rebounder.center
            return GameEvent(
                type=EventType.OFFENSIVE_REBOUND if offensive else EventType.DEFENSIVE_REBOUND,
                team_id=team_id,
                player_id=player_id,
                timestamp=ball_frame.timestamp,
                confidence=confidence,
                source="ball+proximity-heuristic",
                notes=f"Player {distance:.0f}px from ball, {'same' if offensive else 'opposing'} team",
                position=(float(center[0]), float(center[1])),
            )

        return None

    def infer_from_presence(self, miss: GameEvent, person_frames: Sequence[PersonFrame],
                            teams: TeamAssignment) -> Optional[GameEvent]:
        """First person under the hoop after the miss; only when ball data is sparse"""
        start, end = (miss.timestamp + offset for offset in INFERRED_WINDOW)
        for frame in frames_between(person_frames, start, end, include_end=False):
            for person in frame.detections:
                _, center_y = frame.normalize(person.center)
                if center_y > self.settings.hoop_region_max_y:
                    continue

                team_id, offensive, _ = rebound_team(person, miss.team_id, teams)
                center = person.center
                return GameEvent(
                    type=EventType.OFFENSIVE_REBOUND if offensive else EventType.DEFENSIVE_REBOUND,
                    team_id=team_id,
                    player_id=person.player_id,
                    timestamp=frame.timestamp,
                    confidence=self.settings.inferred_rebound_confidence,
                    source="inferred-hoop-presence",
                    notes="Inferred from player presence near the hoop, ball not tracked",
                    position=(float(center[0]), float(center[1])),
                )
        return None
