"""
Turnover and steal detection from possession changes
"""

from typing import List, Optional, Sequence

from basketball_fusion.analytics.events.detector import EventDetector
from basketball_fusion.analytics.possession.tracker import PossessionChange, PossessionTracker
from basketball_fusion.config import FusionSettings
from basketball_fusion.core.interfaces import EventRule
from basketball_fusion.core.models import EventType, GameEvent, SignalBundle, clamp_confidence

TURNOVER_CONFIDENCE = 0.65
STEAL_SUDDENNESS_BONUS = 0.1


class TurnoverDetector(EventDetector, EventRule):
    """Possession changes between teams; inferred from game flow when the ball is rarely seen"""

    stage = "turnovers"

    def __init__(self, settings: Optional[FusionSettings] = None,
                 tracker: Optional[PossessionTracker] = None):
        super().__init__(settings)
        self.tracker = tracker or PossessionTracker(self.settings)

    def detect(self, shot_events: List[GameEvent], score_events: List[GameEvent],
               signals: SignalBundle) -> List[GameEvent]:
        self.reset()
        ball_frames = signals.ball_frames_with_detections
        if ball_frames < self.settings.min_ball_frames:
            self._record_fallback(f"ball seen in only {ball_frames} frames",
                                  "game-flow turnover inference")
            events = self.infer_from_game_flow(shot_events, score_events)
        else:
            samples = self.tracker.track(signals.ball_frames, signals.person_frames)
            events = [self._change_event(c) for c in PossessionTracker.team_changes(samples)]

        self.logger.info(f"Detected {len(events)} turnovers/steals")
        return events

    def _change_event(self, change: PossessionChange) -> GameEvent:
        lost, gained = change.previous, change.current
        if change.gap < self.settings.steal_window:
            suddenness = 1.0 - change.gap / self.settings.steal_window
            return GameEvent(
                type=EventType.STEAL,
                team_id=gained.team_id,
                player_id=gained.player_id,
                timestamp=change.timestamp,
                confidence=clamp_confidence(TURNOVER_CONFIDENCE + STEAL_SUDDENNESS_BONUS * suddenness),
                source="possession-heuristic",
                notes=f"Sudden possession change from {lost.team_id} ({change.gap:.2f}s)",
                position=gained.position,
            )
        return GameEvent(
            type=EventType.TURNOVER,
            team_id=lost.team_id,
            player_id=lost.player_id,
            timestamp=change.timestamp,
            confidence=TURNOVER_CONFIDENCE,
            source="possession-heuristic",
            notes=f"Possession lost to {gained.team_id} after {change.gap:.2f}s",
            position=lost.position,
        )

    def infer_from_game_flow(self, shot_events: Sequence[GameEvent],
                             score_events: Sequence[GameEvent]) -> List[GameEvent]:
        """
        A miss by one team followed by the other team's next shot implies a possession loss

        The next shot must come game_flow_min_gap..game_flow_max_gap seconds
        after the miss with no score in between. The turnover is placed
        halfway between the two.
        """
        attempts = sorted((e for e in shot_events if e.type is EventType.SHOT_ATTEMPT),
                          key=lambda e: e.timestamp)
        misses = sorted((e for e in shot_events if e.type is EventType.MISSED_SHOT),
                        key=lambda e: e.timestamp)
        scores = [e for e in score_events if e.type is EventType.SCORE]

        events = []
        for miss in misses:
            following = next((s for s in attempts if s.timestamp > miss.timestamp), None)
            if following is None or following.team_id == miss.team_id:
                continue

            gap = following.timestamp - miss.timestamp
            if not self.settings.game_flow_min_gap <= gap <= self.settings.game_flow_max_gap:
                continue
            if any(miss.timestamp < s.timestamp < following.timestamp for s in scores):
                continue

            events.append(GameEvent(
                type=EventType.TURNOVER,
                team_id=miss.team_id,
                timestamp=miss.timestamp + gap / 2,
                confidence=self.settings.inferred_turnover_confidence,
                source="game-flow-inference",
                notes=f"Inferred: {miss.team_id} missed, {following.team_id} shot {gap:.1f}s later",
            ))
        return events
