"""
Missed shot inference
"""

from typing import List, Optional, Sequence

from basketball_fusion.analytics.confidence import scaled
from basketball_fusion.analytics.events.detector import EventDetector
from basketball_fusion.config import FusionSettings
from basketball_fusion.core.interfaces import EventRule
from basketball_fusion.core.models import EventType, GameEvent, SignalBundle

MISSED_SHOT_FACTOR = 0.85


def has_follow_up_score(shot: GameEvent, score_events: Sequence[GameEvent], window: float) -> bool:
    """True when the shooting team scores in (t, t + window]"""
    return any(
        score.type is EventType.SCORE
        and score.team_id == shot.team_id
        and shot.timestamp < score.timestamp <= shot.timestamp + window
        for score in score_events
    )


class MissedShotDetector(EventDetector, EventRule):
    """A shot attempt without a same-team score shortly after is a miss"""

    stage = "missed_shots"

    def __init__(self, settings: Optional[FusionSettings] = None):
        super().__init__(settings)

    def detect(self, shot_events: List[GameEvent], score_events: List[GameEvent],
               signals: Optional[SignalBundle] = None) -> List[GameEvent]:
        self.reset()
        window = self.settings.missed_shot_window
        missed = []

        for shot in sorted(shot_events, key=lambda e: e.timestamp):
            if shot.type is not EventType.SHOT_ATTEMPT:
                continue
            if has_follow_up_score(shot, score_events, window):
                continue
            missed.append(GameEvent(
                type=EventType.MISSED_SHOT,
                team_id=shot.team_id,
                player_id=shot.player_id,
                timestamp=shot.timestamp,
                confidence=scaled(shot.confidence, MISSED_SHOT_FACTOR),
                source="inference",
                shot_type=shot.shot_type,
                notes=f"No {shot.team_id} score within {window:.1f}s of shot attempt",
                position=shot.position,
            ))

        self.logger.info(f"Inferred {len(missed)} missed shots from {len(shot_events)} attempts")
        return missed
