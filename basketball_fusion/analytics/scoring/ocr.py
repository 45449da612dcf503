"""
Scoreboard OCR score detection (broadcast footage)
"""

from typing import List, Optional, Sequence, Tuple

from basketball_fusion.analytics.attribution import find_player_id, vote_team_near_hoop
from basketball_fusion.analytics.confidence import Signal, combine
from basketball_fusion.analytics.events.detector import EventDetector
from basketball_fusion.analytics.scoring.shot_type import infer_shot_type
from basketball_fusion.config import FusionSettings
from basketball_fusion.core.constants import TEAM_A, TEAM_B, UNKNOWN_TEAM
from basketball_fusion.core.interfaces import ScoreStrategy
from basketball_fusion.core.models import (
    EventType, GameEvent, PersonFrame, ScoreReading, SignalBundle, clamp_confidence
)
from basketball_fusion.utils.frames import frames_within

# Attribution confidence when the OCR-indicated team is used
OCR_TEAM_CONFIDENCE = 0.8
NO_VOTES_CONFIDENCE = 0.7
MAX_VOTE_CONFIDENCE = 0.95


class OcrScoreDetector(EventDetector, ScoreStrategy):
    """Turn consecutive scoreboard readings into attributed score events"""

    name = "ocr"
    stage = "scores"

    def __init__(self, settings: Optional[FusionSettings] = None):
        super().__init__(settings)

    def detect_scores(self, shot_events: List[GameEvent], signals: SignalBundle) -> List[GameEvent]:
        self.reset()
        readings = sorted(signals.score_readings, key=lambda r: r.timestamp)
        if len(readings) < 2:
            self.logger.info(f"OCR scoring needs two readings, got {len(readings)}")
            return []

        events = []
        for i in range(1, len(readings)):
            previous, current = readings[i - 1], readings[i]
            following = readings[i + 1] if i + 1 < len(readings) else None

            deltas = [(TEAM_A, current.team_a - previous.team_a),
                      (TEAM_B, current.team_b - previous.team_b)]
            scoring = [(team, delta) for team, delta in deltas if delta > 0]
            if len(scoring) != 1:
                if len(scoring) > 1:
                    self.logger.debug(f"Ambiguous OCR change at {current.timestamp:.2f}s: {deltas}")
                continue

            ocr_team, delta = scoring[0]
            if delta > 3:
                self.logger.debug(f"Implausible OCR jump +{delta} at {current.timestamp:.2f}s, skipped")
                continue

            stable = following is not None and (following.team_a, following.team_b) == (current.team_a, current.team_b)
            events.append(self._score_event(current, ocr_team, delta, stable, shot_events, signals.person_frames))

        self.logger.info(f"Detected {len(events)} scores from {len(readings)} OCR readings")
        return events

    def _score_event(self, reading: ScoreReading, ocr_team: str, delta: int, stable: bool,
                     shot_events: Sequence[GameEvent], person_frames: Sequence[PersonFrame]) -> GameEvent:
        team_id, attribution_confidence = self.attribute_team(reading.timestamp, ocr_team, person_frames)
        estimate = infer_shot_type(delta, reading.timestamp, team_id, shot_events,
                                   self.settings.shot_type_lookback)

        confidence = combine([
            Signal("ocr", reading.confidence, self.settings.ocr_weight),
            Signal("team-attribution", attribution_confidence, self.settings.team_attribution_weight),
        ], bonus=self.settings.corroboration_bonus, threshold=self.settings.corroboration_threshold)
        if stable:
            confidence = clamp_confidence(confidence + self.settings.ocr_stability_bonus)

        player_id = find_player_id(
            reading.timestamp, team_id, person_frames,
            window=self.settings.score_attribution_window,
            anchor=(0.5, self.settings.hoop_region_max_y / 2)
        )

        return GameEvent(
            type=EventType.SCORE,
            team_id=team_id,
            player_id=player_id,
            timestamp=reading.timestamp,
            confidence=confidence,
            source="ocr",
            score_delta=delta,
            shot_type=estimate.shot_type,
            notes=(f"Scoreboard OCR +{delta} ({estimate.shot_type.value} from {estimate.basis}, "
                   f"{estimate.confidence:.0%}); attribution {attribution_confidence:.0%}"
                   f"{', stable reading' if stable else ''}"),
        )

    def attribute_team(self, timestamp: float, ocr_team: str,
                       person_frames: Sequence[PersonFrame]) -> Tuple[str, float]:
        """
        Majority vote of persons in the hoop region around a score

        Returns:
            (team id, attribution confidence)
        """
        window = self.settings.score_attribution_window
        if not frames_within(person_frames, timestamp, window):
            return ocr_team, OCR_TEAM_CONFIDENCE

        votes, total = vote_team_near_hoop(timestamp, person_frames, window, self.settings.hoop_region_max_y)
        if total == 0:
            return ocr_team, NO_VOTES_CONFIDENCE

        for team_id, count in sorted(votes.items(), key=lambda kv: (-kv[1], kv[0])):
            if team_id == UNKNOWN_TEAM:
                continue
            share = count / total
            if share >= self.settings.team_majority:
                return team_id, min(share, MAX_VOTE_CONFIDENCE)
            break

        return ocr_team, OCR_TEAM_CONFIDENCE
