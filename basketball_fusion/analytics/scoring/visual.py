"""
Visual score detection - ball through hoop, for amateur footage without a scoreboard
"""

import zlib
from typing import List, NamedTuple, Optional, Sequence

from basketball_fusion.analytics.events.detector import EventDetector
from basketball_fusion.config import FusionSettings
from basketball_fusion.core.constants import COURT_WIDTH
from basketball_fusion.core.interfaces import ScoreStrategy
from basketball_fusion.core.models import (
    BallFrame, EventType, GameEvent, HoopRegion, PersonFrame, ShotType, SignalBundle
)
from basketball_fusion.utils.frames import nearest_frame, sort_frames

# Shooter this far from the horizontal center (normalized) is taken as a 3pt shot
OUTER_COURT_OFFSET = 0.35
ESTIMATED_SCORE_DELAY = 0.1


class BallPosition(NamedTuple):
    timestamp: float
    x: float
    y: float
    confidence: float


def ball_positions(ball_frames: Sequence[BallFrame]) -> List[BallPosition]:
    """Most confident ball per frame, in time order"""
    positions = []
    for frame in sort_frames(ball_frames):
        if frame.is_empty:
            continue
        ball = max(frame.detections, key=lambda b: b.confidence)
        center = ball.center
        positions.append(BallPosition(frame.timestamp, float(center[0]), float(center[1]), ball.confidence))
    return positions


def find_hoop_crossing(positions: Sequence[BallPosition], hoop: HoopRegion) -> Optional[BallPosition]:
    """First downward step of the ball across the hoop's midline inside its horizontal span"""
    mid_y = hoop.mid_y
    for previous, current in zip(positions, positions[1:]):
        moving_down = current.y > previous.y
        in_x_range = hoop.bbox.x <= current.x <= hoop.bbox.x2
        crossed = previous.y < mid_y <= current.y
        if moving_down and in_x_range and crossed:
            return current
    return None


def estimated_make(timestamp: float, make_rate: float) -> bool:
    """Deterministic pseudo-selection of made shots keyed on the timestamp"""
    bucket = zlib.crc32(f"{timestamp:.3f}".encode("utf-8")) % 100
    return bucket < make_rate * 100


class VisualScoreDetector(EventDetector, ScoreStrategy):
    """Correlate shot attempts with the ball dropping through the hoop"""

    name = "visual"
    stage = "scores"

    def __init__(self, settings: Optional[FusionSettings] = None):
        super().__init__(settings)

    def detect_scores(self, shot_events: List[GameEvent], signals: SignalBundle) -> List[GameEvent]:
        self.reset()
        shots = sorted((e for e in shot_events if e.type is EventType.SHOT_ATTEMPT),
                       key=lambda e: e.timestamp)
        if not shots:
            return []

        positions = ball_positions(signals.ball_frames)
        hoop_frames = [f for f in signals.hoop_frames if not f.is_empty]

        if not positions:
            self._record_fallback("no ball tracking data", "statistical score estimate")
            return self.estimate_scores(shots, signals.clip_duration)
        if not hoop_frames:
            self._record_fallback("no hoop detections", "statistical score estimate")
            return self.estimate_scores(shots, signals.clip_duration)

        events = []
        for shot in shots:
            event = self._score_for_shot(shot, positions, hoop_frames, signals.person_frames)
            if event is not None:
                events.append(event)

        self.logger.info(f"Visual scoring: {len(events)} scores from {len(shots)} shot attempts, "
                         f"{len(positions)} ball frames")
        return events

    def _score_for_shot(self, shot: GameEvent, positions: Sequence[BallPosition],
                        hoop_frames, person_frames: Sequence[PersonFrame]) -> Optional[GameEvent]:
        hoop_frame = nearest_frame(hoop_frames, shot.timestamp, self.settings.hoop_search_window)
        if hoop_frame is None:
            return None
        hoop = max(hoop_frame.detections, key=lambda h: h.confidence)

        window_end = shot.timestamp + self.settings.missed_shot_window
        trajectory = [p for p in positions if shot.timestamp < p.timestamp <= window_end]
        crossing = find_hoop_crossing(trajectory, hoop)
        if crossing is None:
            return None

        shot_type = self.visual_shot_type(shot, person_frames)
        return GameEvent(
            type=EventType.SCORE,
            team_id=shot.team_id,
            player_id=shot.player_id,
            timestamp=crossing.timestamp,
            confidence=self.settings.visual_score_factor * hoop.confidence,
            source="visual-ball-tracking",
            score_delta=shot_type.points,
            shot_type=shot_type,
            notes=f"Ball through hoop {crossing.timestamp - shot.timestamp:.2f}s after shot, "
                  f"{shot_type.value} (+{shot_type.points})",
            position=shot.position,
        )

    def visual_shot_type(self, shot: GameEvent, person_frames: Sequence[PersonFrame]) -> ShotType:
        """Shot type from the shot's tag, else from how far off-center the shooter stood"""
        if shot.shot_type is not None:
            return shot.shot_type
        if shot.position is None:
            return ShotType.TWO_POINT

        frame = nearest_frame(person_frames, shot.timestamp, self.settings.score_attribution_window)
        width = frame.width if frame is not None else COURT_WIDTH
        offset = abs(shot.position[0] / width - 0.5)
        return ShotType.THREE_POINT if offset > OUTER_COURT_OFFSET else ShotType.TWO_POINT

    def estimate_scores(self, shots: Sequence[GameEvent], duration: float) -> List[GameEvent]:
        """Mark a deterministic share of shots as made when the ball cannot be followed"""
        events = []
        for shot in shots:
            # A make needs room for its score after the shot inside the clip
            if shot.timestamp + ESTIMATED_SCORE_DELAY > duration:
                continue
            if not estimated_make(shot.timestamp, self.settings.estimated_make_rate):
                continue
            shot_type = shot.shot_type or ShotType.TWO_POINT
            events.append(GameEvent(
                type=EventType.SCORE,
                team_id=shot.team_id,
                player_id=shot.player_id,
                timestamp=shot.timestamp + ESTIMATED_SCORE_DELAY,
                confidence=self.settings.estimated_score_confidence,
                source="shot-rate-estimate",
                score_delta=shot_type.points,
                shot_type=shot_type,
                notes="Estimated from typical shooting rate, not visually confirmed",
                position=shot.position,
            ))

        self.logger.info(f"Estimated {len(events)} scores from {len(shots)} shots "
                         f"({self.settings.estimated_make_rate:.0%} make rate)")
        return events
