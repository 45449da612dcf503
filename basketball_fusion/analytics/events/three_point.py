"""
Three-point attempt estimation from shooter position in frame
"""

from typing import List, Optional, Sequence, Tuple

from basketball_fusion.analytics.events.detector import EventDetector
from basketball_fusion.config import FusionSettings
from basketball_fusion.core.constants import COURT_HEIGHT, COURT_WIDTH
from basketball_fusion.core.interfaces import EventRule
from basketball_fusion.core.models import (
    EventType, GameEvent, PoseFrame, ShotType, SignalBundle
)
from basketball_fusion.utils.frames import nearest_frame
from basketball_fusion.utils.geometry import nearest

# Confidence that the emitted attempt is from beyond the arc
THREE_POINT_THRESHOLD = 0.35


def distance_confidence(x_norm: float, y_norm: float) -> float:
    """
    Heuristic 3pt confidence from normalized shooter position

    Players lower in the frame stand further from the hoop. Corner shots sit
    higher in the frame but far from the horizontal center.
    """
    if y_norm > 0.7:
        return 0.75
    if y_norm > 0.6:
        return 0.65
    if y_norm > 0.55 and abs(x_norm - 0.5) > 0.25:
        return 0.6
    if y_norm > 0.5:
        return 0.35
    return 0.0


class ThreePointEstimator(EventDetector, EventRule):
    """Tag shot attempts taken from long range"""

    stage = "three_point"

    def __init__(self, settings: Optional[FusionSettings] = None):
        super().__init__(settings)

    def detect(self, shot_events: List[GameEvent], score_events: List[GameEvent],
               signals: SignalBundle) -> List[GameEvent]:
        self.reset()
        events = []
        for shot in sorted(shot_events, key=lambda e: e.timestamp):
            if shot.type is not EventType.SHOT_ATTEMPT:
                continue
            position = self.shooter_position(shot, signals.pose_frames)
            if position is None:
                continue

            x_norm, y_norm = position
            confidence = distance_confidence(x_norm, y_norm)
            if confidence <= 0:
                continue

            is_three = confidence > THREE_POINT_THRESHOLD
            events.append(GameEvent(
                type=EventType.THREE_POINT_ATTEMPT if is_three else EventType.LONG_DISTANCE_ATTEMPT,
                team_id=shot.team_id,
                player_id=shot.player_id,
                timestamp=shot.timestamp,
                confidence=confidence,
                source="court-geometry-heuristic",
                shot_type=ShotType.THREE_POINT if is_three else None,
                notes=f"Estimated from shooter position (x={x_norm:.2f}, y={y_norm:.2f})",
                position=shot.position,
            ))

        self.logger.info(f"Estimated {len(events)} long-range attempts")
        return events

    def shooter_position(self, shot: GameEvent,
                         pose_frames: Sequence[PoseFrame]) -> Optional[Tuple[float, float]]:
        """Normalized center of the shooter's pose, else of the shot position"""
        frame = nearest_frame(pose_frames, shot.timestamp, self.settings.frame_match_tolerance)
        if frame is not None and not frame.is_empty:
            if shot.position is not None:
                pose, _ = nearest(shot.position, frame.detections)
            else:
                pose = frame.detections[0]
            return frame.normalize(pose.center)

        if shot.position is None:
            return None
        return shot.position[0] / COURT_WIDTH, shot.position[1] / COURT_HEIGHT

    @staticmethod
    def tag_shots(shot_events: Sequence[GameEvent],
                  three_point_events: Sequence[GameEvent]) -> List[GameEvent]:
        """Shot attempts with shot_type=3pt where a three_point_attempt was estimated"""
        keys = {(e.team_id, e.timestamp) for e in three_point_events
                if e.type is EventType.THREE_POINT_ATTEMPT}
        return [
            shot.with_changes(shot_type=ShotType.THREE_POINT)
            if shot.type is EventType.SHOT_ATTEMPT and (shot.team_id, shot.timestamp) in keys
            else shot
            for shot in shot_events
        ]
