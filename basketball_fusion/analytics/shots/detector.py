"""
Shot attempt detection from pose form and ball motion
"""

from typing import List, Optional, Sequence

from basketball_fusion.analytics.attribution import DetectionTeamOracle, is_known_team
from basketball_fusion.analytics.confidence import Signal, combine
from basketball_fusion.analytics.events.detector import EventDetector
from basketball_fusion.config import FusionSettings
from basketball_fusion.core.constants import (
    BALL_TRAJECTORY_MAX_CONFIDENCE, PRESENCE_SHOT_CONFIDENCE
)
from basketball_fusion.core.interfaces import TeamOracle
from basketball_fusion.core.models import (
    BallFrame, BoundingBox, EventType, GameEvent, PersonFrame, ShotCandidate,
    SignalBundle, clamp_confidence
)
from basketball_fusion.utils.frames import frames_within, nearest_frame, sort_frames
from basketball_fusion.utils.geometry import nearest, point_distance

# Ball motion evidence levels
BALL_RISING_NEAR_SHOOTER = 0.8
BALL_NEAR_SHOOTER = 0.4


class ShotAttemptDetector(EventDetector):
    """Detect shot attempts, degrading to ball-trajectory and player-presence evidence"""

    stage = "shot_attempts"

    def __init__(self, settings: Optional[FusionSettings] = None,
                 team_oracle: Optional[TeamOracle] = None):
        """
        Initialize shot detector

        Args:
            settings: Fusion thresholds
            team_oracle: Resolves shooter boxes to teams; built from the
                pose/person streams when omitted
        """
        super().__init__(settings)
        self.team_oracle = team_oracle

    def detect(self, signals: SignalBundle) -> List[GameEvent]:
        """Emit shot_attempt events for the whole clip"""
        self.reset()
        oracle = self.team_oracle or DetectionTeamOracle(
            signals.pose_frames, signals.person_frames,
            tolerance=self.settings.frame_match_tolerance,
            match_distance=self.settings.team_match_distance
        )
        default_team = signals.team_assignment.default_team_id

        if signals.shot_candidates:
            candidates = sorted(signals.shot_candidates, key=lambda c: c.timestamp)
            events = [self._fuse_candidate(c, signals.ball_frames, oracle, default_team)
                      for c in candidates]
            self.logger.info(f"Fused {len(events)} shot attempts from pose candidates")
            return events

        events: List[GameEvent] = []
        ball_frames = signals.ball_frames_with_detections
        if ball_frames >= self.settings.min_ball_frames:
            self._record_fallback("no pose shot candidates", "ball-trajectory shot synthesis")
            events = self.from_ball_trajectory(signals.ball_frames, signals.person_frames, default_team)
            if not events:
                self._record_fallback("ball trajectory shows no shot-like rise",
                                      "player-presence shot synthesis")
        else:
            self._record_fallback(
                f"no pose shot candidates and ball seen in only {ball_frames} frames",
                "player-presence shot synthesis"
            )

        if not events:
            events = self.from_person_presence(signals.person_frames)

        self.logger.info(f"Synthesized {len(events)} shot attempts without pose evidence")
        return events

    def _fuse_candidate(self, candidate: ShotCandidate, ball_frames: Sequence[BallFrame],
                        oracle: TeamOracle, default_team: str) -> GameEvent:
        pose_confidence = clamp_confidence(candidate.confidence)
        ball_confidence = self.ball_motion_confidence(candidate.timestamp, candidate.bbox, ball_frames)

        combined = combine(
            [Signal("pose", pose_confidence, self.settings.pose_weight),
             Signal("ball-motion", ball_confidence, self.settings.ball_motion_weight)],
            bonus=self.settings.shot_corroboration_bonus,
            threshold=self.settings.corroboration_threshold,
        )

        team_id = candidate.team_id if is_known_team(candidate.team_id) else None
        if team_id is None:
            team_id = oracle.resolve(candidate.bbox, candidate.timestamp) or default_team

        center = candidate.bbox.center
        return GameEvent(
            type=EventType.SHOT_ATTEMPT,
            team_id=team_id,
            player_id=candidate.player_id,
            timestamp=candidate.timestamp,
            confidence=max(self.settings.shot_confidence_floor, combined),
            source="pose+ball-heuristic" if ball_confidence > 0 else "pose-analysis",
            notes=(f"Pose confidence: {pose_confidence:.0%}, ball motion: {ball_confidence:.0%}, "
                   f"arm elevation {candidate.arm_elevation:.2f} ({candidate.handedness} hand)"),
            position=(float(center[0]), float(center[1])),
        )

    def ball_motion_confidence(self, timestamp: float, shooter_bbox: BoundingBox,
                               ball_frames: Sequence[BallFrame]) -> float:
        """
        Ball evidence for a shot around timestamp

        0.8 when a ball is near the shooter and above the shooter's center,
        0.4 when a ball is merely near, 0 otherwise.
        """
        shooter = shooter_bbox.center
        near = False
        for frame in frames_within(ball_frames, timestamp, self.settings.ball_motion_window):
            for ball in frame.detections:
                if point_distance(ball.center, shooter) >= self.settings.shot_ball_proximity:
                    continue
                if ball.center[1] < shooter[1]:
                    return BALL_RISING_NEAR_SHOOTER
                near = True
        return BALL_NEAR_SHOOTER if near else 0.0

    def from_ball_trajectory(self, ball_frames: Sequence[BallFrame],
                             person_frames: Sequence[PersonFrame],
                             default_team: str) -> List[GameEvent]:
        """Synthesize shot attempts from frame-to-frame ball rises"""
        events = []
        frames = sort_frames(ball_frames)

        for previous, current in zip(frames, frames[1:]):
            if previous.is_empty or current.is_empty:
                continue
            prev_ball = max(previous.detections, key=lambda b: b.confidence)
            ball = max(current.detections, key=lambda b: b.confidence)
            rise = float(prev_ball.center[1] - ball.center[1])
            if rise <= self.settings.min_upward_motion:
                continue

            shooter = None
            person_frame = nearest_frame(person_frames, current.timestamp, self.settings.ball_motion_window)
            if person_frame is not None:
                shooter, _ = nearest(ball.center, person_frame.detections)

            team_id = shooter.team_id if shooter and is_known_team(shooter.team_id) else default_team
            anchor = shooter.center if shooter else ball.center
            events.append(GameEvent(
                type=EventType.SHOT_ATTEMPT,
                team_id=team_id,
                player_id=shooter.player_id if shooter else None,
                timestamp=current.timestamp,
                confidence=min(BALL_TRAJECTORY_MAX_CONFIDENCE,
                               self.settings.shot_confidence_floor + rise / 200.0),
                source="ball-trajectory",
                notes=f"Synthesized from ball trajectory (upward motion: {rise:.0f}px), no pose evidence",
                position=(float(anchor[0]), float(anchor[1])),
            ))

        return events

    def from_person_presence(self, person_frames: Sequence[PersonFrame]) -> List[GameEvent]:
        """Synthesize one low-confidence shot attempt per sampling interval, round-robin over players"""
        events = []
        frames = sort_frames(person_frames)
        interval = self.settings.presence_sample_interval
        margin = self.settings.presence_edge_margin

        for i in range(margin, len(frames) - margin, interval):
            frame = frames[i]
            players = sorted(
                (p for p in frame.detections if is_known_team(p.team_id)),
                key=lambda p: (p.bbox.x, p.bbox.y)
            )
            if not players:
                continue

            player = players[len(events) % len(players)]
            center = player.center
            events.append(GameEvent(
                type=EventType.SHOT_ATTEMPT,
                team_id=player.team_id,
                player_id=player.player_id,
                timestamp=frame.timestamp,
                confidence=PRESENCE_SHOT_CONFIDENCE,
                source="person-presence",
                notes=f"Synthesized from {player.team_id} player presence, no shot evidence",
                position=(float(center[0]), float(center[1])),
            ))

        return events
