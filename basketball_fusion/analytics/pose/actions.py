"""
Basketball action recognition from pose, ball and person streams

Each rule is an independent pattern match; rules never read each other's
output except assists, which link passes to scores.
"""

from typing import List, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from basketball_fusion.analytics.attribution import is_known_team
from basketball_fusion.analytics.confidence import Signal, combine
from basketball_fusion.analytics.events.detector import EventDetector
from basketball_fusion.analytics.possession.tracker import PossessionTracker
from basketball_fusion.config import FusionSettings
from basketball_fusion.core.interfaces import EventRule
from basketball_fusion.core.models import (
    BallFrame, EventType, GameEvent, PersonFrame, PoseDetection, PoseFrame,
    ShotType, SignalBundle
)
from basketball_fusion.utils.frames import frames_between, frames_within, nearest_frame, sort_frames
from basketball_fusion.utils.geometry import nearest, point_distance

KEYPOINT_CONFIDENCE = 0.3

ACTION_THRESHOLDS = {
    'block': {
        'window': 0.3,
        'wrist_above_shoulder': 30,
        'shooter_distance': 150,
        'confidence': 0.65,
    },
    'pass': {
        'window': 2.0,
        'confidence': 0.6,
    },
    'assist': {
        'window': 2.0,
        'factor': 0.7,
    },
    'dunk': {
        'window': 0.2,
        'wrist_above_nose': 50,
        'max_top': 0.28,         # normalized bbox top, close to the rim
        'confidence': 0.75,
    },
    'layup': {
        'window': 0.5,
        'wrist_rise': 20,
        'max_top': 0.42,
        'confidence': 0.7,
    },
    'dribble': {
        'window_size': 10,
        'min_extrema': 3,
        'holder_distance': 60,
        'dedupe_window': 1.0,
        'confidence': 0.6,
    },
    'foul_shot': {
        'shooter_window': 0.3,
        'isolation_radius': 200,
        'ball_window': (0.7, 0.3),  # seconds before the shot
        'ball_distance': 50,
        'max_ball_drift': 15,
        'confidence': 0.55,
    },
}


class BallHeight(NamedTuple):
    timestamp: float
    y: float
    key: Optional[str]
    team_id: Optional[str]
    player_id: Optional[str]


def wrist_raised(pose: PoseDetection, side: str, margin: float) -> bool:
    """Wrist at least margin px above its shoulder"""
    wrist = pose.keypoint(f"{side}_wrist")
    shoulder = pose.keypoint(f"{side}_shoulder")
    if wrist is None or shoulder is None or wrist.confidence <= KEYPOINT_CONFIDENCE:
        return False
    return wrist.y <= shoulder.y - margin


def count_extrema(values: Sequence[float]) -> int:
    """Number of strict local minima and maxima"""
    y = np.asarray(values, dtype=float)
    if len(y) < 3:
        return 0
    prev, cur, nxt = y[:-2], y[1:-1], y[2:]
    peaks = (cur > prev) & (cur > nxt)
    troughs = (cur < prev) & (cur < nxt)
    return int(np.count_nonzero(peaks | troughs))


class ActionDetector(EventDetector, EventRule):
    """Detect blocks, passes, assists, dunks, layups, dribbles and foul shots"""

    stage = "actions"

    def __init__(self, settings: Optional[FusionSettings] = None,
                 tracker: Optional[PossessionTracker] = None):
        """
        Initialize action detector

        Args:
            settings: Fusion thresholds
            tracker: Possession tracker used for passes
        """
        super().__init__(settings)
        self.tracker = tracker or PossessionTracker(self.settings)
        self.action_thresholds = ACTION_THRESHOLDS

    def detect(self, shot_events: List[GameEvent], score_events: List[GameEvent],
               signals: SignalBundle) -> List[GameEvent]:
        return self.detect_all(shot_events, score_events, signals)

    def detect_all(self, shot_events: Sequence[GameEvent], score_events: Sequence[GameEvent],
                   signals: SignalBundle,
                   foul_shots: Optional[List[GameEvent]] = None) -> List[GameEvent]:
        """
        Run every action rule over one clip

        Args:
            shot_events: Shot attempts
            score_events: Scores, for assists
            signals: Raw streams
            foul_shots: Already detected foul shots, computed when omitted

        Returns:
            All recognized action events
        """
        shots = sorted((e for e in shot_events if e.type is EventType.SHOT_ATTEMPT),
                       key=lambda e: e.timestamp)
        passes = self.detect_passes(signals.ball_frames, signals.person_frames)
        if foul_shots is None:
            foul_shots = self.detect_foul_shots(shots, signals.person_frames, signals.ball_frames)

        actions = []
        actions.extend(self.detect_blocks(shots, signals.pose_frames, signals.person_frames))
        actions.extend(passes)
        actions.extend(self.detect_dunks(shots, signals.pose_frames))
        actions.extend(self.detect_layups(shots, signals.pose_frames))
        actions.extend(self.detect_assists(passes, score_events))
        actions.extend(self.detect_dribbles(signals.ball_frames, signals.person_frames))
        actions.extend(foul_shots)

        counts = {}
        for action in actions:
            counts[action.type.value] = counts.get(action.type.value, 0) + 1
        self.logger.info(f"Recognized actions: {counts or 'none'}")
        return actions

    def _shooter_point(self, shot: GameEvent, person_frames: Sequence[PersonFrame],
                       window: float) -> Optional[np.ndarray]:
        if shot.position is not None:
            return np.asarray(shot.position, dtype=float)
        frame = nearest_frame(person_frames, shot.timestamp, window)
        if frame is None:
            return None
        shooter = next((p for p in frame.detections if p.team_id == shot.team_id), None)
        return shooter.center if shooter is not None else None

    def detect_blocks(self, shot_events: Sequence[GameEvent], pose_frames: Sequence[PoseFrame],
                      person_frames: Sequence[PersonFrame]) -> List[GameEvent]:
        """Opposing player with a raised arm close to the shooter at shot time"""
        params = self.action_thresholds['block']
        blocks = []
        for shot in shot_events:
            shooter = self._shooter_point(shot, person_frames, params['window'])
            if shooter is None:
                continue

            block = None
            for frame in frames_within(pose_frames, shot.timestamp, params['window']):
                for pose in frame.detections:
                    if not is_known_team(pose.team_id) or pose.team_id == shot.team_id:
                        continue
                    raised = any(wrist_raised(pose, side, params['wrist_above_shoulder'])
                                 for side in ("left", "right"))
                    distance = point_distance(pose.center, shooter)
                    if raised and distance < params['shooter_distance']:
                        center = pose.center
                        block = GameEvent(
                            type=EventType.BLOCK,
                            team_id=pose.team_id,
                            player_id=pose.player_id,
                            timestamp=frame.timestamp,
                            confidence=params['confidence'],
                            source="pose-analysis",
                            notes=f"Raised arms {distance:.0f}px from {shot.team_id} shooter",
                            position=(float(center[0]), float(center[1])),
                        )
                        break
                if block is not None:
                    break
            if block is not None:
                blocks.append(block)
        return blocks

    def detect_passes(self, ball_frames: Sequence[BallFrame],
                      person_frames: Sequence[PersonFrame]) -> List[GameEvent]:
        """Ball moving between two identified players of the same team"""
        params = self.action_thresholds['pass']
        samples = self.tracker.track(ball_frames, person_frames)
        passes = []
        for change in PossessionTracker.player_changes(samples):
            if change.gap >= params['window']:
                continue
            passer, receiver = change.previous, change.current
            passes.append(GameEvent(
                type=EventType.PASS,
                team_id=receiver.team_id,
                player_id=passer.player_id,
                timestamp=change.timestamp,
                confidence=params['confidence'],
                source="ball-tracking",
                notes=f"Pass from player {passer.player_id} to {receiver.player_id}",
                position=receiver.position,
            ))
        return passes

    def detect_assists(self, passes: Sequence[GameEvent],
                       score_events: Sequence[GameEvent]) -> List[GameEvent]:
        """Most recent same-team pass shortly before each score"""
        params = self.action_thresholds['assist']
        assists = []
        for score in score_events:
            if score.type is not EventType.SCORE:
                continue
            candidates = [p for p in passes
                          if p.type is EventType.PASS and p.team_id == score.team_id
                          and 0 < score.timestamp - p.timestamp < params['window']]
            if not candidates:
                continue
            # Latest pass; earliest-listed on equal timestamps
            recent = max(candidates, key=lambda p: p.timestamp)
            confidence = params['factor'] * combine([
                Signal("pass", recent.confidence, 1.0),
                Signal("score", score.confidence, 1.0),
            ], bonus=self.settings.corroboration_bonus, threshold=self.settings.corroboration_threshold)
            assists.append(GameEvent(
                type=EventType.ASSIST,
                team_id=recent.team_id,
                player_id=recent.player_id,
                timestamp=recent.timestamp,
                confidence=confidence,
                source="event-correlation",
                notes=f"Pass led to score at {score.timestamp:.1f}s",
                position=recent.position,
            ))
        return assists

    def detect_dunks(self, shot_events: Sequence[GameEvent],
                     pose_frames: Sequence[PoseFrame]) -> List[GameEvent]:
        """Shooter with a hand far above the head right under the rim"""
        params = self.action_thresholds['dunk']
        dunks = []
        for shot in shot_events:
            frame = nearest_frame(pose_frames, shot.timestamp, params['window'])
            if frame is None:
                continue
            for pose in frame.detections:
                if pose.team_id != shot.team_id:
                    continue
                nose = pose.keypoint("nose")
                wrists = [pose.keypoint("left_wrist"), pose.keypoint("right_wrist")]
                if nose is None or any(w is None or w.confidence < KEYPOINT_CONFIDENCE for w in wrists):
                    continue
                extended = any(w.y < nose.y - params['wrist_above_nose'] for w in wrists)
                near_hoop = pose.bbox.y / frame.height < params['max_top']
                if extended and near_hoop:
                    dunks.append(GameEvent(
                        type=EventType.DUNK,
                        team_id=shot.team_id,
                        player_id=pose.player_id or shot.player_id,
                        timestamp=shot.timestamp,
                        confidence=params['confidence'],
                        source="pose-analysis",
                        notes="Arms extended above head near hoop",
                        position=shot.position,
                    ))
                    break
        return dunks

    def _team_pose(self, frame: PoseFrame, shot: GameEvent) -> Optional[PoseDetection]:
        same_team = [p for p in frame.detections if p.team_id == shot.team_id]
        if not same_team:
            return None
        if shot.position is None:
            return same_team[0]
        pose, _ = nearest(shot.position, same_team)
        return pose

    def detect_layups(self, shot_events: Sequence[GameEvent],
                      pose_frames: Sequence[PoseFrame]) -> List[GameEvent]:
        """Rising shooting hand close to the hoop across consecutive poses"""
        params = self.action_thresholds['layup']
        layups = []
        for shot in shot_events:
            sequence = frames_within(pose_frames, shot.timestamp, params['window'])
            for prev_frame, cur_frame in zip(sequence, sequence[1:]):
                prev_pose = self._team_pose(prev_frame, shot)
                cur_pose = self._team_pose(cur_frame, shot)
                if prev_pose is None or cur_pose is None:
                    continue
                prev_wrist = prev_pose.keypoint("right_wrist")
                cur_wrist = cur_pose.keypoint("right_wrist")
                if (prev_wrist is None or cur_wrist is None
                        or prev_wrist.confidence < KEYPOINT_CONFIDENCE
                        or cur_wrist.confidence < KEYPOINT_CONFIDENCE):
                    continue

                rising = cur_wrist.y < prev_wrist.y - params['wrist_rise']
                close_range = cur_pose.bbox.y / cur_frame.height < params['max_top']
                if rising and close_range:
                    layups.append(GameEvent(
                        type=EventType.LAYUP,
                        team_id=shot.team_id,
                        player_id=cur_pose.player_id or shot.player_id,
                        timestamp=shot.timestamp,
                        confidence=params['confidence'],
                        source="pose-analysis",
                        notes="Close-range shot with approach motion",
                        position=shot.position,
                    ))
                    break
        return layups

    def _ball_heights(self, ball_frames: Sequence[BallFrame],
                      person_frames: Sequence[PersonFrame]) -> List[BallHeight]:
        holder_distance = self.action_thresholds['dribble']['holder_distance']
        heights = []
        for frame in sort_frames(ball_frames):
            if frame.is_empty:
                continue
            ball = max(frame.detections, key=lambda b: b.confidence)
            key = team_id = player_id = None
            person_frame = nearest_frame(person_frames, frame.timestamp, self.settings.frame_match_tolerance)
            if person_frame is not None:
                holder, _ = nearest(ball.center, person_frame.detections, max_distance=holder_distance)
                if holder is not None and is_known_team(holder.team_id):
                    team_id, player_id = holder.team_id, holder.player_id
                    key = player_id or team_id
            heights.append(BallHeight(frame.timestamp, float(ball.center[1]), key, team_id, player_id))
        return heights

    def detect_dribbles(self, ball_frames: Sequence[BallFrame],
                        person_frames: Sequence[PersonFrame]) -> List[GameEvent]:
        """Repeated vertical ball oscillation next to one player"""
        params = self.action_thresholds['dribble']
        size = params['window_size']
        heights = self._ball_heights(ball_frames, person_frames)

        dribbles = []
        last_seen = {}
        for end in range(size, len(heights) + 1):
            window = heights[end - size:end]
            latest = window[-1]
            if latest.key is None:
                continue

            extrema = count_extrema([h.y for h in window])
            if extrema < params['min_extrema']:
                continue
            previous = last_seen.get(latest.key)
            if previous is not None and latest.timestamp - previous < params['dedupe_window']:
                continue

            last_seen[latest.key] = latest.timestamp
            dribbles.append(GameEvent(
                type=EventType.DRIBBLE,
                team_id=latest.team_id,
                player_id=latest.player_id,
                timestamp=latest.timestamp,
                confidence=params['confidence'],
                source="ball-tracking",
                notes=f"Dribbling: {extrema} bounces observed",
            ))
        return dribbles

    def detect_foul_shots(self, shot_events: Sequence[GameEvent], person_frames: Sequence[PersonFrame],
                          ball_frames: Sequence[BallFrame]) -> List[GameEvent]:
        """Isolated shooter holding a near-stationary ball just before the attempt"""
        params = self.action_thresholds['foul_shot']
        before_start, before_end = params['ball_window']
        foul_shots = []

        for shot in shot_events:
            if shot.type is not EventType.SHOT_ATTEMPT:
                continue
            frame = nearest_frame(person_frames, shot.timestamp, params['shooter_window'])
            if frame is None:
                continue
            shooters = [p for p in frame.detections if p.team_id == shot.team_id]
            if not shooters:
                continue
            if shot.position is not None:
                shooter, _ = nearest(shot.position, shooters)
            else:
                shooter = shooters[0]
            shooter_center = shooter.center

            defenders = [p for p in frame.detections
                         if is_known_team(p.team_id) and p.team_id != shot.team_id
                         and point_distance(p.center, shooter_center) < params['isolation_radius']]
            if defenders:
                continue

            balls = self._balls_between(ball_frames, shot.timestamp - before_start,
                                        shot.timestamp - before_end)
            if not balls:
                continue
            if any(point_distance(b, shooter_center) >= params['ball_distance'] for b in balls):
                continue
            drift = max(point_distance(b, balls[0]) for b in balls)
            if drift >= params['max_ball_drift']:
                continue

            foul_shots.append(GameEvent(
                type=EventType.FOUL_SHOT,
                team_id=shot.team_id,
                player_id=shot.player_id or shooter.player_id,
                timestamp=shot.timestamp,
                confidence=params['confidence'],
                source="isolation-heuristic",
                shot_type=ShotType.ONE_POINT,
                notes="Isolated shooter with stationary ball",
                position=shot.position,
            ))
        return foul_shots

    @staticmethod
    def _balls_between(ball_frames: Sequence[BallFrame], start: float, end: float) -> List[np.ndarray]:
        return [max(f.detections, key=lambda b: b.confidence).center
                for f in frames_between(ball_frames, start, end, include_start=True)
                if not f.is_empty]

    @staticmethod
    def tag_foul_shots(shot_events: Sequence[GameEvent],
                       foul_shots: Sequence[GameEvent]) -> List[GameEvent]:
        """Shot attempts with shot_type=1pt where a foul shot was recognized"""
        keys = {(e.team_id, e.timestamp) for e in foul_shots if e.type is EventType.FOUL_SHOT}
        return [
            shot.with_changes(shot_type=ShotType.ONE_POINT)
            if shot.type is EventType.SHOT_ATTEMPT and (shot.team_id, shot.timestamp) in keys
            else shot
            for shot in shot_events
        ]
