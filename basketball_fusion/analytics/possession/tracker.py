"""
Basketball possession tracking over ball and person streams
"""

import logging
from typing import List, NamedTuple, Optional, Sequence, Tuple

from basketball_fusion.analytics.attribution import is_known_team
from basketball_fusion.config import FusionSettings, get_settings
from basketball_fusion.core.models import BallFrame, PersonFrame
from basketball_fusion.utils.frames import nearest_frame, sort_frames
from basketball_fusion.utils.geometry import nearest


class PossessionSample(NamedTuple):
    """Ball holder observed in one frame"""
    timestamp: float
    team_id: str
    player_id: Optional[str]
    distance: float
    position: Tuple[float, float]


class PossessionChange(NamedTuple):
    """Ball moving from one holder to another"""
    timestamp: float
    previous: PossessionSample
    current: PossessionSample

    @property
    def gap(self) -> float:
        return self.timestamp - self.previous.timestamp

    @property
    def team_changed(self) -> bool:
        return self.previous.team_id != self.current.team_id


class PossessionTracker:
    """Track ball possession during a clip"""

    def __init__(self, settings: Optional[FusionSettings] = None):
        """
        Initialize possession tracker

        Args:
            settings: Proximity and frame-matching thresholds
        """
        self.settings = settings or get_settings()
        self.logger = logging.getLogger(__name__)

    def holder_at(self, ball_frame: BallFrame,
                  person_frames: Sequence[PersonFrame]) -> Optional[PossessionSample]:
        """Nearest team-tagged person within possession range of the ball"""
        if ball_frame.is_empty:
            return None
        person_frame = nearest_frame(person_frames, ball_frame.timestamp,
                                     self.settings.frame_match_tolerance)
        if person_frame is None:
            return None

        ball = max(ball_frame.detections, key=lambda b: b.confidence)
        tagged = [p for p in person_frame.detections if is_known_team(p.team_id)]
        holder, distance = nearest(ball.center, tagged, max_distance=self.settings.possession_proximity)
        if holder is None:
            return None

        center = holder.center
        return PossessionSample(
            timestamp=ball_frame.timestamp,
            team_id=holder.team_id,
            player_id=holder.player_id,
            distance=distance,
            position=(float(center[0]), float(center[1])),
        )

    def track(self, ball_frames: Sequence[BallFrame],
              person_frames: Sequence[PersonFrame]) -> List[PossessionSample]:
        """Possession samples for every ball frame with an identifiable holder"""
        samples = []
        for frame in sort_frames(ball_frames):
            sample = self.holder_at(frame, person_frames)
            if sample is not None:
                samples.append(sample)
        self.logger.debug(f"Possession established in {len(samples)} of {len(ball_frames)} ball frames")
        return samples

    @staticmethod
    def team_changes(samples: Sequence[PossessionSample]) -> List[PossessionChange]:
        """Consecutive samples where the holding team differs"""
        return [PossessionChange(cur.timestamp, prev, cur)
                for prev, cur in zip(samples, samples[1:])
                if prev.team_id != cur.team_id]

    @staticmethod
    def player_changes(samples: Sequence[PossessionSample]) -> List[PossessionChange]:
        """Consecutive samples where the ball moves between two identified players of one team"""
        return [PossessionChange(cur.timestamp, prev, cur)
                for prev, cur in zip(samples, samples[1:])
                if prev.team_id == cur.team_id
                and prev.player_id and cur.player_id
                and prev.player_id != cur.player_id]
