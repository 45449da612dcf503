"""
Team and player attribution from person/pose detections
"""

from collections import Counter
from typing import List, Optional, Sequence, Tuple

from basketball_fusion.core.constants import UNKNOWN_TEAM
from basketball_fusion.core.interfaces import TeamOracle
from basketball_fusion.core.models import BoundingBox, PersonFrame, PoseFrame
from basketball_fusion.utils.frames import frames_within, nearest_frame
from basketball_fusion.utils.geometry import nearest, point_distance


def is_known_team(team_id: Optional[str]) -> bool:
    return bool(team_id) and team_id != UNKNOWN_TEAM


class DetectionTeamOracle(TeamOracle):
    """Resolve a box to the team of the nearest tagged pose, then person, at that time"""

    def __init__(self,
                 pose_frames: Sequence[PoseFrame],
                 person_frames: Sequence[PersonFrame],
                 tolerance: float = 0.1,
                 match_distance: float = 50.0):
        """
        Args:
            pose_frames: Pose stream carrying team ids
            person_frames: Person stream carrying team ids
            tolerance: Max time gap between the query and a frame
            match_distance: Max center distance for the same player
        """
        self.pose_frames = list(pose_frames)
        self.person_frames = list(person_frames)
        self.tolerance = tolerance
        self.match_distance = match_distance

    def resolve(self, bbox: BoundingBox, timestamp: float) -> Optional[str]:
        for frames in (self.pose_frames, self.person_frames):
            frame = nearest_frame(frames, timestamp, self.tolerance)
            if frame is None:
                continue
            tagged = [d for d in frame.detections if is_known_team(d.team_id)]
            match, _ = nearest(bbox.center, tagged, max_distance=self.match_distance)
            if match is not None:
                return match.team_id
        return None


def vote_team_near_hoop(timestamp: float,
                        person_frames: Sequence[PersonFrame],
                        window: float,
                        hoop_max_y: float) -> Tuple[Counter, int]:
    """
    Count team votes of persons inside the hoop region around a timestamp

    The hoop region is the top ``hoop_max_y`` share of the frame.

    Returns:
        (votes per team id, total votes); untagged persons vote 'unknown'
    """
    votes: Counter = Counter()
    for frame in frames_within(person_frames, timestamp, window):
        for person in frame.detections:
            _, center_y = frame.normalize(person.center)
            if 0.0 <= center_y <= hoop_max_y:
                votes[person.team_id if is_known_team(person.team_id) else UNKNOWN_TEAM] += 1
    return votes, sum(votes.values())


def find_player_id(timestamp: float,
                   team_id: str,
                   person_frames: Sequence[PersonFrame],
                   window: float = 0.5,
                   anchor: Optional[Tuple[float, float]] = None) -> Optional[str]:
    """
    Jersey number of the most likely same-team player around a timestamp

    Args:
        anchor: Normalized (x, y) point; when given, the closest player wins

    Returns:
        Player id, or None when no tagged player of the team is visible
    """
    candidates: List[Tuple[float, float, str]] = []
    for frame in frames_within(person_frames, timestamp, window):
        for person in frame.detections:
            if person.team_id != team_id or not person.player_id:
                continue
            rank = point_distance(frame.normalize(person.center), anchor) if anchor else 0.0
            candidates.append((rank, abs(frame.timestamp - timestamp), person.player_id))

    if not candidates:
        return None
    # Stable on ties: earlier-listed candidates keep precedence
    return min(candidates, key=lambda c: (c[0], c[1]))[2]
