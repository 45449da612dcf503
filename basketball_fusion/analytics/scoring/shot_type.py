"""
Shot type inference for score events
"""

from typing import NamedTuple, Optional, Sequence

from basketball_fusion.core.models import EventType, GameEvent, ShotType


class ShotTypeEstimate(NamedTuple):
    shot_type: ShotType
    confidence: float
    basis: str


# Confidence in the type read from delta alone
DELTA_ONLY_CONFIDENCE = {3: 0.6, 2: 0.7, 1: 0.5}
CONFLICT_CONFIDENCE_CAP = 0.6


def most_recent_shot(timestamp: float, team_id: str, shot_events: Sequence[GameEvent],
                     lookback: float) -> Optional[GameEvent]:
    """Latest same-team shot attempt in [timestamp - lookback, timestamp]"""
    recent = None
    for shot in sorted(shot_events, key=lambda e: e.timestamp):
        if shot.type is not EventType.SHOT_ATTEMPT or shot.team_id != team_id:
            continue
        if timestamp - lookback <= shot.timestamp <= timestamp:
            recent = shot
    return recent


def infer_shot_type(score_delta: Optional[int], timestamp: float, team_id: str,
                    shot_events: Sequence[GameEvent], lookback: float) -> ShotTypeEstimate:
    """
    Infer the point class of a score

    The most recent same-team shot attempt within ``lookback`` seconds decides:
    a 3pt-tagged shot gives 3pt (0.9), a foul-shot-tagged one 1pt (0.85), any
    other 2pt (0.8). Without a shot the raw delta decides. When the shot
    evidence disagrees with a known delta, the delta wins at capped confidence.
    """
    shot = most_recent_shot(timestamp, team_id, shot_events, lookback)

    if shot is not None:
        if shot.shot_type is ShotType.THREE_POINT:
            estimate = ShotTypeEstimate(ShotType.THREE_POINT, 0.9, "3pt shot attempt")
        elif shot.shot_type is ShotType.ONE_POINT:
            estimate = ShotTypeEstimate(ShotType.ONE_POINT, 0.85, "foul shot attempt")
        else:
            estimate = ShotTypeEstimate(ShotType.TWO_POINT, 0.8, "shot attempt")
    elif score_delta in DELTA_ONLY_CONFIDENCE:
        return ShotTypeEstimate(ShotType.from_points(score_delta),
                                DELTA_ONLY_CONFIDENCE[score_delta], "score delta")
    else:
        return ShotTypeEstimate(ShotType.TWO_POINT, 0.5, "default")

    if score_delta is not None and estimate.shot_type.points != score_delta:
        return ShotTypeEstimate(ShotType.from_points(score_delta),
                                min(estimate.confidence, CONFLICT_CONFIDENCE_CAP),
                                f"score delta (overrides {estimate.basis})")
    return estimate
