"""
Timestamp lookups over detection frame streams
"""

from typing import List, Optional, Sequence

from basketball_fusion.core.models import DetectionFrame


def sort_frames(frames: Sequence[DetectionFrame]) -> List[DetectionFrame]:
    """Frames in timestamp order; stable for equal timestamps"""
    return sorted(frames, key=lambda f: f.timestamp)


def frames_within(frames: Sequence[DetectionFrame], timestamp: float,
                  window: float) -> List[DetectionFrame]:
    """Frames with |frame.timestamp - timestamp| <= window, in time order"""
    return sort_frames([f for f in frames if abs(f.timestamp - timestamp) <= window])


def frames_between(frames: Sequence[DetectionFrame], start: float, end: float,
                   include_start: bool = False, include_end: bool = True) -> List[DetectionFrame]:
    """Frames inside a time interval, in time order"""
    def inside(t: float) -> bool:
        after = t >= start if include_start else t > start
        before = t <= end if include_end else t < end
        return after and before
    return sort_frames([f for f in frames if inside(f.timestamp)])


def nearest_frame(frames: Sequence[DetectionFrame], timestamp: float,
                  tolerance: float) -> Optional[DetectionFrame]:
    """Frame closest in time, if within tolerance; earliest wins ties"""
    best, best_gap = None, None
    for frame in sort_frames(frames):
        gap = abs(frame.timestamp - timestamp)
        if gap <= tolerance and (best_gap is None or gap < best_gap):
            best, best_gap = frame, gap
    return best
