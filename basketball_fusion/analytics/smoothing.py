"""
Temporal smoothing, confidence filtering and final ordering of game events
"""

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np

from basketball_fusion.core.constants import DEFAULT_CONFIDENCE_FLOOR, TEMPORAL_WINDOW
from basketball_fusion.core.models import GameEvent

logger = logging.getLogger(__name__)

SMOOTHED_PREFIX = "smoothed-"


def merge_sources(events: Sequence[GameEvent]) -> str:
    """Ordered union of provenance tags, '+'-joined"""
    seen = []
    for event in events:
        for tag in event.source.split("+"):
            if tag and tag not in seen:
                seen.append(tag)
    return "+".join(seen)


def merge_group(group: Sequence[GameEvent]) -> GameEvent:
    """
    Collapse near-duplicate events into one representative

    Timestamp is the median, confidence the mean. Identity fields (player,
    score delta, shot type, position) come from the first event.
    """
    first = group[0]
    timestamps = np.array([e.timestamp for e in group], dtype=float)
    confidences = np.array([e.confidence for e in group], dtype=float)

    notes = [e.notes for e in group if e.notes]
    merged_notes = f"Merged {len(group)} similar detections."
    if notes:
        merged_notes += " " + notes[0]

    base_id = first.id if first.id.startswith(SMOOTHED_PREFIX) else SMOOTHED_PREFIX + first.id
    return first.with_changes(
        timestamp=float(np.median(timestamps)),
        confidence=float(confidences.mean()),
        source=merge_sources(group),
        player_id=next((e.player_id for e in group if e.player_id), None),
        notes=merged_notes,
        id=base_id,
    )


def _smooth_pass(events: Sequence[GameEvent], window: float) -> Tuple[List[GameEvent], int]:
    processed = [False] * len(events)
    smoothed = []
    merges = 0

    for i, current in enumerate(events):
        if processed[i]:
            continue
        processed[i] = True

        similar = []
        for j, other in enumerate(events):
            if processed[j]:
                continue
            if (other.type is current.type and other.team_id == current.team_id
                    and abs(other.timestamp - current.timestamp) <= window):
                similar.append(other)
                processed[j] = True

        if not similar:
            smoothed.append(current)
        else:
            smoothed.append(merge_group([current] + similar))
            merges += 1

    return smoothed, merges


def smooth_events(events: Sequence[GameEvent], window: float = TEMPORAL_WINDOW) -> List[GameEvent]:
    """
    Merge same-type, same-team events within ``window`` seconds of each other

    Greedy grouping in input order, repeated until no group merges, so no two
    survivors of one (type, team) lie within the window and a second call is
    a no-op.

    Args:
        events: Events in a fixed order; output order follows it
        window: Max timestamp gap of near-duplicates

    Returns:
        New list; merged events replace their group at the first member's slot
    """
    smoothed = list(events)
    passes = 0
    while True:
        smoothed, merges = _smooth_pass(smoothed, window)
        passes += 1
        if merges == 0:
            break

    logger.debug(f"Smoothing: {len(events)} -> {len(smoothed)} events in {passes} passes")
    return smoothed


def filter_low_confidence(events: Sequence[GameEvent],
                          floor: float = DEFAULT_CONFIDENCE_FLOOR) -> List[GameEvent]:
    """Drop events under the confidence floor"""
    kept = [e for e in events if e.confidence >= floor]
    dropped = len(events) - len(kept)
    if dropped:
        logger.debug(f"Dropped {dropped} events below confidence {floor:.2f}")
    return kept


def clamp_to_clip(events: Sequence[GameEvent], duration: Optional[float] = None) -> List[GameEvent]:
    """Move events past the clip end onto it"""
    if duration is None:
        return list(events)
    return [e.with_changes(timestamp=float(duration)) if e.timestamp > duration else e
            for e in events]


def finalize_events(events: Sequence[GameEvent], duration: Optional[float] = None) -> List[GameEvent]:
    """Clamp timestamps into the clip and sort chronologically (stable)"""
    return sorted(clamp_to_clip(events, duration), key=lambda e: e.timestamp)
