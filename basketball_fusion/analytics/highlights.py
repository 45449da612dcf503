"""
Highlight clip extraction around significant game events
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from basketball_fusion.core.models import EventType, GameEvent

HIGHLIGHT_EVENTS = (
    EventType.SCORE, EventType.DUNK, EventType.BLOCK,
    EventType.STEAL, EventType.ASSIST, EventType.THREE_POINT_ATTEMPT,
)
MIN_HIGHLIGHT_CONFIDENCE = 0.5

# Ranking for top highlights
EVENT_PRIORITY = {
    EventType.DUNK: 10,
    EventType.THREE_POINT_ATTEMPT: 9,
    EventType.BLOCK: 8,
    EventType.SCORE: 7,
    EventType.STEAL: 6,
    EventType.ASSIST: 5,
    EventType.OFFENSIVE_REBOUND: 4,
    EventType.DEFENSIVE_REBOUND: 3,
}


@dataclass
class HighlightClip:
    """Video segment around one event"""
    id: str
    event_id: str
    event_type: EventType
    team_id: str
    start_time: float
    end_time: float
    description: str
    player_id: Optional[str] = None

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['event_type'] = self.event_type.value
        data['duration'] = self.duration
        return data


@dataclass
class HighlightFilter:
    """Optional restrictions; empty lists mean no restriction"""
    player_ids: List[str] = field(default_factory=list)
    event_types: List[EventType] = field(default_factory=list)
    team_ids: List[str] = field(default_factory=list)
    min_confidence: Optional[float] = None


def describe(event: GameEvent) -> str:
    player = f"Player {event.player_id}" if event.player_id else "Player"
    if event.type is EventType.SCORE:
        return f"{player} scores {event.points} points"
    if event.type is EventType.DUNK:
        return f"{player} dunks!"
    if event.type is EventType.BLOCK:
        return f"{player} blocks the shot!"
    if event.type is EventType.STEAL:
        return f"{player} steals the ball!"
    if event.type is EventType.ASSIST:
        return f"{player} assists!"
    if event.type is EventType.THREE_POINT_ATTEMPT:
        return f"{player} shoots from downtown"
    return f"{player} - {event.type.value}"


def extract_highlights(events: Sequence[GameEvent],
                       before: float = 3.0,
                       after: float = 2.0,
                       highlight_filter: Optional[HighlightFilter] = None) -> List[HighlightClip]:
    """
    Clips around significant events

    Args:
        events: Final game events
        before: Seconds of lead-in
        after: Seconds after the event
        highlight_filter: Optional player/type/team/confidence restriction

    Returns:
        One clip per qualifying event, in event order
    """
    min_confidence = MIN_HIGHLIGHT_CONFIDENCE
    if highlight_filter is not None and highlight_filter.min_confidence is not None:
        min_confidence = highlight_filter.min_confidence

    clips = []
    for event in events:
        if event.type not in HIGHLIGHT_EVENTS or event.confidence < min_confidence:
            continue
        clips.append(HighlightClip(
            id=f"highlight-{event.id}",
            event_id=event.id,
            event_type=event.type,
            team_id=event.team_id,
            player_id=event.player_id,
            start_time=max(0.0, event.timestamp - before),
            end_time=event.timestamp + after,
            description=describe(event),
        ))

    if highlight_filter is not None:
        clips = filter_highlights(clips, highlight_filter)
    return clips


def filter_highlights(clips: Sequence[HighlightClip], highlight_filter: HighlightFilter) -> List[HighlightClip]:
    filtered = list(clips)
    if highlight_filter.player_ids:
        filtered = [c for c in filtered if c.player_id in highlight_filter.player_ids]
    if highlight_filter.event_types:
        filtered = [c for c in filtered if c.event_type in highlight_filter.event_types]
    if highlight_filter.team_ids:
        filtered = [c for c in filtered if c.team_id in highlight_filter.team_ids]
    return filtered


def group_highlights_by_player(clips: Sequence[HighlightClip]) -> Dict[str, List[HighlightClip]]:
    grouped: Dict[str, List[HighlightClip]] = {}
    for clip in clips:
        grouped.setdefault(clip.player_id or "unknown", []).append(clip)
    return grouped


def merge_overlapping_highlights(clips: Sequence[HighlightClip], max_gap: float = 1.0) -> List[HighlightClip]:
    """Join clips that start within max_gap of the previous clip's end"""
    if not clips:
        return []

    ordered = sorted(clips, key=lambda c: c.start_time)
    merged = []
    current = ordered[0]
    for clip in ordered[1:]:
        if clip.start_time - current.end_time <= max_gap:
            current = HighlightClip(
                id=f"{current.id}-merged",
                event_id=current.event_id,
                event_type=current.event_type,
                team_id=current.team_id,
                player_id=current.player_id,
                start_time=current.start_time,
                end_time=max(current.end_time, clip.end_time),
                description=f"{current.description} + {clip.description}",
            )
        else:
            merged.append(current)
            current = clip
    merged.append(current)
    return merged


def top_highlights(clips: Sequence[HighlightClip], count: int = 10) -> List[HighlightClip]:
    """Most significant clips first: dunks, threes, blocks, scores, steals, assists"""
    ranked = sorted(clips, key=lambda c: -EVENT_PRIORITY.get(c.event_type, 0))
    return ranked[:count]
