"""
Per-player and per-team box score statistics from game events
"""

from collections import Counter
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Sequence

from basketball_fusion.core.models import EventType, GameEvent, ShotType


@dataclass
class PlayerSummary:
    """Box score line for one identified player"""
    player_id: str
    points: int = 0
    two_point_scores: int = 0
    three_point_scores: int = 0
    foul_shots: int = 0
    shot_attempts: int = 0
    two_point_attempts: int = 0
    three_point_attempts: int = 0
    hit_rate: int = 0           # percent, rounded
    dunks: int = 0
    layups: int = 0
    blocks: int = 0
    off_rebounds: int = 0
    def_rebounds: int = 0
    assists: int = 0
    turnovers: int = 0
    steals: int = 0
    passes: int = 0
    dribbles: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class TeamSummary:
    """Team totals with the per-player breakdown"""
    team_id: str
    points: int = 0
    two_point_scores: int = 0
    three_point_scores: int = 0
    foul_shots: int = 0
    shot_attempts: int = 0
    three_point_attempts: int = 0
    off_rebounds: int = 0
    def_rebounds: int = 0
    turnovers: int = 0
    steals: int = 0
    blocks: int = 0
    dunks: int = 0
    layups: int = 0
    assists: int = 0
    passes: int = 0
    dribbles: int = 0
    players: List[PlayerSummary] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['players'] = [p.to_dict() for p in self.players]
        return data


def _scores_by_type(events: Sequence[GameEvent]) -> Counter:
    return Counter(e.shot_type for e in events if e.type is EventType.SCORE)


def _count(events: Sequence[GameEvent], event_type: EventType) -> int:
    return sum(1 for e in events if e.type is event_type)


def generate_player_statistics(events: Sequence[GameEvent], team_id: str) -> List[PlayerSummary]:
    """
    Box score lines for every identified player of a team

    Events without a player id are not attributed to anyone.

    Returns:
        Summaries sorted by points, highest first
    """
    by_player: Dict[str, List[GameEvent]] = {}
    for event in events:
        if event.team_id != team_id or not event.player_id:
            continue
        by_player.setdefault(event.player_id, []).append(event)

    summaries = []
    for player_id, player_events in by_player.items():
        scores = _scores_by_type(player_events)
        attempts = [e for e in player_events if e.type is EventType.SHOT_ATTEMPT]
        total_scores = sum(scores.values())

        summaries.append(PlayerSummary(
            player_id=player_id,
            points=sum(e.points for e in player_events if e.type is EventType.SCORE),
            two_point_scores=scores[ShotType.TWO_POINT],
            three_point_scores=scores[ShotType.THREE_POINT],
            foul_shots=scores[ShotType.ONE_POINT],
            shot_attempts=len(attempts),
            two_point_attempts=sum(1 for e in attempts if e.shot_type in (None, ShotType.TWO_POINT)),
            three_point_attempts=sum(1 for e in attempts if e.shot_type is ShotType.THREE_POINT),
            hit_rate=round(100 * total_scores / len(attempts)) if attempts else 0,
            dunks=_count(player_events, EventType.DUNK),
            layups=_count(player_events, EventType.LAYUP),
            blocks=_count(player_events, EventType.BLOCK),
            off_rebounds=_count(player_events, EventType.OFFENSIVE_REBOUND),
            def_rebounds=_count(player_events, EventType.DEFENSIVE_REBOUND),
            assists=_count(player_events, EventType.ASSIST),
            turnovers=_count(player_events, EventType.TURNOVER),
            steals=_count(player_events, EventType.STEAL),
            passes=_count(player_events, EventType.PASS),
            dribbles=_count(player_events, EventType.DRIBBLE),
        ))

    # Stable on ties: first-seen player stays ahead
    summaries.sort(key=lambda s: -s.points)
    return summaries


def generate_team_summary(events: Sequence[GameEvent], team_id: str) -> TeamSummary:
    """Team totals over all events credited to team_id"""
    team_events = [e for e in events if e.team_id == team_id]
    scores = _scores_by_type(team_events)

    return TeamSummary(
        team_id=team_id,
        points=sum(e.points for e in team_events if e.type is EventType.SCORE),
        two_point_scores=scores[ShotType.TWO_POINT],
        three_point_scores=scores[ShotType.THREE_POINT],
        foul_shots=scores[ShotType.ONE_POINT],
        shot_attempts=_count(team_events, EventType.SHOT_ATTEMPT),
        three_point_attempts=sum(1 for e in team_events
                                 if e.type is EventType.SHOT_ATTEMPT and e.shot_type is ShotType.THREE_POINT),
        off_rebounds=_count(team_events, EventType.OFFENSIVE_REBOUND),
        def_rebounds=_count(team_events, EventType.DEFENSIVE_REBOUND),
        turnovers=_count(team_events, EventType.TURNOVER),
        steals=_count(team_events, EventType.STEAL),
        blocks=_count(team_events, EventType.BLOCK),
        dunks=_count(team_events, EventType.DUNK),
        layups=_count(team_events, EventType.LAYUP),
        assists=_count(team_events, EventType.ASSIST),
        passes=_count(team_events, EventType.PASS),
        dribbles=_count(team_events, EventType.DRIBBLE),
        players=generate_player_statistics(events, team_id),
    )
