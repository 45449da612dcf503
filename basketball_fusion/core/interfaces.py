"""
Abstract interfaces for fusion components
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from .models import BoundingBox, GameEvent, SignalBundle


class TeamOracle(ABC):
    """Abstract interface for resolving a box to a team"""

    @abstractmethod
    def resolve(self, bbox: BoundingBox, timestamp: float) -> Optional[str]:
        """Team of the player occupying bbox at timestamp, None if unknown"""
        pass


class ScoreStrategy(ABC):
    """Abstract interface for score detection"""

    name: str = "score"

    @abstractmethod
    def detect_scores(self,
                      shot_events: List[GameEvent],
                      signals: SignalBundle) -> List[GameEvent]:
        """Detect score events, attributing team, player and shot type"""
        pass


class EventRule(ABC):
    """Abstract interface for a derived-event rule over the signal streams"""

    @abstractmethod
    def detect(self,
               shot_events: List[GameEvent],
               score_events: List[GameEvent],
               signals: SignalBundle) -> List[GameEvent]:
        """Detect derived events; empty input yields an empty list"""
        pass
