"""
Derived game event detection
"""

from .detector import EventDetector
from .missed import MissedShotDetector
from .rebounds import ReboundDetector
from .turnovers import TurnoverDetector
from .three_point import ThreePointEstimator, distance_confidence

__all__ = [
    'EventDetector', 'MissedShotDetector', 'ReboundDetector', 'TurnoverDetector',
    'ThreePointEstimator', 'distance_confidence'
]
