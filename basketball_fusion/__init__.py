"""
Basketball Event Fusion

Turns per-frame detection streams of a basketball clip into one
temporally-coherent, confidence-scored list of game events:
- Shot attempts, scores and misses
- Rebounds, turnovers and steals
- Three-point attempts
- Blocks, passes, assists, dunks, layups, dribbles and foul shots
"""

__version__ = "1.0.0"

# Import main components for easy access
from .core import (
    BoundingBox, PersonDetection, BallDetection, PoseDetection, HoopRegion,
    DetectionFrame, ScoreReading, ShotCandidate, TeamAssignment, TeamCluster,
    EventType, ShotType, GameEvent, SignalBundle,
    FusionError, InputDataError, ConfigurationError, InsufficientSignalWarning
)

from .config import FusionSettings, get_settings

from .pipeline import EventFusionPipeline, FusionOptions, fuse_events, ingest_signals

__all__ = [
    # Core models
    'BoundingBox', 'PersonDetection', 'BallDetection', 'PoseDetection', 'HoopRegion',
    'DetectionFrame', 'ScoreReading', 'ShotCandidate', 'TeamAssignment', 'TeamCluster',
    'EventType', 'ShotType', 'GameEvent', 'SignalBundle',

    # Errors
    'FusionError', 'InputDataError', 'ConfigurationError', 'InsufficientSignalWarning',

    # Configuration
    'FusionSettings', 'get_settings',

    # Pipeline
    'EventFusionPipeline', 'FusionOptions', 'fuse_events', 'ingest_signals',

    # Version
    '__version__'
]
