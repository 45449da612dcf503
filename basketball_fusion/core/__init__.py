"""
Core domain models and interfaces for basketball event fusion
"""

from .models import (
    BoundingBox, Keypoint, PersonDetection, BallDetection, PoseDetection,
    HoopRegion, DetectionFrame, PersonFrame, BallFrame, PoseFrame, HoopFrame,
    ScoreReading, ShotCandidate, TeamCluster, TeamAssignment,
    EventType, ShotType, GameEvent, SignalBundle, clamp_confidence
)
from .interfaces import TeamOracle, ScoreStrategy, EventRule
from .exceptions import (
    FusionError, InputDataError, ConfigurationError, InvalidEventError,
    InsufficientSignalWarning
)
from .constants import (
    TEAM_A, TEAM_B, UNKNOWN_TEAM, DEFAULT_TEAM, KEYPOINT_NAMES,
    COURT_WIDTH, COURT_HEIGHT
)

__all__ = [
    # Models
    'BoundingBox', 'Keypoint', 'PersonDetection', 'BallDetection', 'PoseDetection',
    'HoopRegion', 'DetectionFrame', 'PersonFrame', 'BallFrame', 'PoseFrame', 'HoopFrame',
    'ScoreReading', 'ShotCandidate', 'TeamCluster', 'TeamAssignment',
    'EventType', 'ShotType', 'GameEvent', 'SignalBundle', 'clamp_confidence',
    # Interfaces
    'TeamOracle', 'ScoreStrategy', 'EventRule',
    # Errors
    'FusionError', 'InputDataError', 'ConfigurationError', 'InvalidEventError',
    'InsufficientSignalWarning',
    # Constants
    'TEAM_A', 'TEAM_B', 'UNKNOWN_TEAM', 'DEFAULT_TEAM', 'KEYPOINT_NAMES',
    'COURT_WIDTH', 'COURT_HEIGHT'
]
