"""
Basketball analytics: detectors, confidence model, smoothing and summaries
"""

from .confidence import Signal, combine, scaled
from .events import (
    EventDetector, MissedShotDetector, ReboundDetector, TurnoverDetector, ThreePointEstimator
)
from .shots import ShotAttemptDetector
from .scoring import OcrScoreDetector, VisualScoreDetector, create_score_strategy
from .possession import PossessionTracker
from .pose import ActionDetector
from .smoothing import smooth_events, filter_low_confidence, finalize_events, clamp_to_clip
from .statistics import PlayerSummary, TeamSummary, generate_player_statistics, generate_team_summary
from .highlights import HighlightClip, HighlightFilter, extract_highlights

__all__ = [
    'Signal', 'combine', 'scaled',
    'EventDetector', 'MissedShotDetector', 'ReboundDetector', 'TurnoverDetector', 'ThreePointEstimator',
    'ShotAttemptDetector',
    'OcrScoreDetector', 'VisualScoreDetector', 'create_score_strategy',
    'PossessionTracker', 'ActionDetector',
    'smooth_events', 'filter_low_confidence', 'finalize_events', 'clamp_to_clip',
    'PlayerSummary', 'TeamSummary', 'generate_player_statistics', 'generate_team_summary',
    'HighlightClip', 'HighlightFilter', 'extract_highlights'
]
