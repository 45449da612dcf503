"""
Pose-based action recognition
"""

from .actions import ActionDetector, ACTION_THRESHOLDS, count_extrema, wrist_raised

__all__ = ['ActionDetector', 'ACTION_THRESHOLDS', 'count_extrema', 'wrist_raised']
