"""
Utility functions
"""

from .geometry import point_distance, nearest
from .frames import sort_frames, frames_within, frames_between, nearest_frame
from .logging import setup_logging

__all__ = [
    'point_distance', 'nearest',
    'sort_frames', 'frames_within', 'frames_between', 'nearest_frame',
    'setup_logging'
]
