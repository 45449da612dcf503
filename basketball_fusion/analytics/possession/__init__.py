"""
Possession tracking and analysis
"""

from .tracker import PossessionTracker, PossessionSample, PossessionChange

__all__ = ['PossessionTracker', 'PossessionSample', 'PossessionChange']
