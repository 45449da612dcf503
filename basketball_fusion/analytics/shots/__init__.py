"""
Shot attempt detection
"""

from .detector import ShotAttemptDetector

__all__ = ['ShotAttemptDetector']
