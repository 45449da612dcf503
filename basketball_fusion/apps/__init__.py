"""
Application interfaces for basketball event fusion
"""

from .cli import cli

__all__ = ['cli']
