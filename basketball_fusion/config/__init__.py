"""
Configuration management
"""

from .settings import FusionSettings, get_settings, reset_settings

__all__ = ['FusionSettings', 'get_settings', 'reset_settings']
