"""
Base class for basketball event detectors
"""

import logging
from typing import List, Optional

from basketball_fusion.config import FusionSettings, get_settings
from basketball_fusion.core.exceptions import InsufficientSignalWarning


class EventDetector:
    """Base class for event detection over complete signal streams"""

    stage = "events"

    def __init__(self, settings: Optional[FusionSettings] = None):
        """
        Initialize event detector

        Args:
            settings: Fusion thresholds; global settings when omitted
        """
        self.settings = settings or get_settings()
        self.logger = logging.getLogger(self.__class__.__module__)
        self.warnings: List[InsufficientSignalWarning] = []

    def reset(self):
        """Clear fallback notices from a previous run"""
        self.warnings = []

    def _record_fallback(self, reason: str, fallback: str) -> InsufficientSignalWarning:
        """Log and keep a notice that a degraded strategy was used"""
        warning = InsufficientSignalWarning(stage=self.stage, reason=reason, fallback=fallback)
        self.warnings.append(warning)
        self.logger.warning(str(warning))
        return warning
