"""
Error taxonomy for the fusion engine
"""

from dataclasses import dataclass


class FusionError(Exception):
    """Base class for fusion engine errors"""


class InputDataError(FusionError, ValueError):
    """Malformed geometry or timestamps at the signal-ingestion boundary"""


class ConfigurationError(FusionError, ValueError):
    """Invalid options or settings, rejected at call time"""


class InvalidEventError(FusionError, ValueError):
    """Game event built with fields its kind does not allow"""


@dataclass(frozen=True)
class InsufficientSignalWarning:
    """Non-fatal notice that a detector switched to a fallback strategy.

    Recorded on the pipeline diagnostics and logged; never raised.
    """
    stage: str
    reason: str
    fallback: str

    def __str__(self) -> str:
        return f"[{self.stage}] {self.reason} -> {self.fallback}"
