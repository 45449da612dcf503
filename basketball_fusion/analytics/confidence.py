"""
Confidence model - the single place where evidence from several signals is blended
"""

from typing import NamedTuple, Optional, Sequence

import numpy as np

from basketball_fusion.core.constants import CORROBORATION_BONUS, CORROBORATION_THRESHOLD
from basketball_fusion.core.models import clamp_confidence


class Signal(NamedTuple):
    """One piece of evidence for an event"""
    name: str
    value: float
    weight: float


def combine(signals: Sequence[Signal],
            bonus: float = CORROBORATION_BONUS,
            threshold: float = CORROBORATION_THRESHOLD) -> float:
    """
    Combine heterogeneous signal confidences into one scalar

    Weights are normalized to sum to 1 and the weighted sum is taken. When at
    least two signals individually exceed ``threshold`` the ``bonus`` is added.
    The result is clamped to [0, 1].

    Args:
        signals: Evidence values with their relative weights
        bonus: Corroboration bonus for two or more strong signals
        threshold: Value a signal must exceed to count as strong

    Returns:
        Combined confidence; 0.0 when there is no weighted evidence
    """
    if not signals:
        return 0.0

    values = np.array([clamp_confidence(s.value) for s in signals], dtype=float)
    weights = np.array([max(0.0, s.weight) for s in signals], dtype=float)

    total_weight = weights.sum()
    if total_weight <= 0:
        return 0.0

    confidence = float(np.dot(values, weights / total_weight))

    strong = int(np.count_nonzero(values > threshold))
    if strong >= 2:
        confidence += bonus

    return clamp_confidence(confidence)


def scaled(confidence: float, factor: float, floor: Optional[float] = None) -> float:
    """Scale a single confidence, optionally raising it to a floor, clamped to [0, 1]"""
    value = confidence * factor
    if floor is not None:
        value = max(floor, value)
    return clamp_confidence(value)
