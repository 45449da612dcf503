"""
Score detection strategies
"""

from typing import Optional

from basketball_fusion.config import FusionSettings
from basketball_fusion.core.interfaces import ScoreStrategy

from .ocr import OcrScoreDetector
from .visual import VisualScoreDetector, find_hoop_crossing, estimated_make
from .shot_type import infer_shot_type, ShotTypeEstimate


def create_score_strategy(visual: bool, settings: Optional[FusionSettings] = None) -> ScoreStrategy:
    """Visual ball-through-hoop scoring, or scoreboard OCR"""
    return VisualScoreDetector(settings) if visual else OcrScoreDetector(settings)


__all__ = [
    'OcrScoreDetector', 'VisualScoreDetector', 'create_score_strategy',
    'find_hoop_crossing', 'estimated_make', 'infer_shot_type', 'ShotTypeEstimate'
]
