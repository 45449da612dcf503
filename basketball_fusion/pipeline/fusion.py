"""
Event fusion pipeline - sequences every detector over one clip's signals
"""

import logging
import math
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from basketball_fusion.analytics.events import (
    MissedShotDetector, ReboundDetector, ThreePointEstimator, TurnoverDetector
)
from basketball_fusion.analytics.pose import ActionDetector
from basketball_fusion.analytics.scoring import create_score_strategy
from basketball_fusion.analytics.shots import ShotAttemptDetector
from basketball_fusion.analytics.smoothing import (
    clamp_to_clip, filter_low_confidence, finalize_events, smooth_events
)
from basketball_fusion.config import FusionSettings, get_settings
from basketball_fusion.core.constants import DEFAULT_CONFIDENCE_FLOOR
from basketball_fusion.core.exceptions import ConfigurationError, InsufficientSignalWarning
from basketball_fusion.core.models import GameEvent, SignalBundle


@dataclass
class FusionOptions:
    """Caller switches for one fusion run"""
    enable_3pt_estimation: bool = True
    enable_visual_scoring: bool = True
    confidence_floor: float = DEFAULT_CONFIDENCE_FLOOR

    def validate(self):
        """Reject out-of-range options"""
        floor = self.confidence_floor
        if not isinstance(floor, (int, float)) or isinstance(floor, bool) or not math.isfinite(floor):
            raise ConfigurationError(f"Confidence floor must be a number, got {floor!r}")
        if not 0.0 <= floor <= 1.0:
            raise ConfigurationError(f"Confidence floor must be within [0, 1], got {floor}")


@dataclass
class FusionDiagnostics:
    """What happened during the last run"""
    warnings: List[InsufficientSignalWarning] = field(default_factory=list)
    stage_counts: Dict[str, int] = field(default_factory=dict)
    raw_events: List[GameEvent] = field(default_factory=list)
    smoothed_count: int = 0
    output_count: int = 0
    processing_time: float = 0.0

    def to_dict(self) -> Dict:
        return {
            'warnings': [str(w) for w in self.warnings],
            'stage_counts': dict(self.stage_counts),
            'raw_events': len(self.raw_events),
            'smoothed_events': self.smoothed_count,
            'output_events': self.output_count,
            'processing_time': self.processing_time,
        }


class EventFusionPipeline:
    """Turn a clip's detection streams into a sorted list of game events"""

    def __init__(self,
                 options: Optional[FusionOptions] = None,
                 settings: Optional[FusionSettings] = None):
        """
        Initialize fusion pipeline

        Args:
            options: Caller switches (3pt estimation, scoring strategy, floor)
            settings: Detector thresholds; global settings when omitted

        Raises:
            ConfigurationError: Invalid options or settings
        """
        self.options = options or FusionOptions()
        self.options.validate()
        self.settings = settings or get_settings()
        self.settings.validate()
        self.logger = logging.getLogger(__name__)

        self._initialize_components()
        self.diagnostics = FusionDiagnostics()

    def _initialize_components(self):
        self.shot_detector = ShotAttemptDetector(self.settings)
        self.three_point_estimator = ThreePointEstimator(self.settings)
        self.score_strategy = create_score_strategy(self.options.enable_visual_scoring, self.settings)
        self.missed_shot_detector = MissedShotDetector(self.settings)
        self.rebound_detector = ReboundDetector(self.settings)
        self.turnover_detector = TurnoverDetector(self.settings)
        self.action_detector = ActionDetector(self.settings)

        self.detectors = [
            self.shot_detector, self.three_point_estimator, self.score_strategy,
            self.missed_shot_detector, self.rebound_detector, self.turnover_detector,
            self.action_detector,
        ]

    def run(self, signals: SignalBundle) -> List[GameEvent]:
        """
        Fuse every detection stream into game events

        Args:
            signals: Complete, already-validated detection streams of one clip

        Returns:
            Events above the confidence floor, sorted by timestamp
        """
        start_time = time.time()
        self.diagnostics = FusionDiagnostics()
        counts = self.diagnostics.stage_counts

        self.logger.info(
            f"Fusing clip: {len(signals.person_frames)} person, {len(signals.ball_frames)} ball, "
            f"{len(signals.pose_frames)} pose, {len(signals.hoop_frames)} hoop frames, "
            f"{len(signals.shot_candidates)} shot candidates, {len(signals.score_readings)} score readings"
        )

        shots = self.shot_detector.detect(signals)
        counts['shot_attempts'] = len(shots)

        three_point: List[GameEvent] = []
        if self.options.enable_3pt_estimation:
            three_point = self.three_point_estimator.detect(shots, [], signals)
            shots = ThreePointEstimator.tag_shots(shots, three_point)
        counts['three_point'] = len(three_point)

        # Foul shots type their attempts 1pt before scores are typed
        foul_shots = self.action_detector.detect_foul_shots(
            shots, signals.person_frames, signals.ball_frames
        )
        shots = ActionDetector.tag_foul_shots(shots, foul_shots)

        scores = self.score_strategy.detect_scores(shots, signals)
        counts['scores'] = len(scores)

        missed = self.missed_shot_detector.detect(shots, scores, signals)
        counts['missed_shots'] = len(missed)

        rebounds = self.rebound_detector.detect(missed, scores, signals)
        counts['rebounds'] = len(rebounds)

        turnovers = self.turnover_detector.detect(shots + missed, scores, signals)
        counts['turnovers'] = len(turnovers)

        actions = self.action_detector.detect_all(shots, scores, signals, foul_shots=foul_shots)
        counts['actions'] = len(actions)

        for detector in self.detectors:
            self.diagnostics.warnings.extend(detector.warnings)

        raw_events = shots + scores + missed + rebounds + turnovers + three_point + actions
        self.diagnostics.raw_events = raw_events

        # Smoothing must see the final, in-clip timestamps
        clipped = clamp_to_clip(raw_events, signals.clip_duration)
        smoothed = smooth_events(clipped, self.settings.temporal_window)
        self.diagnostics.smoothed_count = len(smoothed)

        kept = filter_low_confidence(smoothed, self.options.confidence_floor)
        events = finalize_events(kept, signals.clip_duration)
        self.diagnostics.output_count = len(events)
        self.diagnostics.processing_time = time.time() - start_time

        self.logger.info(
            f"Fusion complete: {len(raw_events)} raw -> {len(smoothed)} smoothed -> "
            f"{len(events)} events (floor {self.options.confidence_floor:.2f}, "
            f"{len(self.diagnostics.warnings)} fallbacks)"
        )
        return events


def fuse_events(signals: SignalBundle,
                options: Optional[FusionOptions] = None,
                settings: Optional[FusionSettings] = None) -> List[GameEvent]:
    """Run the fusion engine once over a clip's signals"""
    return EventFusionPipeline(options, settings).run(signals)
