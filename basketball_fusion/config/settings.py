"""
Global settings management
"""

import os
from dataclasses import dataclass, asdict, fields
from typing import Optional
import json
import logging
from pathlib import Path

from basketball_fusion.core import constants as C
from basketball_fusion.core.exceptions import ConfigurationError


@dataclass
class FusionSettings:
    """Thresholds, windows and weights used by the fusion engine"""

    # Temporal windows (seconds)
    temporal_window: float = C.TEMPORAL_WINDOW
    score_attribution_window: float = C.SCORE_ATTRIBUTION_WINDOW
    rebound_window: float = C.REBOUND_WINDOW
    missed_shot_window: float = C.MISSED_SHOT_WINDOW
    shot_type_lookback: float = C.SHOT_TYPE_LOOKBACK
    frame_match_tolerance: float = C.FRAME_MATCH_TOLERANCE

    # Shot attempts
    ball_motion_window: float = C.BALL_MOTION_WINDOW
    shot_ball_proximity: float = C.SHOT_BALL_PROXIMITY
    team_match_distance: float = C.TEAM_MATCH_DISTANCE
    pose_weight: float = C.POSE_WEIGHT
    ball_motion_weight: float = C.BALL_MOTION_WEIGHT
    shot_corroboration_bonus: float = C.SHOT_CORROBORATION_BONUS
    shot_confidence_floor: float = C.SHOT_CONFIDENCE_FLOOR
    min_upward_motion: float = C.MIN_UPWARD_MOTION
    presence_sample_interval: int = C.PRESENCE_SAMPLE_INTERVAL
    presence_edge_margin: int = C.PRESENCE_EDGE_MARGIN

    # Scores
    hoop_region_max_y: float = C.HOOP_REGION_MAX_Y
    team_majority: float = C.TEAM_MAJORITY
    ocr_weight: float = C.OCR_WEIGHT
    team_attribution_weight: float = C.TEAM_ATTRIBUTION_WEIGHT
    ocr_stability_bonus: float = C.OCR_STABILITY_BONUS
    hoop_search_window: float = C.HOOP_SEARCH_WINDOW
    visual_score_factor: float = C.VISUAL_SCORE_FACTOR
    estimated_make_rate: float = C.ESTIMATED_MAKE_RATE
    estimated_score_confidence: float = C.ESTIMATED_SCORE_CONFIDENCE

    # Rebounds
    rebound_proximity: float = C.REBOUND_PROXIMITY
    proximity_weight: float = C.PROXIMITY_WEIGHT
    team_id_weight: float = C.TEAM_ID_WEIGHT
    inferred_rebound_confidence: float = C.INFERRED_REBOUND_CONFIDENCE

    # Possession / turnovers
    possession_proximity: float = C.POSSESSION_PROXIMITY
    steal_window: float = C.STEAL_WINDOW
    min_ball_frames: int = C.MIN_BALL_FRAMES
    game_flow_min_gap: float = C.GAME_FLOW_MIN_GAP
    game_flow_max_gap: float = C.GAME_FLOW_MAX_GAP
    inferred_turnover_confidence: float = C.INFERRED_TURNOVER_CONFIDENCE

    # Confidence model
    corroboration_threshold: float = C.CORROBORATION_THRESHOLD
    corroboration_bonus: float = C.CORROBORATION_BONUS

    @classmethod
    def from_file(cls, filepath: str) -> 'FusionSettings':
        """Load settings from JSON file"""
        with open(filepath, 'r') as f:
            data = json.load(f)
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown settings: {sorted(unknown)}")
        settings = cls(**data)
        settings.validate()
        return settings

    @classmethod
    def from_env(cls) -> 'FusionSettings':
        """Load settings from environment variables"""
        settings = cls()

        # Override from environment
        for field in fields(settings):
            env_key = f"BASKETBALL_FUSION_{field.name.upper()}"
            if env_key in os.environ:
                value = os.environ[env_key]
                try:
                    if field.type == int:
                        value = int(value)
                    elif field.type == float:
                        value = float(value)
                except ValueError as e:
                    raise ConfigurationError(f"{env_key}={value!r} is not a number") from e
                setattr(settings, field.name, value)

        settings.validate()
        return settings

    def validate(self):
        """Reject values no detector can work with"""
        for field in fields(self):
            value = getattr(self, field.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigurationError(f"{field.name} must be a number, got {value!r}")
            if field.type == int and not isinstance(value, int):
                raise ConfigurationError(f"{field.name} must be a whole number, got {value!r}")
            if value < 0:
                raise ConfigurationError(f"{field.name} must be non-negative, got {value}")
        for name in ('pose_weight', 'ball_motion_weight', 'ocr_weight', 'team_attribution_weight',
                     'proximity_weight', 'team_id_weight', 'corroboration_threshold',
                     'shot_confidence_floor', 'team_majority', 'estimated_make_rate',
                     'hoop_region_max_y'):
            if getattr(self, name) > 1.0:
                raise ConfigurationError(f"{name} must lie in [0, 1], got {getattr(self, name)}")
        if self.presence_sample_interval < 1:
            raise ConfigurationError("presence_sample_interval must be at least 1")

    def save(self, filepath: str):
        """Save settings to JSON file"""
        Path(filepath).parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, 'w') as f:
            json.dump(asdict(self), f, indent=2)


# Global settings instance
_settings: Optional[FusionSettings] = None


def get_settings() -> FusionSettings:
    """Get global settings instance"""
    global _settings

    if _settings is None:
        # Try loading from file first
        config_file = os.environ.get("BASKETBALL_FUSION_CONFIG", "config/fusion_settings.json")
        if os.path.exists(config_file):
            logging.getLogger(__name__).info(f"Loading fusion settings from {config_file}")
            _settings = FusionSettings.from_file(config_file)
        else:
            # Load from environment or use defaults
            _settings = FusionSettings.from_env()

    return _settings


def reset_settings():
    """Reset settings (mainly for testing)"""
    global _settings
    _settings = None
