import json

import pytest

from basketball_fusion.config import FusionSettings, get_settings, reset_settings
from basketball_fusion.core.exceptions import ConfigurationError


def test_defaults_are_valid():
    settings = FusionSettings()
    settings.validate()
    assert settings.temporal_window == 1.0
    assert settings.missed_shot_window == 2.0


def test_save_and_load(tmp_path):
    path = tmp_path / "nested" / "settings.json"
    FusionSettings(rebound_window=3.0).save(str(path))
    assert FusionSettings.from_file(str(path)).rebound_window == 3.0


def test_unknown_keys_rejected(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"rebound_windw": 3.0}))
    with pytest.raises(ConfigurationError, match="rebound_windw"):
        FusionSettings.from_file(str(path))


@pytest.mark.parametrize("changes", [
    {"rebound_window": -1.0},
    {"ocr_weight": 1.5},
    {"presence_sample_interval": 0},
    {"team_majority": "most"},
    {"presence_sample_interval": 15.0},
    {"min_ball_frames": 5.5},
])
def test_invalid_values_rejected(changes):
    with pytest.raises(ConfigurationError):
        FusionSettings(**changes).validate()


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("BASKETBALL_FUSION_STEAL_WINDOW", "2.5")
    monkeypatch.setenv("BASKETBALL_FUSION_MIN_BALL_FRAMES", "8")
    settings = FusionSettings.from_env()
    assert settings.steal_window == 2.5
    assert settings.min_ball_frames == 8


def test_bad_environment_value(monkeypatch):
    monkeypatch.setenv("BASKETBALL_FUSION_STEAL_WINDOW", "soon")
    with pytest.raises(ConfigurationError):
        FusionSettings.from_env()


def test_global_settings_from_config_file(monkeypatch, tmp_path):
    path = tmp_path / "fusion.json"
    FusionSettings(temporal_window=0.5).save(str(path))
    monkeypatch.setenv("BASKETBALL_FUSION_CONFIG", str(path))
    reset_settings()

    assert get_settings().temporal_window == 0.5
    assert get_settings() is get_settings()


def test_float_for_whole_number_setting_rejected(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"presence_sample_interval": 15.0}))
    with pytest.raises(ConfigurationError, match="presence_sample_interval"):
        FusionSettings.from_file(str(path))
