"""
Shared factories for synthetic detection streams
"""

from typing import Dict, Optional, Sequence

import pytest

from basketball_fusion.config import FusionSettings, reset_settings
from basketball_fusion.core.constants import KEYPOINT_NAMES
from basketball_fusion.core.models import (
    BallDetection, BoundingBox, DetectionFrame, EventType, GameEvent, HoopRegion, Keypoint,
    PersonDetection, PoseDetection, ScoreReading, ShotCandidate, ShotType, SignalBundle, TeamAssignment,
    TeamCluster
)

FPS = 10.0


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Keep tests independent of any settings file or environment overrides"""
    monkeypatch.setenv("BASKETBALL_FUSION_CONFIG", str(tmp_path / "missing.json"))
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def settings():
    return FusionSettings()


def box_at(cx: float, cy: float, w: float = 40, h: float = 100) -> BoundingBox:
    """Box centered on (cx, cy)"""
    return BoundingBox(cx - w / 2, cy - h / 2, w, h)


def person(cx, cy, team_id="teamA", player_id=None, w=40, h=100, confidence=0.9):
    return PersonDetection(box_at(cx, cy, w, h), confidence, team_id, player_id)


def ball(cx, cy, confidence=0.8, size=20):
    return BallDetection(box_at(cx, cy, size, size), confidence)


def hoop(cx, cy, confidence=0.8, w=60, h=40):
    return HoopRegion(box_at(cx, cy, w, h), confidence)


def pose(cx, cy, team_id="teamA", player_id=None, w=40, h=100,
         overrides: Optional[Dict[str, tuple]] = None, keypoint_confidence=0.9):
    """
    Standing pose inside a box centered on (cx, cy)

    overrides maps keypoint names to (x, y) or (x, y, confidence)
    """
    top = cy - h / 2
    default_y = {
        "nose": top + 10, "left_eye": top + 8, "right_eye": top + 8,
        "left_ear": top + 10, "right_ear": top + 10,
        "left_shoulder": top + 30, "right_shoulder": top + 30,
        "left_elbow": top + 50, "right_elbow": top + 50,
        "left_wrist": top + 65, "right_wrist": top + 65,
        "left_hip": top + 60, "right_hip": top + 60,
        "left_knee": top + 80, "right_knee": top + 80,
        "left_ankle": top + 98, "right_ankle": top + 98,
    }
    keypoints = []
    for name in KEYPOINT_NAMES:
        x = cx - 10 if name.startswith("left") else cx + 10 if name.startswith("right") else cx
        values = (x, default_y[name], keypoint_confidence)
        if overrides and name in overrides:
            override = overrides[name]
            values = tuple(override) if len(override) == 3 else (override[0], override[1], keypoint_confidence)
        keypoints.append(Keypoint(*values))
    return PoseDetection(tuple(keypoints), box_at(cx, cy, w, h), team_id, player_id)


def frame(timestamp: float, detections: Sequence = (), frame_index: Optional[int] = None):
    index = frame_index if frame_index is not None else int(round(timestamp * FPS))
    return DetectionFrame(index, timestamp, tuple(detections))


def shot_candidate(timestamp, cx=640, cy=400, confidence=0.9, team_id="teamA", player_id=None):
    return ShotCandidate(timestamp=timestamp, bbox=box_at(cx, cy), confidence=confidence,
                         frame_index=int(round(timestamp * FPS)), player_id=player_id,
                         team_id=team_id, arm_elevation=0.8, handedness="right")


def shot_event(timestamp, team_id="teamA", confidence=0.7, position=(640.0, 400.0), **kwargs):
    return GameEvent(type=EventType.SHOT_ATTEMPT, team_id=team_id, timestamp=timestamp,
                     confidence=confidence, source="pose-analysis", position=position, **kwargs)


def score_event(timestamp, team_id="teamA", delta=2, confidence=0.8, shot_type=None):
    return GameEvent(type=EventType.SCORE, team_id=team_id, timestamp=timestamp,
                     confidence=confidence, source="ocr", score_delta=delta,
                     shot_type=shot_type or ShotType.from_points(delta))


def reading(timestamp, team_a, team_b, confidence=0.9):
    return ScoreReading(timestamp, team_a, team_b, confidence)


def two_teams():
    return TeamAssignment((TeamCluster((200, 30, 30), "teamA", 50),
                           TeamCluster((240, 240, 240), "teamB", 48)))


def bundle(**streams) -> SignalBundle:
    streams.setdefault("fps", FPS)
    return SignalBundle(**streams)
