"""
Core data models for basketball event fusion - signal records and game events
"""

import dataclasses
import hashlib
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, Iterable, List, Optional, Sequence, Tuple, TypeVar

import numpy as np

from .constants import (
    COURT_HEIGHT, COURT_WIDTH, DEFAULT_TEAM, KEYPOINT_NAMES, SHOT_TYPE_POINTS
)
from .exceptions import InputDataError, InvalidEventError

T = TypeVar("T")


def _is_finite(*values: float) -> bool:
    return all(isinstance(v, (int, float)) and math.isfinite(v) for v in values)


def clamp_confidence(value: float) -> float:
    """Clamp a confidence to [0, 1]; non-finite values become 0"""
    if value is None or not math.isfinite(value):
        return 0.0
    return float(min(1.0, max(0.0, value)))


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box in pixel space of the sampled frame"""
    x: float
    y: float
    w: float
    h: float

    def __post_init__(self):
        if not _is_finite(self.x, self.y, self.w, self.h):
            raise InputDataError(f"Non-finite bounding box: {self.as_list()}")
        if self.w < 0 or self.h < 0:
            raise InputDataError(f"Negative bounding box dimensions: {self.as_list()}")

    @classmethod
    def from_xywh(cls, values: Sequence[float]) -> 'BoundingBox':
        """Build from an [x, y, w, h] sequence"""
        if values is None or len(values) != 4:
            raise InputDataError(f"Bounding box needs 4 values, got {values!r}")
        try:
            x, y, w, h = (float(v) for v in values)
        except (TypeError, ValueError) as e:
            raise InputDataError(f"Bounding box values must be numeric: {values!r}") from e
        return cls(x, y, w, h)

    @property
    def center(self) -> np.ndarray:
        """Get center point of bbox"""
        return np.array([self.x + self.w / 2, self.y + self.h / 2])

    @property
    def area(self) -> float:
        return self.w * self.h

    @property
    def x2(self) -> float:
        return self.x + self.w

    @property
    def y2(self) -> float:
        return self.y + self.h

    def as_list(self) -> List[float]:
        return [self.x, self.y, self.w, self.h]


@dataclass(frozen=True)
class Keypoint:
    """Single pose keypoint"""
    x: float
    y: float
    confidence: float = 0.0


@dataclass(frozen=True)
class PersonDetection:
    """Person box with optional team and jersey attribution"""
    bbox: BoundingBox
    confidence: float
    team_id: Optional[str] = None
    player_id: Optional[str] = None

    @property
    def center(self) -> np.ndarray:
        return self.bbox.center


@dataclass(frozen=True)
class BallDetection:
    """Ball box; frames frequently carry none"""
    bbox: BoundingBox
    confidence: float

    @property
    def center(self) -> np.ndarray:
        return self.bbox.center


@dataclass(frozen=True)
class PoseDetection:
    """17-keypoint body pose"""
    keypoints: Tuple[Keypoint, ...]
    bbox: BoundingBox
    team_id: Optional[str] = None
    player_id: Optional[str] = None

    def keypoint(self, name: str) -> Optional[Keypoint]:
        """Get a keypoint by COCO name, None when missing"""
        try:
            idx = KEYPOINT_NAMES.index(name)
        except ValueError:
            return None
        if idx >= len(self.keypoints):
            return None
        return self.keypoints[idx]

    @property
    def center(self) -> np.ndarray:
        return self.bbox.center


@dataclass(frozen=True)
class HoopRegion:
    """Detected hoop/backboard region"""
    bbox: BoundingBox
    confidence: float

    @property
    def mid_y(self) -> float:
        return self.bbox.y + self.bbox.h / 2


@dataclass(frozen=True)
class DetectionFrame(Generic[T]):
    """One sampled video frame worth of detections for a single modality"""
    frame_index: int
    timestamp: float
    detections: Tuple[T, ...] = ()
    width: float = COURT_WIDTH
    height: float = COURT_HEIGHT

    def __post_init__(self):
        if not _is_finite(self.timestamp) or self.timestamp < 0:
            raise InputDataError(f"Invalid timestamp {self.timestamp!r} at frame {self.frame_index}")
        if not _is_finite(self.width, self.height) or self.width <= 0 or self.height <= 0:
            raise InputDataError(f"Invalid frame size {self.width}x{self.height}")
        if not isinstance(self.detections, tuple):
            object.__setattr__(self, 'detections', tuple(self.detections))

    @classmethod
    def at(cls, frame_index: int, fps: float, detections: Iterable[T] = (),
           width: float = COURT_WIDTH, height: float = COURT_HEIGHT) -> 'DetectionFrame[T]':
        """Build a frame whose timestamp derives from the sampling rate"""
        if not _is_finite(fps) or fps <= 0:
            raise InputDataError(f"Sampling rate must be positive, got {fps!r}")
        return cls(frame_index, frame_index / fps, tuple(detections), width, height)

    @property
    def is_empty(self) -> bool:
        return len(self.detections) == 0

    def normalize(self, point: np.ndarray) -> Tuple[float, float]:
        """Map a pixel point to 0-1 frame coordinates"""
        return float(point[0] / self.width), float(point[1] / self.height)


PersonFrame = DetectionFrame[PersonDetection]
BallFrame = DetectionFrame[BallDetection]
PoseFrame = DetectionFrame[PoseDetection]
HoopFrame = DetectionFrame[HoopRegion]


@dataclass(frozen=True)
class ScoreReading:
    """Scoreboard reading from OCR or visual score detection"""
    timestamp: float
    team_a: int
    team_b: int
    confidence: float
    frame_index: int = 0

    def __post_init__(self):
        if not _is_finite(self.timestamp) or self.timestamp < 0:
            raise InputDataError(f"Invalid score reading timestamp {self.timestamp!r}")


@dataclass(frozen=True)
class ShotCandidate:
    """Pose-derived shooting-form candidate"""
    timestamp: float
    bbox: BoundingBox
    confidence: float
    frame_index: int = 0
    player_id: Optional[str] = None
    team_id: Optional[str] = None
    arm_elevation: float = 0.0
    handedness: str = "unknown"    # left, right, both, unknown
    keypoints: Tuple[Keypoint, ...] = ()

    def __post_init__(self):
        if not _is_finite(self.timestamp) or self.timestamp < 0:
            raise InputDataError(f"Invalid shot candidate timestamp {self.timestamp!r}")


@dataclass(frozen=True)
class TeamCluster:
    """Jersey colour cluster produced by team clustering"""
    centroid: Tuple[int, int, int]
    team_id: str
    sample_count: int = 0


@dataclass(frozen=True)
class TeamAssignment:
    """Team-cluster oracle: nearest-centroid lookup over jersey colours"""
    clusters: Tuple[TeamCluster, ...] = ()

    @property
    def team_ids(self) -> List[str]:
        return sorted({c.team_id for c in self.clusters})

    @property
    def default_team_id(self) -> str:
        ids = self.team_ids
        return ids[0] if ids else DEFAULT_TEAM

    def nearest_team(self, color: Sequence[float]) -> Optional[str]:
        """Team whose centroid is closest to an RGB colour"""
        if not self.clusters:
            return None
        centroids = np.array([c.centroid for c in self.clusters], dtype=float)
        distances = np.linalg.norm(centroids - np.asarray(color, dtype=float), axis=1)
        return self.clusters[int(np.argmin(distances))].team_id

    def opponent_of(self, team_id: str) -> Optional[str]:
        others = [t for t in self.team_ids if t != team_id]
        return others[0] if len(others) == 1 else None


class EventType(Enum):
    """Kinds of game events emitted by the fusion engine"""
    SHOT_ATTEMPT = "shot_attempt"
    MISSED_SHOT = "missed_shot"
    SCORE = "score"
    OFFENSIVE_REBOUND = "offensive_rebound"
    DEFENSIVE_REBOUND = "defensive_rebound"
    TURNOVER = "turnover"
    STEAL = "steal"
    THREE_POINT_ATTEMPT = "three_point_attempt"
    LONG_DISTANCE_ATTEMPT = "long_distance_attempt"
    BLOCK = "block"
    PASS = "pass"
    DUNK = "dunk"
    LAYUP = "layup"
    ASSIST = "assist"
    FOUL_SHOT = "foul_shot"
    DRIBBLE = "dribble"


class ShotType(Enum):
    """Point class of a shot"""
    ONE_POINT = "1pt"
    TWO_POINT = "2pt"
    THREE_POINT = "3pt"

    @property
    def points(self) -> int:
        return SHOT_TYPE_POINTS[self.value]

    @classmethod
    def from_points(cls, points: int) -> 'ShotType':
        for shot_type in cls:
            if shot_type.points == points:
                return shot_type
        raise InvalidEventError(f"No shot type scores {points} points")


# Kinds allowed to carry a shot type
SHOT_TYPED_EVENTS = frozenset({
    EventType.SCORE, EventType.SHOT_ATTEMPT, EventType.MISSED_SHOT,
    EventType.FOUL_SHOT, EventType.THREE_POINT_ATTEMPT, EventType.LONG_DISTANCE_ATTEMPT,
})


@dataclass(frozen=True)
class GameEvent:
    """Semantic game event; immutable once created"""
    type: EventType
    team_id: str
    timestamp: float
    confidence: float
    source: str
    player_id: Optional[str] = None
    score_delta: Optional[int] = None
    shot_type: Optional[ShotType] = None
    notes: Optional[str] = None
    position: Optional[Tuple[float, float]] = None
    id: str = ""

    def __post_init__(self):
        if not isinstance(self.type, EventType):
            object.__setattr__(self, 'type', EventType(self.type))
        if self.shot_type is not None and not isinstance(self.shot_type, ShotType):
            object.__setattr__(self, 'shot_type', ShotType(self.shot_type))
        if not self.team_id:
            raise InvalidEventError(f"{self.type.value} event needs a team id")
        if not _is_finite(self.timestamp) or self.timestamp < 0:
            raise InvalidEventError(f"Invalid event timestamp {self.timestamp!r}")
        object.__setattr__(self, 'timestamp', float(self.timestamp))
        object.__setattr__(self, 'confidence', clamp_confidence(self.confidence))
        self._validate_kind_fields()
        if not self.id:
            object.__setattr__(self, 'id', self._derive_id())

    def _validate_kind_fields(self):
        if self.shot_type is not None and self.type not in SHOT_TYPED_EVENTS:
            raise InvalidEventError(f"{self.type.value} events cannot carry a shot type")
        if self.type is EventType.SCORE:
            if self.score_delta not in (1, 2, 3):
                raise InvalidEventError(f"Score delta must be 1, 2 or 3, got {self.score_delta!r}")
            if self.shot_type is None or self.shot_type.points != self.score_delta:
                raise InvalidEventError(
                    f"Score delta {self.score_delta} inconsistent with shot type {self.shot_type}"
                )
        elif self.score_delta is not None:
            raise InvalidEventError(f"{self.type.value} events cannot carry a score delta")

    def _derive_id(self) -> str:
        payload = repr((
            self.type.value, self.team_id, self.player_id, round(self.timestamp, 6),
            round(self.confidence, 6), self.source, self.score_delta,
            self.shot_type.value if self.shot_type else None, self.notes, self.position,
        ))
        digest = hashlib.sha1(payload.encode("utf-8")).hexdigest()[:8]
        return f"{self.type.value}-{int(round(self.timestamp * 1000))}-{digest}"

    def with_changes(self, **changes) -> 'GameEvent':
        """Copy with updated fields (events are never mutated)"""
        return dataclasses.replace(self, **changes)

    @property
    def points(self) -> int:
        return self.score_delta or 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        data = {
            'id': self.id,
            'type': self.type.value,
            'teamId': self.team_id,
            'timestamp': self.timestamp,
            'confidence': self.confidence,
            'source': self.source,
        }
        if self.player_id is not None:
            data['playerId'] = self.player_id
        if self.score_delta is not None:
            data['scoreDelta'] = self.score_delta
        if self.shot_type is not None:
            data['shotType'] = self.shot_type.value
        if self.notes:
            data['notes'] = self.notes
        if self.position is not None:
            data['position'] = list(self.position)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GameEvent':
        position = data.get('position')
        return cls(
            type=EventType(data['type']),
            team_id=data['teamId'],
            timestamp=data['timestamp'],
            confidence=data['confidence'],
            source=data.get('source', ''),
            player_id=data.get('playerId'),
            score_delta=data.get('scoreDelta'),
            shot_type=ShotType(data['shotType']) if data.get('shotType') else None,
            notes=data.get('notes'),
            position=tuple(position) if position is not None else None,
            id=data.get('id', ''),
        )


@dataclass
class SignalBundle:
    """Every detection stream of one clip, fully materialized"""
    fps: float
    person_frames: List[PersonFrame] = field(default_factory=list)
    ball_frames: List[BallFrame] = field(default_factory=list)
    pose_frames: List[PoseFrame] = field(default_factory=list)
    shot_candidates: List[ShotCandidate] = field(default_factory=list)
    score_readings: List[ScoreReading] = field(default_factory=list)
    hoop_frames: List[HoopFrame] = field(default_factory=list)
    team_assignment: TeamAssignment = field(default_factory=TeamAssignment)
    duration: Optional[float] = None

    def __post_init__(self):
        if not _is_finite(self.fps) or self.fps <= 0:
            raise InputDataError(f"Sampling rate must be positive, got {self.fps!r}")
        if self.duration is not None and (not _is_finite(self.duration) or self.duration < 0):
            raise InputDataError(f"Invalid clip duration {self.duration!r}")

    @property
    def clip_duration(self) -> float:
        """Known duration, else the latest timestamp seen in any stream"""
        if self.duration is not None:
            return float(self.duration)
        timestamps = [0.0]
        for frames in (self.person_frames, self.ball_frames, self.pose_frames, self.hoop_frames):
            timestamps.extend(f.timestamp for f in frames)
        timestamps.extend(c.timestamp for c in self.shot_candidates)
        timestamps.extend(r.timestamp for r in self.score_readings)
        return float(max(timestamps))

    @property
    def ball_frames_with_detections(self) -> int:
        return sum(1 for f in self.ball_frames if not f.is_empty)
