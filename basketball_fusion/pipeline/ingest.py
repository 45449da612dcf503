"""
Signal ingestion - builds validated signal streams from raw detector output

Malformed detections (NaN or negative geometry, bad timestamps, missing
fields) are dropped here with a warning so the fusion engine never sees them.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, TypeVar

from basketball_fusion.core.constants import COURT_HEIGHT, COURT_WIDTH
from basketball_fusion.core.exceptions import InputDataError
from basketball_fusion.core.models import (
    BallDetection, BoundingBox, DetectionFrame, HoopRegion, Keypoint, PersonDetection,
    PoseDetection, ScoreReading, ShotCandidate, SignalBundle, TeamAssignment, TeamCluster
)

logger = logging.getLogger(__name__)

T = TypeVar('T')

# Errors that mark a single record as malformed
RECORD_ERRORS = (InputDataError, KeyError, TypeError, ValueError, IndexError)


@dataclass
class IngestReport:
    """Counts of what was accepted and dropped at the ingestion boundary"""
    frames: int = 0
    detections: int = 0
    dropped_frames: int = 0
    dropped_detections: int = 0
    dropped_records: int = 0
    issues: List[str] = field(default_factory=list)

    @property
    def total_dropped(self) -> int:
        return self.dropped_frames + self.dropped_detections + self.dropped_records

    def drop(self, kind: str, where: str, error: Exception):
        message = f"Dropped malformed {kind} ({where}): {error}"
        self.issues.append(message)
        logger.warning(message)
        if kind == "frame":
            self.dropped_frames += 1
        elif kind == "detection":
            self.dropped_detections += 1
        else:
            self.dropped_records += 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            'frames': self.frames,
            'detections': self.detections,
            'dropped_frames': self.dropped_frames,
            'dropped_detections': self.dropped_detections,
            'dropped_records': self.dropped_records,
        }


def parse_bbox(value: Any) -> BoundingBox:
    """[x, y, w, h] list or {x, y, w|width, h|height} mapping"""
    if isinstance(value, Mapping):
        return BoundingBox.from_xywh([
            value['x'], value['y'],
            value.get('w', value.get('width')), value.get('h', value.get('height')),
        ])
    return BoundingBox.from_xywh(value)


def _confidence(record: Mapping, default: float = 1.0) -> float:
    value = float(record.get('confidence', default))
    if not 0.0 <= value <= 1.0:
        raise InputDataError(f"Confidence {value} outside [0, 1]")
    return value


def parse_person(record: Mapping) -> PersonDetection:
    return PersonDetection(
        bbox=parse_bbox(record['bbox']),
        confidence=_confidence(record),
        team_id=record.get('teamId'),
        player_id=_optional_str(record.get('playerId')),
    )


def parse_ball(record: Mapping) -> BallDetection:
    return BallDetection(bbox=parse_bbox(record['bbox']), confidence=_confidence(record))


def parse_keypoint(value: Any) -> Keypoint:
    """[x, y, confidence] list or {x, y, confidence} mapping"""
    if isinstance(value, Mapping):
        x, y, c = value['x'], value['y'], value.get('confidence', value.get('score', 0.0))
    else:
        x, y, c = value
    return Keypoint(float(x), float(y), float(c))


def parse_pose(record: Mapping) -> PoseDetection:
    keypoints = tuple(parse_keypoint(k) for k in record['keypoints'])
    return PoseDetection(
        keypoints=keypoints,
        bbox=parse_bbox(record['bbox']),
        team_id=record.get('teamId'),
        player_id=_optional_str(record.get('playerId')),
    )


def parse_hoop(record: Mapping) -> HoopRegion:
    return HoopRegion(bbox=parse_bbox(record['bbox']), confidence=_confidence(record))


def _optional_str(value: Any) -> Optional[str]:
    return None if value is None or value == "" else str(value)


def _check_in_clip(timestamp: float, duration: Optional[float]):
    if duration is not None and timestamp > duration:
        raise InputDataError(f"Timestamp {timestamp} is past the clip end {duration}")


def build_frames(records: Optional[Sequence[Mapping]],
                 parse: Callable[[Mapping], T],
                 fps: float,
                 report: IngestReport,
                 stream: str,
                 width: float = COURT_WIDTH,
                 height: float = COURT_HEIGHT,
                 duration: Optional[float] = None) -> List[DetectionFrame]:
    """
    Build one detection stream

    Each record is {"frame": int, "timestamp"?: float, "detections": [...]}.
    The timestamp derives from the frame index and fps unless given.
    Frames past the clip duration are dropped.
    """
    frames = []
    for i, record in enumerate(records or []):
        try:
            frame_index = int(record.get('frame', i))
            timestamp = record.get('timestamp')
            if timestamp is None:
                timestamp = frame_index / fps
            frame_width = float(record.get('width', width))
            frame_height = float(record.get('height', height))
            raw_detections = record.get('detections') or []
            # Validate the frame itself before its detections
            DetectionFrame(frame_index, float(timestamp), (), frame_width, frame_height)
            _check_in_clip(float(timestamp), duration)
        except RECORD_ERRORS as e:
            report.drop("frame", f"{stream} record {i}", e)
            continue

        detections = []
        for j, raw in enumerate(raw_detections):
            try:
                detections.append(parse(raw))
            except RECORD_ERRORS as e:
                report.drop("detection", f"{stream} frame {frame_index} detection {j}", e)

        frames.append(DetectionFrame(frame_index, float(timestamp), tuple(detections),
                                     frame_width, frame_height))
        report.frames += 1
        report.detections += len(detections)

    return frames


def build_shot_candidates(records: Optional[Sequence[Mapping]], fps: float,
                          report: IngestReport,
                          duration: Optional[float] = None) -> List[ShotCandidate]:
    candidates = []
    for i, record in enumerate(records or []):
        try:
            frame_index = int(record.get('frame', 0))
            timestamp = record.get('timestamp')
            timestamp = float(timestamp) if timestamp is not None else frame_index / fps
            _check_in_clip(timestamp, duration)
            candidates.append(ShotCandidate(
                timestamp=timestamp,
                bbox=parse_bbox(record['bbox']),
                confidence=_confidence(record),
                frame_index=frame_index,
                player_id=_optional_str(record.get('playerId')),
                team_id=record.get('teamId'),
                arm_elevation=float(record.get('armElevation', 0.0)),
                handedness=str(record.get('handedness', 'unknown')),
                keypoints=tuple(parse_keypoint(k) for k in record.get('keypoints', [])),
            ))
        except RECORD_ERRORS as e:
            report.drop("shot candidate", f"record {i}", e)
    return candidates


def build_score_readings(records: Optional[Sequence[Mapping]], fps: float,
                         report: IngestReport,
                         duration: Optional[float] = None) -> List[ScoreReading]:
    readings = []
    for i, record in enumerate(records or []):
        try:
            frame_index = int(record.get('frame', 0))
            timestamp = record.get('timestamp')
            timestamp = float(timestamp) if timestamp is not None else frame_index / fps
            _check_in_clip(timestamp, duration)
            readings.append(ScoreReading(
                timestamp=timestamp,
                team_a=int(record['teamA']),
                team_b=int(record['teamB']),
                confidence=_confidence(record),
                frame_index=frame_index,
            ))
        except RECORD_ERRORS as e:
            report.drop("score reading", f"record {i}", e)
    return readings


def build_team_assignment(records: Optional[Sequence[Mapping]], report: IngestReport) -> TeamAssignment:
    clusters = []
    for i, record in enumerate(records or []):
        try:
            r, g, b = (int(c) for c in record['centroid'])
            clusters.append(TeamCluster((r, g, b), str(record['teamId']), int(record.get('sampleCount', 0))))
        except RECORD_ERRORS as e:
            report.drop("team cluster", f"record {i}", e)
    return TeamAssignment(tuple(clusters))


def ingest_signals(data: Mapping[str, Any]) -> Tuple[SignalBundle, IngestReport]:
    """
    Build a SignalBundle from a raw signal document

    Args:
        data: Mapping with "fps" (required), optional "duration", "width",
            "height" and the streams "persons", "balls", "poses", "hoops",
            "shotCandidates", "scoreReadings", "teamClusters"

    Returns:
        (signal bundle, ingest report)

    Raises:
        InputDataError: Missing or invalid fps or duration
    """
    if 'fps' not in data:
        raise InputDataError("Signal document needs an 'fps' sampling rate")
    try:
        fps = float(data['fps'])
        duration = float(data['duration']) if data.get('duration') is not None else None
        width = float(data.get('width', COURT_WIDTH))
        height = float(data.get('height', COURT_HEIGHT))
    except (TypeError, ValueError) as e:
        raise InputDataError(f"Invalid clip metadata: {e}") from e
    if not fps > 0:
        raise InputDataError(f"Sampling rate must be positive, got {fps}")

    report = IngestReport()
    bundle = SignalBundle(
        fps=fps,
        person_frames=build_frames(data.get('persons'), parse_person, fps, report, "person", width, height, duration),
        ball_frames=build_frames(data.get('balls'), parse_ball, fps, report, "ball", width, height, duration),
        pose_frames=build_frames(data.get('poses'), parse_pose, fps, report, "pose", width, height, duration),
        shot_candidates=build_shot_candidates(data.get('shotCandidates'), fps, report, duration),
        score_readings=build_score_readings(data.get('scoreReadings'), fps, report, duration),
        hoop_frames=build_frames(data.get('hoops'), parse_hoop, fps, report, "hoop", width, height, duration),
        team_assignment=build_team_assignment(data.get('teamClusters'), report),
        duration=duration,
    )

    logger.info(f"Ingested {report.frames} frames with {report.detections} detections, "
                f"dropped {report.total_dropped} malformed records")
    return bundle, report
