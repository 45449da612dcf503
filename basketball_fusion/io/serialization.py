"""
Data serialization for signal documents and fused game events
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from basketball_fusion.analytics.statistics import generate_team_summary
from basketball_fusion.core.models import GameEvent, SignalBundle
from basketball_fusion.pipeline.ingest import IngestReport, ingest_signals


class NumpyJsonEncoder(json.JSONEncoder):
    """JSON encoder that handles numpy types"""

    def default(self, obj):
        if isinstance(obj, np.integer):
            return int(obj)
        elif isinstance(obj, np.floating):
            return float(obj)
        elif isinstance(obj, np.ndarray):
            return obj.tolist()
        elif isinstance(obj, set):
            return sorted(obj)
        return super().default(obj)


class JsonSerializer:
    """JSON serialization utilities"""

    @staticmethod
    def save(data: Dict, filepath: str, indent: int = 2):
        """Save data to JSON file"""
        Path(filepath).parent.mkdir(parents=True, exist_ok=True)

        with open(filepath, 'w') as f:
            json.dump(data, f, cls=NumpyJsonEncoder, indent=indent)

    @staticmethod
    def load(filepath: str) -> Dict:
        """Load data from JSON file"""
        with open(filepath, 'r') as f:
            return json.load(f)


def load_signal_bundle(filepath: str) -> Tuple[SignalBundle, IngestReport]:
    """Read a signal document and validate it through the ingestion boundary"""
    return ingest_signals(JsonSerializer.load(filepath))


def events_document(events: Sequence[GameEvent],
                    diagnostics: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Events plus per-team summaries, ready for JSON"""
    team_ids = sorted({e.team_id for e in events})
    document = {
        'events': [e.to_dict() for e in events],
        'teams': {team_id: generate_team_summary(events, team_id).to_dict() for team_id in team_ids},
    }
    if diagnostics is not None:
        document['diagnostics'] = diagnostics
    return document


def save_events(events: Sequence[GameEvent], filepath: str,
                diagnostics: Optional[Dict[str, Any]] = None):
    """Write the event list and team summaries to a JSON file"""
    JsonSerializer.save(events_document(events, diagnostics), filepath)


def load_events(filepath: str) -> List[GameEvent]:
    """Read events written by save_events (or a bare event list)"""
    data = JsonSerializer.load(filepath)
    records = data['events'] if isinstance(data, dict) else data
    return [GameEvent.from_dict(record) for record in records]
