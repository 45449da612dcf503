"""
Input/output for signal documents and event exports
"""

from .serialization import (
    NumpyJsonEncoder, JsonSerializer, load_signal_bundle, events_document, save_events, load_events
)

__all__ = [
    'NumpyJsonEncoder', 'JsonSerializer', 'load_signal_bundle', 'events_document',
    'save_events', 'load_events'
]
