"""
High-level fusion pipeline for basketball game events
"""

from .fusion import EventFusionPipeline, FusionOptions, FusionDiagnostics, fuse_events
from .ingest import IngestReport, ingest_signals

__all__ = [
    'EventFusionPipeline', 'FusionOptions', 'FusionDiagnostics', 'fuse_events',
    'IngestReport', 'ingest_signals'
]
