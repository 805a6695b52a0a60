"""
Failure detection for shell output: classification, deduplication and the
single-flight guard.
"""
from .classifier import OutputClassifier, ErrorEvent, ErrorKind, extract_missing_command, strip_ansi
from .dedup import DedupCache
from .single_flight import SingleFlight, PipelineState

__all__ = [
    'OutputClassifier', 'ErrorEvent', 'ErrorKind', 'extract_missing_command', 'strip_ansi',
    'DedupCache', 'SingleFlight', 'PipelineState',
]
