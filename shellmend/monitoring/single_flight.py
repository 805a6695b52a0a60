# shellmend/monitoring/single_flight.py
"""
Two-state guard allowing one suggestion pipeline run per session.
"""
from enum import Enum


class PipelineState(str, Enum):
    """States of the suggestion pipeline for a session."""
    IDLE = "idle"              # New output may be classified
    PROCESSING = "processing"  # A fetch/parse run is outstanding


class SingleFlight:
    """
    Latch that drops classification while a pipeline run is in progress.

    Failures arriving while busy are not queued. The shell output itself is
    still displayed, only the suggestion request is skipped.
    """

    def __init__(self):
        self._state = PipelineState.IDLE

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._state is PipelineState.PROCESSING

    def try_acquire(self) -> bool:
        """
        Move from IDLE to PROCESSING.

        Returns:
            False if a run is already in progress
        """
        if self._state is PipelineState.PROCESSING:
            return False
        self._state = PipelineState.PROCESSING
        return True

    def release(self) -> None:
        self._state = PipelineState.IDLE
