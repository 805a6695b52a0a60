# shellmend/orchestrator.py
"""
Session orchestration for shellmend.

This module wires one shell session's streams into the suggestion pipeline:
input goes to the command tracker, output goes through classification,
deduplication, fetching and parsing, and the results go to a listener.
"""
import asyncio
from typing import Callable, Dict, List, Optional

from shellmend.ai.fallbacks import fallback_suggestions
from shellmend.ai.fetcher import SuggestionFetcher
from shellmend.ai.parser import CommandSuggestion, SuggestionBatch, parse_suggestions
from shellmend.config import MonitorConfig
from shellmend.constants import (
    FETCHING_MESSAGE,
    PARSE_MISS_COMMAND,
    PARSE_MISS_DESCRIPTION,
    VALID_COMMAND_MESSAGE,
)
from shellmend.context.session import SessionState
from shellmend.context.tracker import CommandSubmission
from shellmend.core.errors import ConfigError, InputError, UpstreamError
from shellmend.monitoring.classifier import ErrorEvent, ErrorKind, OutputClassifier, extract_missing_command
from shellmend.utils.logging import get_logger

logger = get_logger(__name__)


class SuggestionListener:
    """
    Receiver of pipeline results for one session.

    The two notification methods are required; on_message is optional.
    """

    def on_failure_detected(self, message: str) -> None:
        raise NotImplementedError

    def on_suggestions_ready(self, command: str, error_line: str, batch: SuggestionBatch) -> None:
        raise NotImplementedError

    def on_message(self, text: str, is_error: bool = False) -> None:
        """Progress and notice text. Ignored unless overridden."""


def format_failure_message(command: str, error_line: str) -> str:
    """Build the failure notice shown to the operator."""
    if command:
        return f"Error after: {command}\n→ {error_line}"
    return error_line


class SessionOrchestrator:
    """
    Drives the suggestion pipeline for a single shell session.

    Output chunks are classified synchronously in arrival order. A detected
    failure starts one background task that fetches and parses suggestions;
    the session's single-flight guard keeps a second one from starting until
    the first has finished and the grace delay has passed.
    """

    def __init__(
        self,
        state: SessionState,
        listener: SuggestionListener,
        fetcher: Optional[SuggestionFetcher] = None,
        classifier: Optional[OutputClassifier] = None,
        parser: Callable[[str], List[CommandSuggestion]] = parse_suggestions,
        grace_delay: Optional[float] = None
    ):
        """
        Initialize the orchestrator.

        Args:
            state: The session's mutable state
            listener: Receiver of failure notices and suggestion batches
            fetcher: Assistant fetcher, built from the loaded config if omitted
            classifier: Output classifier with the default patterns if omitted
            parser: Reply parser
            grace_delay: Seconds to wait after a run before accepting new
                failures. Defaults to the monitor configuration.
        """
        self.state = state
        self.listener = listener
        self.fetcher = fetcher or SuggestionFetcher()
        self.classifier = classifier or OutputClassifier()
        self._parse = parser
        if grace_delay is None:
            from shellmend.config import config_manager
            grace_delay = config_manager.config.monitor.grace_delay_seconds
        self.grace_delay = grace_delay
        self._task: Optional[asyncio.Task] = None
        self._logger = logger.with_context(session_id=state.session_id)

    @property
    def pending_task(self) -> Optional[asyncio.Task]:
        """The outstanding pipeline task, if one is running."""
        if self._task is not None and not self._task.done():
            return self._task
        return None

    def handle_input(self, data: str) -> List[CommandSubmission]:
        """
        Apply operator input to the command tracker.

        Args:
            data: Raw input text sent toward the shell

        Returns:
            Submissions registered by this input
        """
        if self.state.closed:
            return []
        return self.state.record_input(data)

    def handle_output(self, chunk: str) -> Optional[asyncio.Task]:
        """
        Inspect a chunk of shell output for a failure.

        Must be called from the running event loop. The chunk itself is not
        consumed; the caller displays it regardless of the outcome.

        Args:
            chunk: Output text as received from the shell

        Returns:
            The started pipeline task, or None if no run was started
        """
        if self.state.closed:
            return None

        if self.state.guard.busy:
            self._logger.debug("Skipping output: suggestion request in progress")
            return None

        event = self.classifier.classify(chunk, self.state.last_command)
        if event is None:
            return None

        if event.line == self.state.last_error_line:
            self._logger.debug(f"Skipping repeated error line: {event.line}")
            return None
        self.state.last_error_line = event.line

        if not self.state.guard.try_acquire():
            return None

        self._task = asyncio.get_running_loop().create_task(self._run_pipeline(event))
        return self._task

    async def _run_pipeline(self, event: ErrorEvent) -> None:
        try:
            command = self._resolve_command(event)
            self.listener.on_failure_detected(format_failure_message(command, event.line))

            if not command:
                self._logger.debug("No command associated with error, not fetching suggestions")
                return

            fresh = event.kind is ErrorKind.COMMAND_NOT_FOUND
            if not self.state.dedup.should_process(command, event.line, fresh=fresh):
                return

            if self.state.config_error_reported:
                self._logger.debug("Suggestions disabled for this session: missing configuration")
                return

            self.listener.on_message(FETCHING_MESSAGE, False)
            batch = await self.fetch_batch(command, event.line)
            if batch is None or self.state.closed:
                return

            self.state.last_batch = batch
            self.listener.on_suggestions_ready(command, event.line, batch)
        except asyncio.CancelledError:
            self._logger.debug("Suggestion pipeline cancelled")
            raise
        except Exception as e:
            self._logger.exception(
                f"Unexpected error in suggestion pipeline: {e}",
                extra={"session": self.state.get_context_dict()},
            )
        finally:
            if not self.state.closed:
                await self._release_after_grace()

    async def _release_after_grace(self) -> None:
        try:
            if self.grace_delay > 0:
                await asyncio.sleep(self.grace_delay)
        finally:
            # A closed session keeps its guard held
            if not self.state.closed:
                self.state.guard.release()

    def _resolve_command(self, event: ErrorEvent) -> str:
        """
        Pick the command a failure belongs to.

        For "command not found" the program name in the message is more
        reliable than the tracker, which may have missed keystrokes. The most
        recent history entry invoking that program wins, else the bare name.
        """
        command = event.associated_command or self.state.last_command
        if event.kind is not ErrorKind.COMMAND_NOT_FOUND:
            return command

        name = extract_missing_command(event.line)
        if not name:
            return command

        matching = self.state.history.find_matching(name)
        resolved = matching or name
        if resolved != self.state.last_command:
            self._logger.debug(f"Correlated missing command '{name}' with: {resolved}")
        self.state.correlate_command(resolved)
        return resolved

    async def fetch_batch(self, command: str, error_line: str) -> Optional[SuggestionBatch]:
        """
        Fetch and parse suggestions, converting pipeline errors.

        Returns:
            The batch to display, or None when nothing should be shown
        """
        try:
            reply = await self.fetcher.fetch(command, error_line)
        except ConfigError as e:
            self.state.config_error_reported = True
            self._logger.error(f"Cannot fetch suggestions: {e}")
            self.listener.on_message(str(e), True)
            return None
        except InputError as e:
            self._logger.warning(f"Suggestion request rejected: {e}")
            return None
        except UpstreamError as e:
            self._logger.error(f"Suggestion request failed: {e}")
            suggestions = fallback_suggestions(command, error_line)
            return SuggestionBatch(command=command, error_line=error_line, suggestions=suggestions)

        suggestions = self._parse(reply)
        if not suggestions:
            self._logger.warning("Could not parse any suggestions from reply")
            suggestions = [CommandSuggestion(command=PARSE_MISS_COMMAND, description=PARSE_MISS_DESCRIPTION)]
        else:
            self._logger.debug(f"Parsed {len(suggestions)} suggestions")
        return SuggestionBatch(command=command, error_line=error_line, suggestions=suggestions)

    def suggestion_command(self, index: int) -> Optional[str]:
        """
        Command text of a suggestion in the latest batch.

        Args:
            index: Zero-based position in the batch

        Returns:
            The command, or None if there is no such runnable suggestion
        """
        batch = self.state.last_batch
        if batch is None or not 0 <= index < len(batch.suggestions):
            return None
        command = batch.suggestions[index].command
        if command == VALID_COMMAND_MESSAGE:
            return None
        return command

    def close(self) -> None:
        """End the session, discarding any outstanding pipeline run."""
        if self.state.closed:
            return
        self.state.closed = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._logger.debug("Session closed")


class SessionManager:
    """Owns the orchestrators of all active sessions, keyed by session id."""

    def __init__(self, fetcher: Optional[SuggestionFetcher] = None, monitor: Optional[MonitorConfig] = None):
        self._fetcher = fetcher
        self._monitor = monitor
        self._sessions: Dict[str, SessionOrchestrator] = {}

    def start(self, session_id: str, listener: SuggestionListener) -> SessionOrchestrator:
        """
        Create the state and orchestrator for a new session.

        Raises:
            ValueError: If the session id is already active
        """
        if session_id in self._sessions:
            raise ValueError(f"Session already active: {session_id}")

        if self._fetcher is None:
            self._fetcher = SuggestionFetcher()
        if self._monitor is None:
            from shellmend.config import config_manager
            self._monitor = config_manager.config.monitor

        state = SessionState(session_id, self._monitor)
        orchestrator = SessionOrchestrator(
            state,
            listener,
            fetcher=self._fetcher,
            grace_delay=self._monitor.grace_delay_seconds,
        )
        self._sessions[session_id] = orchestrator
        logger.debug(f"Started session {session_id}")
        return orchestrator

    def get(self, session_id: str) -> Optional[SessionOrchestrator]:
        return self._sessions.get(session_id)

    def end(self, session_id: str) -> None:
        """Close and forget a session. Unknown ids are ignored."""
        orchestrator = self._sessions.pop(session_id, None)
        if orchestrator is not None:
            orchestrator.close()
            logger.debug(f"Ended session {session_id}")

    @property
    def active_sessions(self) -> List[str]:
        return list(self._sessions)
