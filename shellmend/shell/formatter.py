# shellmend/shell/formatter.py
"""
Rich terminal rendering of failure notices and suggestions.

While the assisted shell runs, the terminal is in raw mode and a bare "\n"
no longer returns the carriage. Output is then rendered to text first and
written with CRLF line endings.
"""
import sys
from typing import IO, Optional

from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from shellmend.ai.parser import SuggestionBatch
from shellmend.constants import VALID_COMMAND_MESSAGE
from shellmend.orchestrator import SuggestionListener
from shellmend.utils.logging import get_logger

logger = get_logger(__name__)

HOTKEY_HINT = "Press Ctrl-G then a number to run a suggestion"


class TerminalFormatter(SuggestionListener):
    """Renders pipeline results on the operator's terminal."""

    def __init__(self, console: Optional[Console] = None, stream: Optional[IO[str]] = None):
        """
        Initialize the terminal formatter.

        Args:
            console: Console used for rendering
            stream: Where raw-mode output is written. Defaults to stdout.
        """
        self._console = console or Console()
        self._stream = stream
        self._logger = logger
        self.raw_mode = False
        self.show_hotkey_hint = False

    def _emit(self, renderable: RenderableType) -> None:
        if not self.raw_mode:
            self._console.print(renderable)
            return

        with self._console.capture() as capture:
            self._console.print(renderable)
        text = capture.get().replace("\r\n", "\n").replace("\n", "\r\n")
        stream = self._stream or sys.stdout
        stream.write("\r\n" + text)
        stream.flush()

    def on_failure_detected(self, message: str) -> None:
        """
        Display the failure notice.

        Args:
            message: Formatted notice naming the command and evidence line
        """
        self._emit(Panel(Text(message), title="Command failed", border_style="red", expand=False))

    def on_suggestions_ready(self, command: str, error_line: str, batch: SuggestionBatch) -> None:
        """
        Display a suggestion batch as a numbered table.

        Args:
            command: The command that failed
            error_line: The evidence line
            batch: Suggestions in display order
        """
        if batch.is_empty:
            self._emit(Text("No suggestions available.", style="yellow"))
            return

        if len(batch.suggestions) == 1 and batch.suggestions[0].command == VALID_COMMAND_MESSAGE:
            self._emit(Text(VALID_COMMAND_MESSAGE, style="green"))
            return

        self._logger.debug(f"Rendering {len(batch.suggestions)} suggestions for: {command}")
        table = Table(title=f"Suggestions for: {command}", expand=False)
        table.add_column("#", style="bold cyan", justify="right")
        table.add_column("Command", style="bold green")
        table.add_column("Description", style="white")
        for number, suggestion in enumerate(batch.suggestions, start=1):
            table.add_row(str(number), suggestion.command, suggestion.description)
        if self.show_hotkey_hint:
            self._emit(Group(table, Text(HOTKEY_HINT, style="dim")))
        else:
            self._emit(table)

    def on_message(self, text: str, is_error: bool = False) -> None:
        """Display a progress or notice message."""
        style = "bold red" if is_error else "blue"
        self._emit(Text(text, style=style))


# Global formatter instance
terminal_formatter = TerminalFormatter()
