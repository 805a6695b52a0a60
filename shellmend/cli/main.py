"""
Main command-line interface for shellmend.
"""
import sys
import asyncio
import uuid
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel

from shellmend import __version__
from shellmend.config import config_manager
from shellmend.context.session import SessionState
from shellmend.orchestrator import SessionOrchestrator, SessionManager
from shellmend.shell.formatter import terminal_formatter
from shellmend.utils.logging import setup_logging, get_logger

# Create the app
app = typer.Typer(help="shellmend: suggestions for failed shell commands")
logger = get_logger(__name__)
console = Console()


def version_callback(value: bool):
    """Display version information and exit."""
    if value:
        console.print(f"shellmend version: {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    debug: bool = typer.Option(
        False, "--debug", "-d", help="Enable debug mode"
    ),
    version: bool = typer.Option(
        False, "--version", "-v", callback=version_callback, is_eager=True, help="Show version and exit"
    ),
):
    """shellmend: suggestions for failed shell commands"""
    # Set debug mode
    config_manager.config.debug = debug or config_manager.config.debug

    # Configure logging
    setup_logging(debug=config_manager.config.debug)


@app.command()
def shell(
    shell_path: Optional[str] = typer.Option(
        None, "--shell", "-s", help="Shell to run. Defaults to $SHELL."
    ),
):
    """Start an interactive shell that suggests fixes for failed commands."""
    from shellmend.shell.pty_session import PtyShellSession, resolve_shell

    if not sys.stdin.isatty():
        console.print("[bold red]Error:[/bold red] shellmend shell needs an interactive terminal.")
        raise typer.Exit(code=1)

    if not config_manager.config.api.gemini_api_key:
        console.print("[yellow]No Gemini API key configured. Run 'shellmend init' to enable suggestions.[/yellow]")

    # Log lines on stderr would land in the middle of the raw terminal
    setup_logging(debug=config_manager.config.debug, console_level="WARNING")

    console.print(Panel(
        f"Running {resolve_shell(shell_path)} with shellmend.\n"
        "Failed commands get suggestions; press Ctrl-G then a number to run one.\n"
        "Exit the shell to leave.",
        title="shellmend",
        expand=False
    ))

    session_manager = SessionManager(monitor=config_manager.config.monitor)
    session_id = uuid.uuid4().hex
    orchestrator = session_manager.start(session_id, terminal_formatter)
    pty_session = PtyShellSession(orchestrator, terminal_formatter, shell=shell_path)

    try:
        exit_code = asyncio.run(pty_session.run())
    except OSError as e:
        logger.exception("Error running shell session")
        console.print(f"[bold red]Error:[/bold red] {str(e)}")
        raise typer.Exit(code=1)
    finally:
        session_manager.end(session_id)

    raise typer.Exit(code=exit_code)


@app.command()
def suggest(
    command: str = typer.Argument(..., help="The command that failed."),
    error_line: str = typer.Argument(..., help="The error message it printed."),
):
    """Get suggestions for a single failed command."""
    state = SessionState("cli", config_manager.config.monitor)
    orchestrator = SessionOrchestrator(state, terminal_formatter, grace_delay=0)

    try:
        batch = asyncio.run(orchestrator.fetch_batch(command, error_line))
    except Exception as e:
        logger.exception("Error fetching suggestions")
        console.print(f"[bold red]Error:[/bold red] {str(e)}")
        raise typer.Exit(code=1)

    if batch is None:
        # The reason was already reported through the formatter
        raise typer.Exit(code=1)

    terminal_formatter.on_suggestions_ready(command, error_line, batch)


@app.command()
def init():
    """Initialize shellmend with configuration."""
    console.print("Initializing shellmend...")

    # Check if API key is already set
    if config_manager.config.api.gemini_api_key:
        console.print("[green]API key already configured.[/green]")
    else:
        console.print("A Google Gemini API key is required for suggestions.")
        api_key = typer.prompt("Enter your Gemini API key", hide_input=True)
        config_manager.config.api.gemini_api_key = api_key

    # Save the configuration
    try:
        config_manager.save_config()
    except OSError as e:
        console.print(f"[bold red]Error:[/bold red] Could not save configuration: {e}")
        raise typer.Exit(code=1)

    console.print("[green]Configuration saved successfully![/green]")
    console.print("\nshellmend is now initialized. You can use the following commands:")
    console.print("  [blue]shellmend shell[/blue] - Start an assisted shell")
    console.print("  [blue]shellmend suggest <command> <error>[/blue] - Get suggestions once")
    console.print("  [blue]shellmend --help[/blue] - Show help")
