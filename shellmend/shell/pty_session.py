# shellmend/shell/pty_session.py
"""
Assisted interactive shell over a pseudo-terminal.

A real shell runs on the PTY. Keystrokes are relayed to it unchanged and its
output is relayed to the terminal unchanged; both streams are also handed to
the session orchestrator, which watches for failed commands.
"""
import asyncio
import codecs
import fcntl
import os
import pty
import signal
import struct
import sys
import termios
import tty
from typing import Optional, Tuple

from shellmend.constants import DEFAULT_SHELL
from shellmend.orchestrator import SessionOrchestrator
from shellmend.shell.formatter import TerminalFormatter
from shellmend.utils.logging import get_logger

logger = get_logger(__name__)

HOTKEY = 0x07  # Ctrl-G
CLEAR_LINE = b"\x15"  # Ctrl-U
READ_SIZE = 4096


def get_winsize(fd: int) -> Tuple[int, int]:
    try:
        packed = fcntl.ioctl(fd, termios.TIOCGWINSZ, b"\x00" * 8)
        rows, cols, _xp, _yp = struct.unpack("HHHH", packed)
        return rows or 24, cols or 80
    except OSError:
        return 24, 80


def set_winsize(fd: int, rows: int, cols: int) -> None:
    try:
        fcntl.ioctl(fd, termios.TIOCSWINSZ, struct.pack("HHHH", rows, cols, 0, 0))
    except OSError as e:
        logger.debug(f"Could not set PTY window size: {e}")


def resolve_shell(shell: Optional[str] = None) -> str:
    """Shell to run: explicit choice, then $SHELL, then the default."""
    return shell or os.environ.get("SHELL") or DEFAULT_SHELL


class PtyShellSession:
    """
    Runs one shell on a PTY and relays it to the controlling terminal.

    Ctrl-G followed by a digit 1-9 types the matching suggestion of the
    latest batch into the shell and submits it. Ctrl-G followed by anything
    else is passed through.
    """

    def __init__(
        self,
        orchestrator: SessionOrchestrator,
        formatter: TerminalFormatter,
        shell: Optional[str] = None,
        stdin_fd: Optional[int] = None,
        stdout_fd: Optional[int] = None
    ):
        self.orchestrator = orchestrator
        self.formatter = formatter
        self.shell = resolve_shell(shell)
        self.child_pid: Optional[int] = None
        self.master_fd: Optional[int] = None
        self._stdin_fd = sys.stdin.fileno() if stdin_fd is None else stdin_fd
        self._stdout_fd = sys.stdout.fileno() if stdout_fd is None else stdout_fd
        self._orig_tattr = None
        self._hotkey_pending = False
        self._exited: Optional[asyncio.Future] = None
        self._input_decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._output_decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def spawn_shell(self) -> None:
        pid, master_fd = pty.fork()
        if pid == 0:
            # Child: replace with the shell
            os.execvp(self.shell, [self.shell])
        self.child_pid = pid
        self.master_fd = master_fd
        self._sync_winsize()
        logger.debug(f"Spawned shell {self.shell} with pid {pid}")

    def enter_raw(self) -> None:
        if not os.isatty(self._stdin_fd):
            return
        self._orig_tattr = termios.tcgetattr(self._stdin_fd)
        tty.setraw(self._stdin_fd)

    def restore_tattr(self) -> None:
        if self._orig_tattr is not None:
            termios.tcsetattr(self._stdin_fd, termios.TCSADRAIN, self._orig_tattr)
            self._orig_tattr = None

    def _sync_winsize(self) -> None:
        if self.master_fd is None:
            return
        rows, cols = get_winsize(self._stdin_fd)
        set_winsize(self.master_fd, rows, cols)

    def _finish(self) -> None:
        if self._exited is not None and not self._exited.done():
            self._exited.set_result(None)

    def _on_master_readable(self) -> None:
        try:
            data = os.read(self.master_fd, READ_SIZE)
        except OSError:
            # EIO once the shell has exited
            data = b""
        if not data:
            self._finish()
            return

        os.write(self._stdout_fd, data)
        text = self._output_decoder.decode(data)
        if text:
            self.orchestrator.handle_output(text)

    def _on_stdin_readable(self) -> None:
        data = os.read(self._stdin_fd, READ_SIZE)
        if not data:
            self._finish()
            return

        data = self._intercept_hotkey(data)
        if not data:
            return
        os.write(self.master_fd, data)
        text = self._input_decoder.decode(data)
        if text:
            self.orchestrator.handle_input(text)

    def _intercept_hotkey(self, data: bytes) -> bytes:
        """Remove hotkey sequences from input, running the selected suggestions."""
        passthrough = bytearray()
        for byte in data:
            if self._hotkey_pending:
                self._hotkey_pending = False
                if 0x31 <= byte <= 0x39:
                    self.run_suggestion(byte - 0x31)
                    continue
                passthrough.append(HOTKEY)
            if byte == HOTKEY:
                self._hotkey_pending = True
                continue
            passthrough.append(byte)
        return bytes(passthrough)

    def run_suggestion(self, index: int) -> bool:
        """
        Type a suggestion of the latest batch into the shell and submit it.

        Args:
            index: Zero-based position in the batch

        Returns:
            False if there is no such suggestion
        """
        command = self.orchestrator.suggestion_command(index)
        if command is None:
            logger.debug(f"No suggestion at position {index + 1}")
            return False

        logger.info(f"Running suggestion {index + 1}: {command}")
        os.write(self.master_fd, CLEAR_LINE + command.encode("utf-8") + b"\r")
        # Ctrl-C drops whatever the tracker had buffered for the cleared line
        self.orchestrator.handle_input("\x03" + command + "\r")
        return True

    def _wait_child(self) -> int:
        if self.child_pid is None:
            return 0
        try:
            _pid, status = os.waitpid(self.child_pid, 0)
        except ChildProcessError:
            return 0
        return os.waitstatus_to_exitcode(status)

    async def run(self) -> int:
        """
        Run the shell until it exits.

        Returns:
            The shell's exit code
        """
        loop = asyncio.get_running_loop()
        self._exited = loop.create_future()

        self.spawn_shell()
        self.formatter.raw_mode = True
        self.formatter.show_hotkey_hint = True
        self.enter_raw()
        try:
            loop.add_reader(self.master_fd, self._on_master_readable)
            loop.add_reader(self._stdin_fd, self._on_stdin_readable)
            loop.add_signal_handler(signal.SIGWINCH, self._sync_winsize)
            await self._exited
        finally:
            loop.remove_reader(self._stdin_fd)
            loop.remove_reader(self.master_fd)
            loop.remove_signal_handler(signal.SIGWINCH)
            self.orchestrator.close()
            self.restore_tattr()
            self.formatter.raw_mode = False
            os.close(self.master_fd)

        exit_code = self._wait_child()
        logger.debug(f"Shell exited with code {exit_code}")
        return exit_code
