"""Plain terminal frontend: key polling, screen guard and rich renderer."""

import os
import select
import sys
import termios
import tty
from contextlib import contextmanager
from typing import IO, Iterator, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel

from .errors import InputError
from .scheduler import TimerState

PHASE_STYLES = {
    "Work": "green",
    "Break": "cyan",
}


def format_time(seconds: int) -> str:
    """Format seconds as MM:SS."""
    mins, secs = divmod(seconds, 60)
    return f"{mins:02d}:{secs:02d}"


# Wait for the rest of a multi-byte escape sequence
ESCAPE_TIMEOUT = 0.05


def _decode_key(raw: bytes) -> Optional[str]:
    ch = raw.decode(errors="ignore")
    if not ch:
        return None
    if ch == "\x03":  # Ctrl+C
        return "q"
    return ch.lower()


class TerminalInput:
    """Single-key reader over a terminal file descriptor."""

    def __init__(self, stream: Optional[IO] = None):
        self.fd = (stream or sys.stdin).fileno()

    def poll(self, timeout: Optional[float]) -> Optional[str]:
        """Return a pending key, waiting at most ``timeout`` seconds.

        Raises:
            InputError: If the terminal input was closed.
        """
        ready, _, _ = select.select([self.fd], [], [], timeout)
        if not ready:
            return None
        raw = self._read_byte()
        if raw == b"\x1b":
            # Function and arrow keys are not commands
            self._skip_escape()
            return None
        return _decode_key(raw)

    def _read_byte(self) -> bytes:
        raw = os.read(self.fd, 1)
        if not raw:
            raise InputError("terminal input closed")
        return raw

    def _pending_byte(self) -> Optional[bytes]:
        ready, _, _ = select.select([self.fd], [], [], ESCAPE_TIMEOUT)
        if not ready:
            return None
        return self._read_byte()

    def _skip_escape(self) -> None:
        """Consume the remainder of an escape sequence.

        Handles CSI (ESC [ ... final) and SS3 (ESC O x) sequences as well as
        Alt+key pairs. A lone Esc press consumes nothing further.
        """
        lead = self._pending_byte()
        if lead == b"[":
            while True:
                byte = self._pending_byte()
                if byte is None or 0x40 <= byte[0] <= 0x7E:
                    return
        elif lead == b"O":
            self._pending_byte()

    def read(self) -> str:
        """Block until a key is pressed."""
        while True:
            key = self.poll(None)
            if key is not None:
                return key


@contextmanager
def terminal_session(stream: Optional[IO] = None, console: Optional[Console] = None) -> Iterator[TerminalInput]:
    """Own the terminal for the length of a countdown.

    Puts the input stream in cbreak mode and switches to the alternate
    screen. Both are restored on every exit path, including quit and
    unhandled exceptions.

    Raises:
        InputError: If the stream is not an interactive terminal.
    """
    stream = stream or sys.stdin
    console = console or Console()
    try:
        if not stream.isatty():
            raise InputError("stdin is not an interactive terminal")
        fd = stream.fileno()
        old_settings = termios.tcgetattr(fd)
    except (termios.error, OSError, ValueError) as exc:
        raise InputError(f"Cannot access terminal: {exc}") from exc

    try:
        tty.setcbreak(fd)
        with console.screen(hide_cursor=True):
            yield TerminalInput(stream)
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)


class LineRenderer:
    """Redraws the countdown as a rich panel."""

    bar_width = 30

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def build(self, state: TimerState) -> Panel:
        style = PHASE_STYLES.get(state.phase_label, "magenta")
        filled = int(self.bar_width * state.progress)
        bar = f"[{style}]" + "█" * filled + f"[/{style}]" + "[dim]░[/dim]" * (self.bar_width - filled)
        pct = int(state.progress * 100)

        if state.paused:
            status = "[yellow]⏸ PAUSED[/yellow]"
            hints = "r resume | q quit"
        else:
            status = "[green]▶ RUNNING[/green]"
            hints = "p pause | q quit"

        body = (
            f"  Time Remaining: [bold]{format_time(state.remaining_seconds)}[/bold]"
            f"  {status}\n\n"
            f"  [{bar}]  {pct}%\n\n"
            f"  [dim]{hints}[/dim]"
        )
        return Panel(
            body,
            title=f"[bold {style}]{state.phase_label}[/bold {style}]",
            box=box.ROUNDED,
            border_style=style,
        )

    def render(self, state: TimerState) -> None:
        self.console.clear()
        self.console.print(self.build(state))
