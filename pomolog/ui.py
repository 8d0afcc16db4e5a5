"""Textual gauge frontend for the countdown."""

import queue
import threading
from dataclasses import replace
from typing import Callable, Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Vertical
from textual.widgets import Footer, ProgressBar, Static

from .errors import QuitSignal
from .scheduler import KeySource, PAUSE_KEY, QUIT_KEY, RESUME_KEY, Renderer, TimerState
from .sequencer import Phase, PhaseSequencer

# Seven-segment style glyphs, 3 cells wide and 5 tall; "#" is a lit cell
GLYPHS = {
    "0": ("###", "# #", "# #", "# #", "###"),
    "1": ("  #", "  #", "  #", "  #", "  #"),
    "2": ("###", "  #", "###", "#  ", "###"),
    "3": ("###", "  #", "###", "  #", "###"),
    "4": ("# #", "# #", "###", "  #", "  #"),
    "5": ("###", "#  ", "###", "  #", "###"),
    "6": ("###", "#  ", "###", "# #", "###"),
    "7": ("###", "  #", "  #", "  #", "  #"),
    "8": ("###", "# #", "###", "# #", "###"),
    "9": ("###", "# #", "###", "  #", "###"),
    ":": (" ", "#", " ", "#", " "),
}

GLYPH_HEIGHT = 5

GAUGE_CSS = """
Screen {
    align: center middle;
}

#timer-container {
    width: auto;
    height: auto;
    padding: 1 4;
    border: round $accent;
}

#timer-container.work {
    border: round green;
}

#timer-container.break {
    border: round cyan;
}

#phase-label, #big-timer, #status-badge {
    width: 100%;
    content-align: center middle;
    text-align: center;
}

#big-timer {
    padding: 1 0;
}

#status-badge.running {
    color: green;
}

#status-badge.paused {
    color: yellow;
}

#progress {
    width: 100%;
    padding-top: 1;
}
"""


def render_big_time(seconds: int) -> str:
    """Render MM:SS as block digits."""
    mins, secs = divmod(seconds, 60)
    time_str = f"{mins:02d}:{secs:02d}"

    lines = []
    for row in range(GLYPH_HEIGHT):
        cells = [GLYPHS[ch][row] for ch in time_str]
        line = " ".join(cells)
        lines.append(line.replace("#", "██").replace(" ", "  "))
    return "\n".join(lines)


class QueueInput:
    """Key source fed by the UI thread and read by the countdown thread."""

    def __init__(self) -> None:
        self._keys: "queue.Queue[str]" = queue.Queue()

    def put(self, key: str) -> None:
        self._keys.put(key)

    def poll(self, timeout: Optional[float]) -> Optional[str]:
        try:
            return self._keys.get(timeout=timeout)
        except queue.Empty:
            return None

    def read(self) -> str:
        return self._keys.get()


class BigTimer(Static):
    """Big block-digit countdown."""

    def update_display(self, state: TimerState) -> None:
        self.update(render_big_time(state.remaining_seconds))


class PhaseLabel(Static):
    """Phase label with completed-session count."""

    def update_display(self, state: TimerState, completed: int) -> None:
        self.update(f"─── {state.phase_label} · {completed} done ───")


class StatusBadge(Static):
    """Status indicator badge."""

    def update_display(self, state: TimerState) -> None:
        if state.paused:
            self.update("⏸ PAUSED")
            self.remove_class("running")
            self.add_class("paused")
        else:
            self.update("▶ RUNNING")
            self.remove_class("paused")
            self.add_class("running")


class AppRenderer:
    """Forwards countdown states from the worker thread to the app."""

    def __init__(self, app: "GaugeApp") -> None:
        self.app = app

    def render(self, state: TimerState) -> None:
        if self.app.halted.is_set():
            return
        self.app.call_from_thread(self.app.show_state, replace(state))


class GaugeApp(App):
    """Full-screen countdown with a progress gauge."""

    CSS = GAUGE_CSS

    BINDINGS = [
        Binding("p", "send_key('p')", "Pause"),
        Binding("r", "send_key('r')", "Resume"),
        Binding("q", "send_key('q')", "Quit"),
    ]

    def __init__(
        self,
        build_sequencer: Callable[[KeySource, Renderer], PhaseSequencer],
        notify_enabled: bool = True,
    ) -> None:
        """Initialize the app.

        Args:
            build_sequencer: Builds the sequencer from the app's key source and
                renderer. It is called on the worker thread.
            notify_enabled: Whether to ring the bell and show a toast when a
                phase ends.
        """
        super().__init__()
        self.build_sequencer = build_sequencer
        self.notify_enabled = notify_enabled
        self.key_queue = QueueInput()
        self.halted = threading.Event()
        self.sequencer: Optional[PhaseSequencer] = None
        self._failures_shown = 0

    @property
    def completed_work(self) -> int:
        if self.sequencer is None:
            return 0
        return self.sequencer.completed_work

    def compose(self) -> ComposeResult:
        with Container(id="main"):
            with Vertical(id="timer-container"):
                yield PhaseLabel(id="phase-label")
                yield BigTimer(id="big-timer")
                yield StatusBadge(id="status-badge")
                yield ProgressBar(id="progress", show_eta=False, show_percentage=False)
        yield Footer()

    def on_mount(self) -> None:
        self.run_worker(self._drive, thread=True, name="countdown")

    def on_unmount(self) -> None:
        # Unblock a worker still waiting on input so its thread can finish
        self.halted.set()
        self.key_queue.put(QUIT_KEY)

    def _drive(self) -> None:
        """Run the phase cycle on the worker thread until quit."""
        self.sequencer = self.build_sequencer(self.key_queue, AppRenderer(self))
        self.sequencer.on_phase_complete = self._phase_complete
        try:
            self.sequencer.run()
        except QuitSignal:
            pass
        if not self.halted.is_set():
            self.call_from_thread(self.exit)

    def _phase_complete(self, old_phase: Phase, new_phase: Phase) -> None:
        if self.halted.is_set():
            return
        self._show_failures()
        if not self.notify_enabled:
            return
        self.call_from_thread(self.bell)
        self.call_from_thread(self.notify, f"{old_phase.label} complete, starting {new_phase.label}")

    def _show_failures(self) -> None:
        """Toast peripheral failures the sequencer has reported since the last edge."""
        if self.sequencer is None:
            return
        for message in self.sequencer.failures[self._failures_shown:]:
            self.call_from_thread(self.notify, message, severity="warning")
        self._failures_shown = len(self.sequencer.failures)

    def show_state(self, state: TimerState) -> None:
        """Update all display elements."""
        self.query_one("#big-timer", BigTimer).update_display(state)
        self.query_one("#phase-label", PhaseLabel).update_display(state, self.completed_work)
        self.query_one("#status-badge", StatusBadge).update_display(state)

        progress_bar = self.query_one("#progress", ProgressBar)
        progress_bar.update(total=state.total_seconds, progress=state.total_seconds - state.remaining_seconds)

        container = self.query_one("#timer-container")
        container.remove_class("work", "break")
        container.add_class("work" if state.phase_label == Phase.WORK.label else "break")

    def action_send_key(self, key: str) -> None:
        """Hand a key press to the countdown."""
        if key in (PAUSE_KEY, RESUME_KEY, QUIT_KEY):
            self.key_queue.put(key)


def run_gauge(
    build_sequencer: Callable[[KeySource, Renderer], PhaseSequencer],
    notify_enabled: bool = True,
) -> GaugeApp:
    """Run the gauge UI until the user quits."""
    app = GaugeApp(build_sequencer, notify_enabled=notify_enabled)
    app.run()
    return app
