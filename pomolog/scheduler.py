"""Countdown state machine and the loop that drives it."""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Protocol

logger = logging.getLogger(__name__)

QUIT_KEY = "q"
PAUSE_KEY = "p"
RESUME_KEY = "r"

# Bounded wait for a key while the countdown is running
POLL_TIMEOUT = 0.1


class RunMode(Enum):
    """Whether the countdown is consuming ticks."""
    RUNNING = auto()
    PAUSED = auto()


class Outcome(Enum):
    """How a phase ended."""
    COMPLETED = auto()
    QUIT = auto()


@dataclass
class TimerState:
    """Snapshot of one phase's countdown, as handed to renderers."""
    phase_label: str
    total_seconds: int
    remaining_seconds: int
    run_mode: RunMode = RunMode.RUNNING

    @property
    def paused(self) -> bool:
        return self.run_mode == RunMode.PAUSED

    @property
    def progress(self) -> float:
        """Progress through the phase (0.0 to 1.0)."""
        return 1.0 - (self.remaining_seconds / self.total_seconds)


class KeySource(Protocol):
    def poll(self, timeout: float) -> Optional[str]:
        ...

    def read(self) -> str:
        ...


class TickSource(Protocol):
    def reset(self) -> None:
        ...

    def wait(self) -> None:
        ...


class Renderer(Protocol):
    def render(self, state: TimerState) -> None:
        ...


class SessionTimer:
    """State machine for a single Work or Break phase.

    Starts RUNNING with the full duration and ends either COMPLETED (the
    countdown reached zero) or QUIT. Transitions are driven from outside via
    ``handle_key`` and ``tick`` so the machine can be stepped without a
    terminal.
    """

    def __init__(self, total_seconds: int, phase_label: str):
        """Initialize the timer.

        Args:
            total_seconds: Phase duration, must be positive.
            phase_label: Label shown by renderers ("Work", "Break").

        Raises:
            ValueError: If total_seconds is not positive.
        """
        if total_seconds <= 0:
            raise ValueError(f"phase duration must be positive, got {total_seconds}")

        self._state = TimerState(
            phase_label=phase_label,
            total_seconds=total_seconds,
            remaining_seconds=total_seconds,
        )
        self._outcome: Optional[Outcome] = None

    @property
    def state(self) -> TimerState:
        """Current countdown state."""
        return self._state

    @property
    def remaining_seconds(self) -> int:
        return self._state.remaining_seconds

    @property
    def total_seconds(self) -> int:
        return self._state.total_seconds

    @property
    def phase_label(self) -> str:
        return self._state.phase_label

    @property
    def run_mode(self) -> RunMode:
        return self._state.run_mode

    @property
    def outcome(self) -> Optional[Outcome]:
        """Terminal outcome, or None while the phase is live."""
        return self._outcome

    @property
    def finished(self) -> bool:
        return self._outcome is not None

    def handle_key(self, key: str) -> None:
        """Apply a key press.

        Quit wins from any live state. Pause only applies while running and
        resume only while paused; every other key is ignored.
        """
        if self.finished:
            return

        key = key.lower()
        if key == QUIT_KEY:
            self._outcome = Outcome.QUIT
        elif key == PAUSE_KEY and self._state.run_mode == RunMode.RUNNING:
            self._state.run_mode = RunMode.PAUSED
        elif key == RESUME_KEY and self._state.run_mode == RunMode.PAUSED:
            self._state.run_mode = RunMode.RUNNING

    def tick(self) -> bool:
        """Consume one second if running.

        Returns:
            True if this tick completed the phase, False otherwise.
        """
        if self.finished or self._state.run_mode != RunMode.RUNNING:
            return False

        self._state.remaining_seconds -= 1
        if self._state.remaining_seconds == 0:
            self._outcome = Outcome.COMPLETED
            return True

        return False


def run_countdown(
    timer: SessionTimer,
    keys: KeySource,
    clock: TickSource,
    renderer: Renderer,
    poll_timeout: float = POLL_TIMEOUT,
) -> Outcome:
    """Drive a timer until it completes or the user quits.

    Each iteration renders first, then checks input, then waits for the next
    tick, so a key pressed during a second takes effect before that second is
    charged. While paused the loop blocks on input only and consumes no ticks.

    Returns:
        The phase outcome.
    """
    clock.reset()

    while not timer.finished:
        renderer.render(timer.state)

        if timer.run_mode == RunMode.PAUSED:
            timer.handle_key(keys.read())
            if timer.run_mode == RunMode.RUNNING:
                logger.debug("%s resumed at %ss", timer.phase_label, timer.remaining_seconds)
                clock.reset()
            continue

        key = keys.poll(poll_timeout)
        if key is not None:
            timer.handle_key(key)
            if timer.run_mode == RunMode.PAUSED:
                logger.debug("%s paused at %ss", timer.phase_label, timer.remaining_seconds)
            if timer.run_mode != RunMode.RUNNING or timer.finished:
                continue

        clock.wait()
        timer.tick()

    if timer.outcome == Outcome.COMPLETED:
        renderer.render(timer.state)

    return timer.outcome
