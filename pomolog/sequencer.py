"""Work/Break cycle orchestration."""

import logging
from datetime import date
from enum import Enum
from typing import Callable, List, Optional

from .errors import NotificationError, PersistenceError, QuitSignal
from .history import SessionLog
from .notifications import Notifier
from .scheduler import KeySource, Outcome, Renderer, SessionTimer, TickSource, run_countdown

logger = logging.getLogger(__name__)


class Phase(Enum):
    """Timer phase types."""
    WORK = "Work"
    BREAK = "Break"

    @property
    def label(self) -> str:
        return self.value


class PhaseSequencer:
    """Runs Work and Break phases back to back until the user quits.

    A completed Work phase is recorded in the session log before the break
    starts. Logging and notification failures are reported and skipped so an
    active countdown is never lost to a peripheral error.
    """

    def __init__(
        self,
        work_minutes: int,
        break_minutes: int,
        keys: KeySource,
        clock: TickSource,
        renderer: Renderer,
        history: SessionLog,
        notifier: Optional[Notifier] = None,
        today: Callable[[], date] = date.today,
        on_phase_complete: Optional[Callable[[Phase, Phase], None]] = None,
    ):
        """Initialize the sequencer.

        Args:
            work_minutes: Duration of work phase in minutes.
            break_minutes: Duration of break phase in minutes.
            keys: Input source for pause/resume/quit.
            clock: Tick source.
            renderer: Display for the running countdown.
            history: Session log that counts completed work phases.
            notifier: Notification sink, None to disable.
            today: Returns the date a completed session is filed under.
            on_phase_complete: Callback(old_phase, new_phase) when a phase ends.
        """
        if work_minutes <= 0 or break_minutes <= 0:
            raise ValueError("Durations must be positive")

        self.work_secs = work_minutes * 60
        self.break_secs = break_minutes * 60
        self.keys = keys
        self.clock = clock
        self.renderer = renderer
        self.history = history
        self.notifier = notifier
        self.today = today
        self.on_phase_complete = on_phase_complete

        self.completed_work = 0
        # Peripheral failures, kept for display once the screen is released
        self.failures: List[str] = []

    def _get_duration_for_phase(self, phase: Phase) -> int:
        """Get duration in seconds for a given phase."""
        if phase == Phase.WORK:
            return self.work_secs
        return self.break_secs

    def run_phase(self, phase: Phase) -> None:
        """Count one phase down to zero.

        Raises:
            QuitSignal: If the user quit before the phase completed.
        """
        timer = SessionTimer(self._get_duration_for_phase(phase), phase.label)
        logger.info("Starting %s phase (%d min)", phase.label, timer.total_seconds // 60)

        outcome = run_countdown(timer, self.keys, self.clock, self.renderer)
        if outcome == Outcome.QUIT:
            logger.info("Quit during %s phase with %ss left", phase.label, timer.remaining_seconds)
            raise QuitSignal()

    def run(self, cycles: Optional[int] = None) -> None:
        """Alternate Work and Break phases.

        Args:
            cycles: Number of Work/Break pairs to run, None for no limit.

        Raises:
            QuitSignal: When the user quits.
        """
        done = 0
        while cycles is None or done < cycles:
            self.run_phase(Phase.WORK)
            self._complete_work()

            self.run_phase(Phase.BREAK)
            self._complete_break()
            done += 1

    def _complete_work(self) -> None:
        self.completed_work += 1
        try:
            entry = self.history.record_completion(self.today())
        except PersistenceError as exc:
            self._report_failure(f"Session not saved: {exc}")
        else:
            logger.info("Work session completed (%d today)", entry.work_sessions)

        self._notify("Work Session Complete!", "Time for a break.")
        self._phase_changed(Phase.WORK, Phase.BREAK)

    def _complete_break(self) -> None:
        logger.info("Break over")
        self._notify("Break Over", "Ready for the next session?")
        self._phase_changed(Phase.BREAK, Phase.WORK)

    def _notify(self, title: str, message: str) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.notify(title, message)
        except NotificationError as exc:
            self._report_failure(f"Notification failed: {exc}")

    def _report_failure(self, message: str) -> None:
        logger.warning("%s", message)
        self.failures.append(message)

    def _phase_changed(self, old_phase: Phase, new_phase: Phase) -> None:
        if self.on_phase_complete:
            self.on_phase_complete(old_phase, new_phase)
