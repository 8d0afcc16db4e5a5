"""Shared fakes for driving the countdown without a terminal."""

from typing import Dict, List, Optional, Tuple

import pytest

from pomolog.history import SessionLog
from pomolog.scheduler import TimerState


class FakeClock:
    """Tick source that advances simulated time instantly."""

    def __init__(self):
        self.now = 0
        self.ticks = 0
        self.resets = 0

    def reset(self) -> None:
        self.resets += 1

    def wait(self) -> None:
        self.ticks += 1
        self.now += 1

    def advance(self, seconds: int) -> None:
        self.now += seconds


class ScriptedInput:
    """Key source driven by the fake clock.

    ``keys`` maps a tick count to the key that arrives while polling at that
    point. ``reads`` are the (key, seconds waited) answers to blocking reads
    made while paused.
    """

    def __init__(
        self,
        clock: FakeClock,
        keys: Optional[Dict[int, str]] = None,
        reads: Optional[List[Tuple[str, int]]] = None,
    ):
        self.clock = clock
        self.keys = dict(keys or {})
        self.reads = list(reads or [])
        self.polls = 0

    def poll(self, timeout):
        self.polls += 1
        return self.keys.pop(self.clock.ticks, None)

    def read(self) -> str:
        assert self.reads, "blocking read with no scripted key"
        key, waited = self.reads.pop(0)
        self.clock.advance(waited)
        return key


class RecordingRenderer:
    def __init__(self):
        self.states: List[Tuple[str, int, int, bool]] = []

    def render(self, state: TimerState) -> None:
        self.states.append((state.phase_label, state.remaining_seconds, state.total_seconds, state.paused))

    @property
    def remaining(self) -> List[int]:
        return [s[1] for s in self.states]

    def phase_starts(self) -> List[Tuple[str, int]]:
        """(label, total) for every render of a fresh phase."""
        return [(s[0], s[2]) for s in self.states if s[1] == s[2]]


class RecordingNotifier:
    def __init__(self, error: Optional[Exception] = None):
        self.sent: List[Tuple[str, str]] = []
        self.error = error

    def notify(self, title: str, message: str) -> None:
        self.sent.append((title, message))
        if self.error is not None:
            raise self.error


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def renderer():
    return RecordingRenderer()


@pytest.fixture
def history(tmp_path):
    return SessionLog(tmp_path / "session_log.json")
