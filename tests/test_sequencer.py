"""Tests for the Work/Break cycle."""

import logging
from datetime import date

import pytest

from conftest import RecordingNotifier, ScriptedInput
from pomolog.errors import NotificationError, QuitSignal
from pomolog.sequencer import Phase, PhaseSequencer

TODAY = date(2024, 1, 1)


def make_sequencer(clock, renderer, history, keys=None, notifier=None, work=1, brk=1, **kwargs):
    return PhaseSequencer(
        work,
        brk,
        keys=ScriptedInput(clock, keys=keys),
        clock=clock,
        renderer=renderer,
        history=history,
        notifier=notifier,
        today=lambda: TODAY,
        **kwargs,
    )


class TestPhaseSequencerBasics:
    """Test construction."""

    def test_durations_in_seconds(self, clock, renderer, history):
        """Minutes are converted to phase seconds."""
        seq = make_sequencer(clock, renderer, history, work=25, brk=5)
        assert seq.work_secs == 25 * 60
        assert seq.break_secs == 5 * 60

    @pytest.mark.parametrize("work,brk", [(0, 5), (25, 0), (-1, 5)])
    def test_rejects_non_positive_durations(self, clock, renderer, history, work, brk):
        """Zero-length phases are rejected up front."""
        with pytest.raises(ValueError):
            make_sequencer(clock, renderer, history, work=work, brk=brk)

    def test_phase_labels(self):
        """Phases are labelled Work and Break."""
        assert Phase.WORK.label == "Work"
        assert Phase.BREAK.label == "Break"


class TestFullCycle:
    """Test Work -> log -> Break -> Work."""

    def test_end_to_end_one_minute_phases(self, clock, renderer, history):
        """Work completes and is logged, Break runs, then Work starts again."""
        counts_at_transition = []

        def on_phase_complete(old, new):
            entry = history.get(TODAY)
            counts_at_transition.append((old, new, entry.work_sessions if entry else 0))

        seq = make_sequencer(
            clock, renderer, history, keys={120: "q"}, on_phase_complete=on_phase_complete
        )

        with pytest.raises(QuitSignal):
            seq.run()

        assert counts_at_transition == [
            (Phase.WORK, Phase.BREAK, 1),
            (Phase.BREAK, Phase.WORK, 1),
        ]
        assert renderer.phase_starts() == [("Work", 60), ("Break", 60), ("Work", 60)]
        assert clock.ticks == 120
        assert history.get(TODAY).work_sessions == 1

    def test_bounded_cycles(self, clock, renderer, history):
        """run(cycles=n) returns after n Work/Break pairs."""
        notifier = RecordingNotifier()
        seq = make_sequencer(clock, renderer, history, notifier=notifier)

        seq.run(cycles=2)

        assert history.get(TODAY).work_sessions == 2
        assert seq.completed_work == 2
        assert clock.ticks == 240
        assert [title for title, _ in notifier.sent] == [
            "Work Session Complete!",
            "Break Over",
            "Work Session Complete!",
            "Break Over",
        ]

    def test_log_written_before_break_starts(self, clock, renderer, history):
        """The completed session is on disk before the first break render."""
        seen = []

        class CheckingRenderer:
            def render(self, state):
                if state.phase_label == "Break" and not seen:
                    entry = history.get(TODAY)
                    seen.append(entry.work_sessions if entry else 0)

        seq = make_sequencer(clock, CheckingRenderer(), history)
        seq.run(cycles=1)
        assert seen == [1]


class TestQuit:
    """Test quitting mid-cycle."""

    def test_quit_during_work_skips_log_and_notify(self, clock, renderer, history):
        """An interrupted work phase is never recorded."""
        notifier = RecordingNotifier()
        seq = make_sequencer(clock, renderer, history, keys={59: "q"}, notifier=notifier)

        with pytest.raises(QuitSignal):
            seq.run()

        assert history.read_all() == []
        assert notifier.sent == []
        assert not history.path.exists()

    def test_quit_during_break(self, clock, renderer, history):
        """Quitting a break keeps the finished work session only."""
        notifier = RecordingNotifier()
        seq = make_sequencer(clock, renderer, history, keys={90: "q"}, notifier=notifier)

        with pytest.raises(QuitSignal):
            seq.run()

        assert history.get(TODAY).work_sessions == 1
        assert [title for title, _ in notifier.sent] == ["Work Session Complete!"]

    def test_quit_while_paused(self, clock, renderer, history):
        """Quit from pause ends the run without logging."""
        keys = ScriptedInput(clock, keys={10: "p"}, reads=[("q", 5)])
        seq = PhaseSequencer(
            1, 1, keys=keys, clock=clock, renderer=renderer, history=history, today=lambda: TODAY
        )

        with pytest.raises(QuitSignal):
            seq.run()

        assert history.read_all() == []


class TestPeripheralFailures:
    """Test that logging and notification failures never stop the timer."""

    def test_corrupt_log_is_warned_and_skipped(self, clock, renderer, history, caplog):
        """A corrupt store produces a warning and the cycle goes on."""
        history.path.write_text("not json")
        seq = make_sequencer(clock, renderer, history)

        with caplog.at_level(logging.WARNING):
            seq.run(cycles=1)

        assert "Session not saved" in caplog.text
        assert len(seq.failures) == 1
        assert seq.failures[0].startswith("Session not saved: Invalid JSON")
        assert renderer.phase_starts() == [("Work", 60), ("Break", 60)]
        assert history.path.read_text() == "not json"

    def test_undecodable_log_is_warned_and_skipped(self, clock, renderer, history, caplog):
        """A store with invalid UTF-8 does not abort the countdown."""
        history.path.write_bytes(b"\xff\xfe[]")
        seq = make_sequencer(clock, renderer, history)

        with caplog.at_level(logging.WARNING):
            seq.run(cycles=1)

        assert "Invalid encoding" in caplog.text
        assert renderer.phase_starts() == [("Work", 60), ("Break", 60)]
        assert clock.ticks == 120

    def test_notification_error_is_warned_and_skipped(self, clock, renderer, history, caplog):
        """A failing notifier is reported and ignored."""
        notifier = RecordingNotifier(error=NotificationError("no speaker"))
        seq = make_sequencer(clock, renderer, history, notifier=notifier)

        with caplog.at_level(logging.WARNING):
            seq.run(cycles=1)

        assert "no speaker" in caplog.text
        assert seq.failures == ["Notification failed: no speaker"] * 2
        assert len(notifier.sent) == 2
        assert history.get(TODAY).work_sessions == 1
