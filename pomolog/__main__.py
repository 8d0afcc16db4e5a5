"""Entry point for python -m pomolog."""

import argparse
import logging
import sys
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler

from .clock import Clock
from .config import DEFAULT_BREAK_MINUTES, DEFAULT_WORK_MINUTES, LOG_FILE_ENV, TimerConfig
from .errors import InputError, PersistenceError, QuitSignal
from .history import SessionLog
from .notifications import Notifier
from .scheduler import KeySource, Renderer
from .sequencer import PhaseSequencer
from .stats import print_stats
from .terminal import LineRenderer, terminal_session

logger = logging.getLogger("pomolog")

console = Console()
err_console = Console(stderr=True)


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pomolog",
        description="Work/break countdown timer that keeps a daily session log",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Controls:
  p        Pause
  r        Resume
  q        Quit

Examples:
  pomolog                     # 25 minute work, 5 minute break
  pomolog -w 50 -b 10         # longer sessions
  pomolog --gauge             # full-screen gauge display
  pomolog stats               # completed sessions per day

The session log path can also be set with {LOG_FILE_ENV}.
""",
    )

    parser.add_argument(
        "-w",
        "--work",
        type=positive_int,
        default=DEFAULT_WORK_MINUTES,
        metavar="MINS",
        help=f"Work phase duration in minutes (default: {DEFAULT_WORK_MINUTES})",
    )
    parser.add_argument(
        "-b",
        "--break",
        type=positive_int,
        default=DEFAULT_BREAK_MINUTES,
        dest="break_minutes",
        metavar="MINS",
        help=f"Break phase duration in minutes (default: {DEFAULT_BREAK_MINUTES})",
    )
    parser.add_argument(
        "--log-file",
        metavar="PATH",
        help="Session log file (default: session_log.json)",
    )
    parser.add_argument(
        "--sound",
        metavar="PATH",
        help="Sound file to play when a phase completes",
    )
    parser.add_argument(
        "--no-notify",
        action="store_true",
        help="Disable notifications (bell, desktop and sound)",
    )
    parser.add_argument(
        "--gauge",
        action="store_true",
        help="Use the full-screen gauge display",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log phase transitions and debug details to stderr",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.add_parser("stats", help="Show completed work sessions per day")

    return parser


def setup_logging(verbose: bool) -> None:
    if not logger.handlers:
        logger.addHandler(RichHandler(console=err_console, show_path=False))
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def show_stats(history: SessionLog) -> int:
    try:
        entries = history.read_all()
    except PersistenceError as exc:
        err_console.print(f"[red]ERROR:[/red] {exc}")
        return 1
    print_stats(entries, console)
    return 0


def report_failures(sequencer: Optional[PhaseSequencer]) -> None:
    """Repeat warnings that were hidden behind the countdown screen."""
    if sequencer is None:
        return
    for message in sequencer.failures:
        err_console.print(f"[yellow]WARN:[/yellow] {message}")


def run_terminal(config: TimerConfig, history: SessionLog, notifier: Notifier) -> int:
    sequencer = None
    try:
        with terminal_session(console=console) as keys:
            sequencer = PhaseSequencer(
                config.work_minutes,
                config.break_minutes,
                keys=keys,
                clock=Clock(),
                renderer=LineRenderer(console),
                history=history,
                notifier=notifier,
            )
            sequencer.run()
    except InputError as exc:
        report_failures(sequencer)
        err_console.print(f"[red]ERROR:[/red] {exc}")
        return 1
    except (QuitSignal, KeyboardInterrupt):
        pass

    report_failures(sequencer)
    console.print("Bye.")
    return 0


def run_gauge_ui(config: TimerConfig, history: SessionLog, notifier: Notifier) -> int:
    # Textual owns the terminal, but still needs one to draw on
    if not sys.stdin.isatty():
        err_console.print("[red]ERROR:[/red] stdin is not an interactive terminal")
        return 1

    from .ui import run_gauge

    # The app rings its own bell
    notifier.bell = False

    def build_sequencer(keys: KeySource, renderer: Renderer) -> PhaseSequencer:
        return PhaseSequencer(
            config.work_minutes,
            config.break_minutes,
            keys=keys,
            clock=Clock(),
            renderer=renderer,
            history=history,
            notifier=notifier,
        )

    app = run_gauge(build_sequencer, notify_enabled=config.notify)
    report_failures(app.sequencer)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    config = TimerConfig.from_args(args)
    try:
        config.validate()
    except ValueError as exc:
        parser.error(str(exc))
    history = SessionLog(config.log_file)

    if args.command == "stats":
        return show_stats(history)

    console.print(f"Work Duration: {config.work_minutes} minutes")
    console.print(f"Break Duration: {config.break_minutes} minutes")

    notifier = Notifier(enabled=config.notify, sound_file=config.sound_file)
    if config.gauge:
        return run_gauge_ui(config, history, notifier)
    return run_terminal(config, history, notifier)


if __name__ == "__main__":
    sys.exit(main())
