"""Runtime configuration for the timer."""

import argparse
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_WORK_MINUTES = 25
DEFAULT_BREAK_MINUTES = 5
DEFAULT_LOG_FILE = "session_log.json"
LOG_FILE_ENV = "POMOLOG_LOG_FILE"


def resolve_log_file(flag: Optional[str], environ: Mapping[str, str] = os.environ) -> Path:
    """Pick the session log path: flag, then environment, then default."""
    raw = flag or environ.get(LOG_FILE_ENV) or DEFAULT_LOG_FILE
    return Path(raw).expanduser()


@dataclass
class TimerConfig:
    work_minutes: int = DEFAULT_WORK_MINUTES
    break_minutes: int = DEFAULT_BREAK_MINUTES
    log_file: Path = Path(DEFAULT_LOG_FILE)
    sound_file: Optional[Path] = None
    notify: bool = True
    gauge: bool = False

    @classmethod
    def from_args(cls, args: argparse.Namespace, environ: Mapping[str, str] = os.environ) -> "TimerConfig":
        sound = getattr(args, "sound", None)
        return cls(
            work_minutes=args.work,
            break_minutes=args.break_minutes,
            log_file=resolve_log_file(args.log_file, environ),
            sound_file=Path(sound).expanduser() if sound else None,
            notify=not args.no_notify,
            gauge=args.gauge,
        )

    def validate(self) -> None:
        if self.work_minutes <= 0 or self.break_minutes <= 0:
            raise ValueError("Durations must be positive integers")
