"""Per-day count of completed work sessions, stored as JSON."""

import json
import logging
from dataclasses import asdict, dataclass
from datetime import date
from pathlib import Path
from typing import Any, List, Optional, Union

from .errors import PersistenceError

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"


def date_key(day: Union[date, str, None] = None) -> str:
    """Normalize a date (default today) to its YYYY-MM-DD store key."""
    if day is None:
        day = date.today()
    if isinstance(day, date):
        return day.strftime(DATE_FORMAT)
    return day


@dataclass
class SessionLogEntry:
    date: str
    work_sessions: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> "SessionLogEntry":
        if not isinstance(data, dict):
            raise PersistenceError(f"expected an object, got {type(data).__name__}")
        day = data.get("date")
        count = data.get("work_sessions")
        if not isinstance(day, str):
            raise PersistenceError(f"entry has no valid date: {data!r}")
        if not isinstance(count, int) or isinstance(count, bool) or count < 0:
            raise PersistenceError(f"entry for {day} has an invalid count: {count!r}")
        return cls(date=day, work_sessions=count)


class SessionLog:
    """Read-modify-write accessor for the session log store.

    The whole collection is read fresh for every mutation and written back in
    full. There is no locking: two processes updating at once may lose one
    update.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def read_all(self) -> List[SessionLogEntry]:
        """Return every entry in stored order.

        A missing or unreadable file is treated as empty history.

        Raises:
            PersistenceError: If the file exists but its content is corrupt.
        """
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except UnicodeDecodeError as exc:
            raise PersistenceError(f"Invalid encoding in {self.path}: {exc}") from exc
        except OSError as exc:
            logger.warning("Could not read %s, treating as empty: %s", self.path, exc)
            return []

        if not text.strip():
            return []

        try:
            raw = json.loads(text)
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"Invalid JSON in {self.path}: {exc}") from exc

        if not isinstance(raw, list):
            raise PersistenceError(f"Expected a list of entries in {self.path}")

        return [SessionLogEntry.from_dict(item) for item in raw]

    def write_all(self, entries: List[SessionLogEntry]) -> None:
        """Replace the store with the given entries.

        Raises:
            PersistenceError: If the file cannot be written.
        """
        payload = json.dumps([asdict(entry) for entry in entries], indent=2)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(payload + "\n", encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Could not write {self.path}: {exc}") from exc

    def get(self, day: Union[date, str, None] = None) -> Optional[SessionLogEntry]:
        key = date_key(day)
        for entry in self.read_all():
            if entry.date == key:
                return entry
        return None

    def record_completion(self, day: Union[date, str, None] = None) -> SessionLogEntry:
        """Count one completed work session for a date (default today).

        Returns:
            The updated entry.

        Raises:
            PersistenceError: If the store is corrupt or cannot be written.
        """
        key = date_key(day)
        entries = self.read_all()

        for entry in entries:
            if entry.date == key:
                entry.work_sessions += 1
                break
        else:
            entry = SessionLogEntry(date=key, work_sessions=1)
            entries.append(entry)

        self.write_all(entries)
        logger.debug("Recorded session for %s (total %d)", key, entry.work_sessions)
        return entry
