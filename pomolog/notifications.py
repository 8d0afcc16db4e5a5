"""Notification support for phase completion."""

import logging
import platform
import shutil
import subprocess
import sys
from pathlib import Path
from typing import List, Optional

from .errors import NotificationError

logger = logging.getLogger(__name__)

# Upper bound on how long a sound clip may hold up the next phase
SOUND_TIMEOUT = 30

# Command-line players tried in order, per platform
SOUND_PLAYERS = {
    "Darwin": [["afplay"]],
    "Linux": [["paplay"], ["aplay", "-q"], ["play", "-q"]],
}


def _ring_bell() -> None:
    sys.stdout.write("\a")
    sys.stdout.flush()


def _applescript_string(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def desktop_command(title: str, message: str, system: Optional[str] = None) -> Optional[List[str]]:
    """Return the popup command for this platform, or None if there is none."""
    system = system or platform.system()
    if system == "Darwin":
        script = f"display notification {_applescript_string(message)} with title {_applescript_string(title)}"
        return ["osascript", "-e", script]
    if system == "Linux":
        return ["notify-send", title, message]
    return None


def send_desktop_notification(title: str, message: str, system: Optional[str] = None) -> None:
    """Show a desktop popup via osascript (macOS) or notify-send (Linux).

    Raises:
        NotificationError: If the platform has no popup tool, or the tool is
            missing or fails.
    """
    command = desktop_command(title, message, system)
    if command is None:
        raise NotificationError(f"No desktop notifications on {system or platform.system()}")

    try:
        result = subprocess.run(command, capture_output=True, timeout=5)
    except (subprocess.SubprocessError, OSError) as exc:
        raise NotificationError(f"{command[0]} failed: {exc}") from exc

    if result.returncode != 0:
        raise NotificationError(f"{command[0]} exited with {result.returncode}")


def find_player(system: Optional[str] = None) -> Optional[List[str]]:
    """Return the first available sound player command for this platform."""
    system = system or platform.system()
    for command in SOUND_PLAYERS.get(system, []):
        if shutil.which(command[0]):
            return command
    return None


def play_sound(path: Path, system: Optional[str] = None) -> None:
    """Play a sound file, blocking until playback ends.

    Raises:
        NotificationError: If the file is missing, no player is installed, or
            playback fails.
    """
    if not path.is_file():
        raise NotificationError(f"Sound file not found: {path}")

    player = find_player(system)
    if player is None:
        raise NotificationError("No audio player available")

    try:
        result = subprocess.run(
            player + [str(path)],
            capture_output=True,
            timeout=SOUND_TIMEOUT,
        )
    except subprocess.TimeoutExpired as exc:
        raise NotificationError(f"{player[0]} timed out playing {path}") from exc
    except OSError as exc:
        raise NotificationError(f"{player[0]} failed: {exc}") from exc

    if result.returncode != 0:
        stderr = result.stderr.decode(errors="replace").strip()
        raise NotificationError(f"{player[0]} exited with {result.returncode}: {stderr}")


class Notifier:
    """Phase-complete notifier: terminal bell, desktop popup and optional sound."""

    def __init__(self, enabled: bool = True, sound_file: Optional[Path] = None, bell: bool = True):
        self.enabled = enabled
        self.sound_file = sound_file
        self.bell = bell

    def notify(self, title: str, message: str) -> None:
        """Send a notification.

        The bell and desktop popup fail silently. Sound playback errors are
        raised so the caller can report them.

        Args:
            title: Notification title.
            message: Notification message.

        Raises:
            NotificationError: If the configured sound could not be played.
        """
        if not self.enabled:
            return

        if self.bell:
            _ring_bell()

        system = platform.system()
        try:
            send_desktop_notification(title, message, system)
        except NotificationError as exc:
            logger.debug("No desktop notification sent: %s", exc)

        if self.sound_file is not None:
            play_sound(self.sound_file, system)
