"""Exception types for pomolog."""


class PomologError(Exception):
    """Base class for pomolog errors."""


class InputError(PomologError):
    """No interactive terminal is available for keyboard input."""


class PersistenceError(PomologError):
    """The session log store is corrupt or cannot be written."""


class NotificationError(PomologError):
    """A phase-complete notification could not be delivered."""


class QuitSignal(Exception):
    """Raised when the user quits mid-phase.

    Not an error: it unwinds the phase loop so terminal state is restored
    before the process exits.
    """
