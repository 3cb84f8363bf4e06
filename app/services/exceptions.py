class LedgerError(Exception):
    """Base class for streak/ledger errors surfaced to the caller."""


class StreakValidationError(LedgerError, ValueError):
    """Bad date range, overlapping interval, future date or invalid goal. Nothing was written."""


class ActiveStreakExistsError(LedgerError):
    """A new open streak was requested while one is already open."""


class NoActiveStreakError(LedgerError):
    """The operation needs an open streak and the user has none."""


class StreakNotFoundError(LedgerError):
    """No streak with that ID belongs to the user."""


class UserNotFoundError(LedgerError):
    """The user has no profile row to hold a ledger."""
