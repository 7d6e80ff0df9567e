"""
Exceptions raised by the data-access layer.

Only startup conditions get their own types. Per-statement failures
(bad SQL, constraint violations) surface as the driver's own exception
so callers can catch psycopg2.Error / sqlite3.Error as usual.
"""


class ShelfDBError(Exception):
    """Base class for shelfdb errors."""


class DriverUnavailableError(ShelfDBError):
    """A database driver package could not be imported."""

    def __init__(self, driver, hint=""):
        self.driver = driver
        message = f"Database driver '{driver}' is not available"
        if hint:
            message = f"{message}. {hint}"
        super().__init__(message)


class PrimaryUnavailableError(ShelfDBError):
    """The primary store refused or timed out the connectivity probe."""

    def __init__(self, target, cause):
        self.target = target
        self.cause = cause
        super().__init__(f"Could not connect to {target}: {cause}")
