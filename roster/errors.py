"""
Error types and error logging for roster.

Every user-facing failure is a RosterError (a ValueError), so the CLI can
report it as a clean message and carry on. Unexpected exceptions are logged
with their full stack trace for debugging.
"""

import os
import traceback
from datetime import datetime, timezone
from pathlib import Path


SEARCH_USAGE = (
    "search: Searches all contacts whose information contains the specified "
    "keywords (case-insensitive, whole words) and lists them with index numbers.\n"
    "Parameters: [CONDITION] [n/NAME] [p/PHONE] [e/EMAIL] [a/ADDRESS] [t/TAG]...\n"
    "Example: search t/friend, search and n/John a/NUS, "
    "search or p/12345678 e/betsy@nus.edu"
)


class RosterError(ValueError):
    """Base class for recoverable, user-visible errors."""


class QueryError(RosterError):
    """A search query that cannot be interpreted."""


class EmptyQuery(QueryError):
    def __init__(self, message: str = f"Specify at least one field to search.\n{SEARCH_USAGE}"):
        super().__init__(message)


class MalformedCondition(QueryError):
    def __init__(self, condition: str):
        self.condition = condition
        super().__init__(f"Unknown search condition {condition!r} (use 'and' or 'or').\n{SEARCH_USAGE}")


class InvalidIndex(RosterError):
    def __init__(self, index: int, size: int):
        self.index = index
        self.size = size
        super().__init__(f"The contact index provided is invalid: {index} (listed: {size})")


class InvalidValue(RosterError):
    """A contact field or tag identifier failed validation."""


class DuplicateContact(RosterError):
    def __init__(self, name: str):
        super().__init__(f"This contact already exists: {name}")


class TagError(RosterError):
    """A tag operation that would break tag integrity."""

    def __init__(self, message: str, tag=None):
        self.tag = tag
        super().__init__(message)


class UnknownTag(TagError):
    def __init__(self, tag):
        super().__init__(f"This tag does not exist: {tag}", tag)


class DuplicateTag(TagError):
    def __init__(self, tag):
        super().__init__(f"The contact already has the tag: {tag}", tag)


class TagNotPresent(TagError):
    def __init__(self, tag):
        super().__init__(f"The contact does not have the tag: {tag}", tag)


def _error_log_path() -> Path:
    """Resolve error log path, respecting ROSTER_STORE_PATH."""
    store = os.environ.get("ROSTER_STORE_PATH")
    if store:
        return Path(store) / "roster-errors.log"
    return Path.home() / ".roster" / "roster-errors.log"


def log_exception(exc: Exception, context: str = "") -> Path:
    """
    Log exception with full traceback to file.

    Args:
        exc: The exception that occurred
        context: Optional context string (e.g., command name)

    Returns:
        Path to the error log file
    """
    log_path = _error_log_path()
    timestamp = datetime.now(timezone.utc).isoformat()
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(log_path, os.O_WRONLY | os.O_CREAT | os.O_APPEND, 0o600)
        with os.fdopen(fd, "a") as f:
            f.write(f"\n{'='*60}\n")
            f.write(f"[{timestamp}]")
            if context:
                f.write(f" {context}")
            f.write("\n")
            f.write("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))
    except OSError:
        pass  # Can't write error log; don't crash over it
    return log_path
