"""Fatal error types raised while building the release index."""
from __future__ import annotations


class IndexerError(RuntimeError):
    """Base class for errors that abort an indexing run."""
    pass


class ConfigError(IndexerError):
    """Raised when the config file is unreadable or incomplete."""
    pass


class IndexWriteError(IndexerError):
    """Raised when the index tree cannot be written.

    ``operation`` names what was attempted (``mkdir``, ``symlink``,
    ``remove``) and ``path`` the entry it was attempted on.
    """

    def __init__(self, operation: str, path: str, cause: OSError | None = None, detail: str = ""):
        self.operation = operation
        self.path = path
        self.cause = cause
        msg = f"{operation} failed: {path}"
        if detail:
            msg += f" {detail}"
        if cause is not None:
            msg += f" ({cause.strerror or cause})"
        super().__init__(msg)
