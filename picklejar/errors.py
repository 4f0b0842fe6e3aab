"""picklejar error types."""

from __future__ import annotations

import os


class PickleJarError(Exception):
    """Base class for every error a jar raises."""


class StoreIOError(PickleJarError):
    """Raised when reading, writing, or renaming the backing file fails.

    The underlying ``OSError`` is kept as ``os_error`` (and chained as
    ``__cause__`` by the raiser).

    Attributes:
        path: The file the failing operation targeted.
        os_error: The underlying operating-system error.
    """

    def __init__(self, path: str | os.PathLike, os_error: OSError) -> None:
        self.path = os.fspath(path)
        self.os_error = os_error
        super().__init__(f"{self.path}: {os_error}")


class SerializationError(PickleJarError):
    """Raised when a value or a whole snapshot cannot be encoded or decoded."""
