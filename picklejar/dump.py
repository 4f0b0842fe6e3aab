"""Dump policy and the engine that writes snapshots to disk."""

from __future__ import annotations

import contextlib
import enum
import glob
import logging
import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, cast

from .clock import Clock, SystemClock
from .errors import StoreIOError
from .serialization import Codec, Lists, Scalars

logger = logging.getLogger(__name__)

TEMP_MARKER = ".temp."


class DumpMode(enum.Enum):
    NEVER = "never"
    AUTO = "auto"
    UPON_REQUEST = "upon_request"
    PERIODIC = "periodic"


@dataclass(frozen=True)
class DumpPolicy:
    """When a mutating operation writes the dataset to disk.

    ``NEVER`` and ``UPON_REQUEST`` only write on an explicit ``dump()``.
    ``AUTO`` writes after every mutation. ``PERIODIC`` writes on a
    mutation once more than ``interval`` seconds have passed since the
    last dump.
    """

    mode: DumpMode
    interval: float | None = None

    def __post_init__(self) -> None:
        if self.mode is DumpMode.PERIODIC:
            if self.interval is None or self.interval <= 0:
                raise ValueError("PERIODIC policy requires a positive interval")
        elif self.interval is not None:
            raise ValueError(f"interval is only valid for PERIODIC, not {self.mode.name}")

    @classmethod
    def never(cls) -> DumpPolicy:
        return cls(DumpMode.NEVER)

    @classmethod
    def auto(cls) -> DumpPolicy:
        return cls(DumpMode.AUTO)

    @classmethod
    def upon_request(cls) -> DumpPolicy:
        return cls(DumpMode.UPON_REQUEST)

    @classmethod
    def periodic(cls, interval: float | timedelta) -> DumpPolicy:
        if isinstance(interval, timedelta):
            interval = interval.total_seconds()
        return cls(DumpMode.PERIODIC, float(interval))


def temp_path(path: str, timestamp: float) -> str:
    """Temporary file a dump writes before renaming onto ``path``."""
    return f"{path}{TEMP_MARKER}{int(timestamp)}"


def find_temp_files(path: str | os.PathLike) -> list[str]:
    """Temporary files left next to ``path`` by interrupted dumps."""
    prefix = f"{os.fspath(path)}{TEMP_MARKER}"
    return sorted(
        p for p in glob.glob(f"{glob.escape(prefix)}*") if p[len(prefix):].isdigit()
    )


def purge_temp_files(path: str | os.PathLike) -> list[str]:
    """Delete orphaned temporary files for ``path``, returning what was removed."""
    removed = []
    for temp in find_temp_files(path):
        try:
            os.remove(temp)
        except FileNotFoundError:
            continue
        except OSError as e:
            raise StoreIOError(temp, e) from e
        removed.append(temp)
    if removed:
        logger.info("Purged %d orphaned temp file(s) for %s", len(removed), path)
    return removed


def read_snapshot(path: str | os.PathLike, codec: Codec) -> tuple[Scalars, Lists]:
    """Read and decode a whole snapshot file."""
    try:
        with open(path, "rb") as f:
            raw = f.read()
    except OSError as e:
        raise StoreIOError(path, e) from e
    scalars, lists = codec.decode_snapshot(raw)
    logger.debug("Loaded %s: %d scalar(s), %d list(s)", path, len(scalars), len(lists))
    return scalars, lists


class Dumper:
    """Writes snapshots to one file and decides when a mutation should.

    Args:
        path: The backing file.
        codec: Codec used to encode snapshots.
        policy: The dump policy.
        clock: Time source (defaults to the system clock).
    """

    def __init__(
        self,
        path: str | os.PathLike,
        codec: Codec,
        policy: DumpPolicy,
        clock: Clock | None = None,
    ) -> None:
        self.path = os.fspath(path)
        self.codec = codec
        self.policy = policy
        self.clock = clock if clock is not None else SystemClock()
        self.last_dump = self.clock.monotonic()
        self.dump_count = 0

    def maybe_dump(self, snapshot: Callable[[], tuple[Scalars, Lists]]) -> bool:
        """Dump if the policy says a mutation should. Returns True if it tried."""
        mode = self.policy.mode
        if mode is DumpMode.AUTO:
            self.dump(snapshot())
            return True
        if mode is DumpMode.PERIODIC:
            interval = cast(float, self.policy.interval)
            if self.clock.monotonic() - self.last_dump <= interval:
                return False
            try:
                self.dump(snapshot())
            finally:
                # Reset even on failure so a broken target is not retried on
                # every single mutation.
                self.last_dump = self.clock.monotonic()
            return True
        return False

    def dump(self, snapshot: tuple[Scalars, Lists]) -> None:
        """Encode ``snapshot`` and atomically replace the backing file.

        The data goes to a temporary file first; only the final rename
        makes it visible, so a failure at any step leaves the previous
        file intact.
        """
        scalars, lists = snapshot
        data = self.codec.encode_snapshot(scalars, lists)
        temp = temp_path(self.path, self.clock.time())

        try:
            with open(temp, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            self._discard(temp)
            raise StoreIOError(temp, e) from e

        try:
            os.replace(temp, self.path)
        except OSError as e:
            self._discard(temp)
            raise StoreIOError(self.path, e) from e

        self.last_dump = self.clock.monotonic()
        self.dump_count += 1
        logger.debug("Dumped %d bytes to %s", len(data), self.path)

    @staticmethod
    def _discard(temp: str) -> None:
        with contextlib.suppress(OSError):
            os.remove(temp)
