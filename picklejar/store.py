"""Factory function for building jars from plain settings."""

from __future__ import annotations

import os
from datetime import timedelta

from .clock import Clock
from .dump import DumpMode, DumpPolicy
from .jar import PickleJar
from .serialization import SerializationMethod


def _resolve_policy(
    dump_policy: DumpPolicy | DumpMode | str,
    interval: float | timedelta | None,
) -> DumpPolicy:
    if isinstance(dump_policy, DumpPolicy):
        if interval is not None:
            raise ValueError("interval cannot be combined with a DumpPolicy instance")
        return dump_policy

    if isinstance(dump_policy, DumpMode):
        mode = dump_policy
    else:
        try:
            mode = DumpMode(dump_policy.lower())
        except (AttributeError, ValueError):
            raise ValueError(f"Unknown dump policy: {dump_policy!r}") from None

    if mode is DumpMode.PERIODIC:
        if interval is None:
            raise ValueError("interval is required when dump_policy='periodic'")
        return DumpPolicy.periodic(interval)
    if interval is not None:
        raise ValueError("interval is only valid for dump_policy='periodic'")
    return DumpPolicy(mode)


def store(
    path: str | os.PathLike,
    *,
    dump_policy: DumpPolicy | DumpMode | str = "auto",
    interval: float | timedelta | None = None,
    method: SerializationMethod | str | int = "json",
    load: bool = False,
    create: bool = True,
    clock: Clock | None = None,
) -> PickleJar:
    """Create a PickleJar with sensible defaults.

    Args:
        path: Backing file.
        dump_policy: ``"auto"`` (default), ``"never"``,
            ``"upon_request"``, ``"periodic"``, or a ``DumpPolicy``.
        interval: Seconds between dumps; required for ``"periodic"``.
        method: Serialization method (default ``"json"``).
        load: Hydrate the jar from ``path``.
        create: With ``load=True``, start empty if ``path`` does not
            exist instead of raising.
        clock: Time source for the dump engine.

    Returns:
        A ``PickleJar`` instance.
    """
    policy = _resolve_policy(dump_policy, interval)
    method = SerializationMethod.from_value(method)

    if load and (os.path.exists(path) or not create):
        return PickleJar.load(path, policy, method, clock=clock)
    return PickleJar(path, policy, method, clock=clock)
