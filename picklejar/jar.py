"""PickleJar: typed key-value store persisted to a single file."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator, MutableMapping
from typing import Any, Callable, Iterable

from .clock import Clock
from .dump import Dumper, DumpPolicy, purge_temp_files, read_snapshot
from .errors import PickleJarError
from .extenders import ListExtender
from .kv.memory import Memory
from .serialization import SerializationMethod, codec_for

logger = logging.getLogger(__name__)


class PickleJar(MutableMapping[str, Any]):
    """In-memory key-value store with whole-file persistence.

    Values are encoded on write and decoded on read, against the type the
    caller asks for. A key holds either one value or a list of values.

    Every mutation consults the dump policy. If the dump it triggers
    fails, the mutation is undone before the error is raised, so memory
    never runs ahead of what the caller was told succeeded.

    Implements ``MutableMapping[str, Any]``.

    Args:
        path: Backing file. Not read at construction; see ``load``.
        dump_policy: When mutations dump (default ``DumpPolicy.auto()``).
        method: Serialization method (default JSON).
        clock: Time source for the dump engine.
    """

    def __init__(
        self,
        path: str | os.PathLike,
        dump_policy: DumpPolicy | None = None,
        method: SerializationMethod | str | int = SerializationMethod.JSON,
        *,
        clock: Clock | None = None,
    ) -> None:
        self._codec = codec_for(method)
        self._memory = Memory()
        self._dumper = Dumper(
            path,
            self._codec,
            dump_policy if dump_policy is not None else DumpPolicy.auto(),
            clock,
        )

    @classmethod
    def load(
        cls,
        path: str | os.PathLike,
        dump_policy: DumpPolicy | None = None,
        method: SerializationMethod | str | int = SerializationMethod.JSON,
        *,
        clock: Clock | None = None,
    ) -> PickleJar:
        """Build a jar from the snapshot stored at ``path``.

        Raises:
            StoreIOError: The file cannot be read.
            SerializationError: The file is not a valid snapshot.
        """
        jar = cls(path, dump_policy, method, clock=clock)
        jar._memory.restore(read_snapshot(jar.path, jar._codec))
        return jar

    # -- Configuration --

    @property
    def path(self) -> str:
        return self._dumper.path

    @property
    def dump_policy(self) -> DumpPolicy:
        return self._dumper.policy

    @property
    def method(self) -> SerializationMethod:
        return self._codec.method

    @property
    def dump_count(self) -> int:
        """Successful dumps made by this jar."""
        return self._dumper.dump_count

    # -- Read operations --

    def get(self, key: str, default: Any = None, *, as_type: type | None = None) -> Any:
        """Decode the value under ``key``.

        Returns ``default`` if the key is missing, holds a list, or does
        not decode as ``as_type``.
        """
        raw = self._memory.get(key)
        if raw is None:
            return default
        value = self._codec.decode_value(raw, as_type)
        return default if value is None else value

    def exists(self, key: str) -> bool:
        return key in self._memory

    def key_count(self) -> int:
        """Number of keys, values and lists together."""
        return len(self._memory)

    def list_keys(self) -> list[str]:
        """Keys holding a single value."""
        return list(self._memory.keys())

    def list_names(self) -> list[str]:
        """Keys holding a list."""
        return list(self._memory.list_keys())

    # -- Write operations --

    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any value or list.

        Raises:
            SerializationError: ``value`` cannot be encoded; nothing changes.
            StoreIOError: The triggered dump failed; the write is undone.
        """
        raw = self._codec.encode_value(value)
        old, old_list = self._memory.put(key, raw)
        self._persist(key, lambda: self._memory.reinstate(key, old, old_list))

    def remove(self, key: str) -> bool:
        """Remove ``key`` whether it holds a value or a list.

        Returns False if there was nothing to remove.
        """
        old = self._memory.pop(key)
        old_list = None
        if old is None:
            old_list = self._memory.pop_list(key)
            if old_list is None:
                return False
        self._persist(key, lambda: self._memory.reinstate(key, old, old_list))
        return True

    def clear(self) -> None:
        """Remove every key with a single dump."""
        snapshot = self._memory.snapshot()
        self._memory.clear()
        self._persist("<all keys>", lambda: self._memory.restore(snapshot))

    def dump(self) -> None:
        """Write the whole dataset now, whatever the policy."""
        self._dumper.dump(self._memory.snapshot())

    def purge_temp_files(self) -> list[str]:
        """Delete temporary files left by interrupted dumps of this jar."""
        return purge_temp_files(self.path)

    # -- Lists --

    def list_add(self, name: str, value: Any) -> None:
        """Append one value to list ``name``, creating it if needed."""
        self.list_extend(name, [value])

    def list_extend(self, name: str, values: Iterable[Any]) -> None:
        """Append values to list ``name``, creating it if needed.

        All values are encoded before the list changes, so an encoding
        failure appends nothing.
        """
        items = [self._codec.encode_value(v) for v in values]
        old, old_list = self._memory.append(name, *items)
        self._persist(name, lambda: self._memory.reinstate(name, old, old_list))

    def lcreate(self, name: str) -> ListExtender:
        """Create (or reset) an empty list."""
        old, old_list = self._memory.put_list(name, [])
        self._persist(name, lambda: self._memory.reinstate(name, old, old_list))
        return ListExtender(self, name)

    def ladd(self, name: str, value: Any) -> ListExtender:
        self.list_add(name, value)
        return ListExtender(self, name)

    def lextend(self, name: str, values: Iterable[Any]) -> ListExtender:
        self.list_extend(name, values)
        return ListExtender(self, name)

    def lget(self, name: str, pos: int, *, as_type: type | None = None) -> Any | None:
        """Decode item ``pos`` of list ``name``; None if absent or mismatched."""
        items = self._memory.get_list(name)
        if items is None:
            return None
        try:
            raw = items[pos]
        except IndexError:
            return None
        return self._codec.decode_value(raw, as_type)

    def lgetall(self, name: str, *, as_type: type | None = None) -> list[Any] | None:
        """Decode every item of list ``name``.

        Items that do not decode as ``as_type`` are left out. Returns None
        if there is no such list.
        """
        items = self._memory.get_list(name)
        if items is None:
            return None
        decoded = (self._codec.decode_value(raw, as_type) for raw in items)
        return [v for v in decoded if v is not None]

    def llen(self, name: str) -> int:
        items = self._memory.get_list(name)
        return len(items) if items is not None else 0

    def lexists(self, name: str) -> bool:
        return self._memory.get_list(name) is not None

    def lremovelist(self, name: str) -> int:
        """Remove list ``name``, returning how many items it held."""
        old_list = self._memory.pop_list(name)
        if old_list is None:
            return 0
        self._persist(name, lambda: self._memory.reinstate(name, None, old_list))
        return len(old_list)

    # -- MutableMapping --

    def __getitem__(self, key: str) -> Any:
        raw = self._memory.get(key)
        if raw is not None:
            return self._codec.decode_value(raw)
        items = self._memory.get_list(key)
        if items is not None:
            return [self._codec.decode_value(raw) for raw in items]
        raise KeyError(key)

    def __setitem__(self, key: str, value: Any) -> None:
        self.set(key, value)

    def __delitem__(self, key: str) -> None:
        if not self.remove(key):
            raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key in self._memory

    def __iter__(self) -> Iterator[str]:
        return iter([*self._memory.keys(), *self._memory.list_keys()])

    def __len__(self) -> int:
        return len(self._memory)

    def __repr__(self) -> str:
        return (
            f"PickleJar({self.path!r}, policy={self.dump_policy.mode.name}, "
            f"keys={len(self._memory)})"
        )

    # -- Internals --

    def _persist(self, key: str, undo: Callable[[], None]) -> None:
        try:
            self._dumper.maybe_dump(self._memory.snapshot)
        except PickleJarError as e:
            undo()
            logger.warning("Dump of %s failed, rolled back %r: %s", self.path, key, e)
            raise
