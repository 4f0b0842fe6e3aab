"""In-memory scalar and list mappings."""

from typing import Iterable

from ..serialization import Lists, Scalars


def _check_bytes(key: str, value: bytes) -> None:
    if not isinstance(value, bytes):
        raise TypeError(f"Expected bytes for {key}, got {type(value).__name__}")


class Memory:
    """Two bytes-only mappings sharing one key space.

    Scalars map a key to one encoded buffer, lists map a key to an ordered
    sequence of buffers. A key lives in at most one of them: writing one
    kind drops the other. Every write returns what it displaced so the
    caller can undo it.
    """

    def __init__(self, scalars: Scalars | None = None, lists: Lists | None = None) -> None:
        self.scalars: Scalars = {}
        self.lists: Lists = {}
        self.restore((scalars or {}, lists or {}))

    # -- Read operations --

    def get(self, key: str) -> bytes | None:
        return self.scalars.get(key)

    def get_list(self, key: str) -> list[bytes] | None:
        return self.lists.get(key)

    def keys(self) -> Iterable[str]:
        return list(self.scalars.keys())

    def list_keys(self) -> Iterable[str]:
        return list(self.lists.keys())

    def __contains__(self, key: str) -> bool:
        return key in self.scalars or key in self.lists

    def __len__(self) -> int:
        return len(self.scalars) + len(self.lists)

    # -- Write operations --

    def put(self, key: str, value: bytes) -> tuple[bytes | None, list[bytes] | None]:
        """Store a scalar, returning the (scalar, list) it displaced."""
        _check_bytes(key, value)
        old_list = self.lists.pop(key, None)
        old = self.scalars.get(key)
        self.scalars[key] = value
        return old, old_list

    def put_list(self, key: str, items: list[bytes]) -> tuple[bytes | None, list[bytes] | None]:
        """Store a whole list, returning the (scalar, list) it displaced."""
        for item in items:
            _check_bytes(key, item)
        old = self.scalars.pop(key, None)
        old_list = self.lists.get(key)
        self.lists[key] = list(items)
        return old, old_list

    def append(self, key: str, *items: bytes) -> tuple[bytes | None, list[bytes] | None]:
        """Append to a list, creating it if absent.

        Returns the (scalar, list) state before the call; the list is a
        copy, so restoring it undoes the append.
        """
        for item in items:
            _check_bytes(key, item)
        old = self.scalars.pop(key, None)
        current = self.lists.get(key)
        old_list = list(current) if current is not None else None
        self.lists.setdefault(key, []).extend(items)
        return old, old_list

    def pop(self, key: str) -> bytes | None:
        return self.scalars.pop(key, None)

    def pop_list(self, key: str) -> list[bytes] | None:
        return self.lists.pop(key, None)

    def reinstate(self, key: str, old: bytes | None, old_list: list[bytes] | None) -> None:
        """Put ``key`` back to a state previously returned by a write."""
        self.scalars.pop(key, None)
        self.lists.pop(key, None)
        if old is not None:
            self.scalars[key] = old
        if old_list is not None:
            self.lists[key] = old_list

    # -- Whole-dataset operations --

    def snapshot(self) -> tuple[Scalars, Lists]:
        """Copy both mappings."""
        return dict(self.scalars), {k: list(v) for k, v in self.lists.items()}

    def restore(self, snapshot: tuple[Scalars, Lists]) -> None:
        """Replace both mappings with a snapshot."""
        scalars, lists = snapshot
        overlap = scalars.keys() & lists.keys()
        if overlap:
            raise ValueError(f"Keys present as both scalar and list: {sorted(overlap)}")
        for key, value in scalars.items():
            _check_bytes(key, value)
        for key, items in lists.items():
            for item in items:
                _check_bytes(key, item)
        self.scalars = dict(scalars)
        self.lists = {k: list(v) for k, v in lists.items()}

    def clear(self) -> None:
        self.scalars.clear()
        self.lists.clear()
