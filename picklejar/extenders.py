"""ListExtender: chained appends to one list."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable

if TYPE_CHECKING:
    from .jar import PickleJar


class ListExtender:
    """Handle for appending to one named list in a jar.

    Returned by ``PickleJar.lcreate``, ``ladd`` and ``lextend`` so that
    appends can be chained::

        jar.lcreate("fruit").ladd("apple").lextend(["pear", "plum"])

    Holds only the jar and the list name; it must not be used after the
    jar is gone.
    """

    __slots__ = ("_jar", "_name")

    def __init__(self, jar: PickleJar, name: str) -> None:
        self._jar = jar
        self._name = name

    @property
    def jar(self) -> PickleJar:
        return self._jar

    @property
    def name(self) -> str:
        return self._name

    def ladd(self, value: Any) -> ListExtender:
        """Append one value to the list."""
        return self._jar.ladd(self._name, value)

    def lextend(self, values: Iterable[Any]) -> ListExtender:
        """Append several values to the list."""
        return self._jar.lextend(self._name, values)

    def __repr__(self) -> str:
        return f"ListExtender({self._name!r})"
