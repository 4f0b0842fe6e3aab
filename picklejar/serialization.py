"""Codecs: encode/decode for single values and whole snapshots."""

from __future__ import annotations

import dataclasses
import enum
import json
import types
from abc import ABC, abstractmethod
from typing import Any, Union, get_args, get_origin

from .errors import SerializationError

Scalars = dict[str, bytes]
Lists = dict[str, list[bytes]]

_MISMATCH = object()


class SerializationMethod(enum.Enum):
    """Serialization methods a jar can be built with."""

    JSON = 0

    @classmethod
    def from_value(cls, value: SerializationMethod | str | int) -> SerializationMethod:
        """Resolve a member, a member name, or an integer tag.

        Unknown integer tags fall back to ``JSON``; unknown names raise
        ``ValueError``.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Unknown serialization method: {value!r}")
        if isinstance(value, int):
            for member in cls:
                if member.value == value:
                    return member
            return cls.JSON
        if isinstance(value, str):
            try:
                return cls[value.upper()]
            except KeyError:
                raise ValueError(f"Unknown serialization method: {value!r}") from None
        raise ValueError(f"Unknown serialization method: {value!r}")

    def __str__(self) -> str:
        return self.name


class Codec(ABC):
    """Converts values and snapshots to and from bytes.

    Value decoding is permissive: any mismatch comes back as ``None``.
    Snapshot decoding is strict and raises ``SerializationError``.
    """

    method: SerializationMethod

    @abstractmethod
    def encode_value(self, value: Any) -> bytes:
        """Encode one value, raising ``SerializationError`` if unrepresentable."""

    @abstractmethod
    def decode_value(self, raw: bytes, as_type: type | None = None) -> Any | None:
        """Decode one value as ``as_type``, or None on any mismatch."""

    @abstractmethod
    def encode_snapshot(self, scalars: Scalars, lists: Lists) -> bytes:
        """Encode the whole dataset as one buffer."""

    @abstractmethod
    def decode_snapshot(self, raw: bytes) -> tuple[Scalars, Lists]:
        """Decode a buffer produced by ``encode_snapshot``."""


def _json_default(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _coerce(value: Any, as_type: type | None) -> Any:
    """Shape a decoded JSON value into ``as_type`` or return ``_MISMATCH``."""
    if as_type is None or as_type is Any:
        return value
    origin = get_origin(as_type)
    if origin is Union or origin is types.UnionType:
        for member in get_args(as_type):
            if member is type(None):
                if value is None:
                    return None
                continue
            result = _coerce(value, member)
            if result is not _MISMATCH:
                return result
        return _MISMATCH
    # Parametrized generics (list[int]) are checked by their origin only.
    as_type = origin or as_type
    if not isinstance(as_type, type):
        return _MISMATCH
    if as_type is bool:
        return value if isinstance(value, bool) else _MISMATCH
    if as_type is int:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        return _MISMATCH
    if as_type is float:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        return _MISMATCH
    if as_type is tuple:
        return tuple(value) if isinstance(value, list) else _MISMATCH
    if as_type in (set, frozenset):
        if not isinstance(value, list):
            return _MISMATCH
        try:
            return as_type(value)
        except TypeError:
            return _MISMATCH
    if dataclasses.is_dataclass(as_type):
        if not isinstance(value, dict):
            return _MISMATCH
        try:
            return as_type(**value)
        except (TypeError, ValueError):
            return _MISMATCH
    return value if isinstance(value, as_type) else _MISMATCH


class JsonCodec(Codec):
    """UTF-8 JSON codec.

    Each stored value is a JSON document. A snapshot is a two-element JSON
    array: an object of scalar texts and an object of lists of texts, so
    every stored buffer has to be valid UTF-8.
    """

    method = SerializationMethod.JSON

    def encode_value(self, value: Any) -> bytes:
        try:
            text = json.dumps(value, default=_json_default)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Cannot encode {type(value).__name__}: {e}") from e
        return text.encode("utf-8")

    def decode_value(self, raw: bytes, as_type: type | None = None) -> Any | None:
        try:
            value = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            return None
        result = _coerce(value, as_type)
        return None if result is _MISMATCH else result

    def encode_snapshot(self, scalars: Scalars, lists: Lists) -> bytes:
        try:
            text_scalars = {k: v.decode("utf-8") for k, v in scalars.items()}
            text_lists = {
                k: [item.decode("utf-8") for item in items] for k, items in lists.items()
            }
        except UnicodeDecodeError as e:
            raise SerializationError(f"Stored value is not valid UTF-8: {e}") from e
        return json.dumps([text_scalars, text_lists]).encode("utf-8")

    def decode_snapshot(self, raw: bytes) -> tuple[Scalars, Lists]:
        try:
            doc = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            raise SerializationError(f"Malformed snapshot: {e}") from e

        if not (isinstance(doc, list) and len(doc) == 2):
            raise SerializationError("Malformed snapshot: expected a two-element array")
        text_scalars, text_lists = doc
        if not isinstance(text_scalars, dict) or not isinstance(text_lists, dict):
            raise SerializationError("Malformed snapshot: expected two objects")

        scalars: Scalars = {}
        for key, text in text_scalars.items():
            if not isinstance(text, str):
                raise SerializationError(f"Malformed snapshot: value for {key!r} is not text")
            scalars[key] = text.encode("utf-8")

        lists: Lists = {}
        for key, items in text_lists.items():
            if not isinstance(items, list) or not all(isinstance(i, str) for i in items):
                raise SerializationError(f"Malformed snapshot: list {key!r} is not a list of text")
            lists[key] = [item.encode("utf-8") for item in items]

        if scalars.keys() & lists.keys():
            dupes = ", ".join(sorted(scalars.keys() & lists.keys()))
            raise SerializationError(f"Malformed snapshot: keys in both mappings: {dupes}")
        return scalars, lists


_CODECS: dict[SerializationMethod, type[Codec]] = {
    SerializationMethod.JSON: JsonCodec,
}


def codec_for(method: SerializationMethod | str | int) -> Codec:
    """Build the codec for a serialization method."""
    return _CODECS[SerializationMethod.from_value(method)]()
