"""picklejar: embedded key-value store persisted to a single file."""

from .clock import Clock, SystemClock
from .dump import DumpMode, DumpPolicy, find_temp_files, purge_temp_files
from .errors import PickleJarError, SerializationError, StoreIOError
from .extenders import ListExtender
from .jar import PickleJar
from .serialization import Codec, JsonCodec, SerializationMethod, codec_for
from .store import store

__all__ = [
    "Clock",
    "Codec",
    "DumpMode",
    "DumpPolicy",
    "JsonCodec",
    "ListExtender",
    "PickleJar",
    "PickleJarError",
    "SerializationError",
    "SerializationMethod",
    "StoreIOError",
    "SystemClock",
    "codec_for",
    "find_temp_files",
    "purge_temp_files",
    "store",
]
