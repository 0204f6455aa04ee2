"""Screencast core - frame log layout, errors and write side."""
from .errors import (
    ArgumentError,
    ExternalProcessError,
    InternalInvariantError,
    LogicError,
    ProtocolError,
    ScreencastError,
    StorageError,
)
from .framelog import FrameLogWriter, pack_record, unpack_header

__all__ = [
    "ArgumentError",
    "ExternalProcessError",
    "InternalInvariantError",
    "LogicError",
    "ProtocolError",
    "ScreencastError",
    "StorageError",
    "FrameLogWriter",
    "pack_record",
    "unpack_header",
]
