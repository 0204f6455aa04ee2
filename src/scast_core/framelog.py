"""Append-only frame log: write side and record packing."""
from __future__ import annotations

import os
import struct
import tempfile
from pathlib import Path

from scast_core.errors import ArgumentError, LogicError, StorageError
from scast_core.protocol import MAX_PAYLOAD_LEN, REC_HEADER_FMT, REC_HEADER_LEN


def pack_record(timestamp: float, payload: bytes) -> bytes:
    """Header + payload, ready to append in a single write."""
    if len(payload) > MAX_PAYLOAD_LEN:
        raise ArgumentError(f"payload of {len(payload)} bytes does not fit a uint32 length field")
    return struct.pack(REC_HEADER_FMT, float(timestamp), len(payload)) + payload


def unpack_header(header: bytes) -> tuple[float, int]:
    if len(header) != REC_HEADER_LEN:
        raise ArgumentError(f"header must be {REC_HEADER_LEN} bytes, got {len(header)}")
    timestamp, length = struct.unpack(REC_HEADER_FMT, header)
    return timestamp, int(length)


class FrameLogWriter:
    """Exclusive write end of a frame log.

    With no path a private temp file is created and removed again on close(),
    unless ``keep`` is set. An explicit path is truncated and kept.
    """

    def __init__(self, path: Path | str | None = None, keep: bool | None = None):
        self._owns_file = path is None
        self.keep = (not self._owns_file) if keep is None else keep
        try:
            if path is None:
                fd, name = tempfile.mkstemp(prefix="screencast-", suffix=".framelog")
                os.close(fd)
                path = name
            self.path = Path(path)
            # Unbuffered so every append is one write() and short writes are visible.
            self._f = open(self.path, "wb", buffering=0)
        except OSError as e:
            raise StorageError(f"cannot create frame log: {e}") from e

        self.frames_written = 0
        self.bytes_written = 0

    @property
    def closed(self) -> bool:
        return self._f.closed

    def append(self, timestamp: float, payload: bytes) -> int:
        """Append one record. Returns the payload offset."""
        if self._f.closed:
            raise LogicError("frame log is closed")

        blob = pack_record(timestamp, payload)
        try:
            written = self._f.write(blob)
        except OSError as e:
            raise StorageError(f"write failed after {self.bytes_written} bytes: {e}") from e
        if written != len(blob):
            raise StorageError(f"could only write {written} of {len(blob)} bytes to disk")

        offset = self.bytes_written + REC_HEADER_LEN
        self.frames_written += 1
        self.bytes_written += written
        return offset

    def sync(self) -> None:
        """Durability: commit everything appended so far."""
        if self._f.closed:
            return
        self._f.flush()
        os.fdatasync(self._f.fileno()) if hasattr(os, "fdatasync") else os.fsync(self._f.fileno())

    def close(self) -> None:
        if not self._f.closed:
            self._f.close()
        if not self.keep:
            self.path.unlink(missing_ok=True)

    def __enter__(self) -> "FrameLogWriter":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
