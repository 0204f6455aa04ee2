from __future__ import annotations

import os
from pathlib import Path
from typing import BinaryIO, NamedTuple, Union
from warnings import warn

from scast_core.errors import InternalInvariantError
from scast_core.framelog import unpack_header
from scast_core.protocol import REC_HEADER_LEN

LogSource = Union[str, Path, BinaryIO]


class FrameIndexEntry(NamedTuple):
    """One frame of a frame log; offset addresses the payload, not the header."""
    timestamp: float
    offset: int
    length: int

    @property
    def end(self) -> int:
        return self.offset + self.length


def _torn(msg: str, strict: bool) -> None:
    if strict:
        raise InternalInvariantError(msg)
    warn(f"{msg}. Dropping trailing partial record.")


def _scan_file(f: BinaryIO, strict: bool) -> list[FrameIndexEntry]:
    entries: list[FrameIndexEntry] = []
    size = f.seek(0, os.SEEK_END)
    f.seek(0)

    while True:
        start_off = f.tell()
        header = f.read(REC_HEADER_LEN)

        # Clean EOF
        if len(header) == 0:
            break

        # Truncated header
        if len(header) < REC_HEADER_LEN:
            _torn(f"Truncated frame header at offset {start_off} ({len(header)} of {REC_HEADER_LEN} bytes)", strict)
            break

        timestamp, length = unpack_header(header)
        payload_off = start_off + REC_HEADER_LEN

        # Torn payload: the header promises more bytes than the file holds
        if payload_off + length > size:
            _torn(
                f"Torn frame payload at offset {payload_off}: header says {length} bytes, "
                f"{size - payload_off} present",
                strict,
            )
            break

        entries.append(FrameIndexEntry(timestamp, payload_off, length))
        f.seek(length, os.SEEK_CUR)

    return entries


def scan(log: LogSource, strict: bool = True) -> list[FrameIndexEntry]:
    """Index a frame log in one forward pass without reading payloads.

    ``log`` is a path or a binary file object opened for reading. A torn
    trailing record raises InternalInvariantError unless ``strict`` is False,
    in which case it is dropped with a warning.
    """
    if isinstance(log, (str, Path)):
        with open(log, "rb") as f:
            return _scan_file(f, strict)
    return _scan_file(log, strict)


def read_payload(log: LogSource, entry: FrameIndexEntry) -> bytes:
    if isinstance(log, (str, Path)):
        with open(log, "rb") as f:
            return read_payload(f, entry)

    log.seek(entry.offset)
    data = log.read(entry.length)
    if len(data) != entry.length:
        raise InternalInvariantError(
            f"short read at offset {entry.offset}: wanted {entry.length}, got {len(data)}"
        )
    return data
