"""Concat demuxer script generation.

Each frame becomes a byte-range view into the frame log plus the time it stays
on screen, which is the gap to the next frame's timestamp.
"""
from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence, Set
from dataclasses import dataclass, field
from pathlib import Path

from scast_core.errors import ArgumentError
from scast_core.protocol import (
    DEFAULT_LAST_FRAME_DURATION,
    DURATION_DECIMALS,
    SUBFILE_URL_FMT,
)
from scast_render.indexer import FrameIndexEntry


def quote_concat_path(text: str) -> str:
    """Single-quote for the concat demuxer; embedded quotes become '\\''."""
    return "'" + text.replace("'", "'\\''") + "'"


def subfile_url(log_path: Path | str, start: int, end: int) -> str:
    return SUBFILE_URL_FMT.format(start=start, end=end, path=log_path)


@dataclass(frozen=True)
class ConcatItem:
    start: int
    end: int
    duration: float


@dataclass
class ConcatScript:
    log_path: Path
    items: list[ConcatItem] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[ConcatItem]:
        return iter(self.items)

    @property
    def durations(self) -> list[float]:
        return [it.duration for it in self.items]

    def lines(self) -> Iterator[str]:
        for it in self.items:
            yield "file " + quote_concat_path(subfile_url(self.log_path, it.start, it.end))
            yield f"duration {it.duration:.{DURATION_DECIMALS}f}"

    def render(self) -> str:
        return "".join(line + "\n" for line in self.lines())


def _check_entries(entries) -> None:
    # Must be an ordered, gap-free list: mappings, sets and one-shot iterators are not.
    if isinstance(entries, (Mapping, Set, str, bytes)) or not isinstance(entries, Sequence):
        raise ArgumentError(f"frames is not a list of frames ({type(entries).__name__})")
    for i, e in enumerate(entries):
        if not isinstance(e, FrameIndexEntry):
            raise ArgumentError(f"frames[{i}] is not a frame index entry ({type(e).__name__})")


def generate_concat_script(
    entries: Sequence[FrameIndexEntry],
    log_path: Path | str,
    last_frame_duration: float = DEFAULT_LAST_FRAME_DURATION,
) -> ConcatScript:
    """Build the script for ``entries`` addressing ``log_path``.

    Durations are not validated; zero or negative gaps reach the encoder as is.
    """
    _check_entries(entries)

    script = ConcatScript(Path(log_path))
    count = len(entries)
    for i, frame in enumerate(entries):
        if i + 1 < count:
            duration = entries[i + 1].timestamp - frame.timestamp
        else:
            duration = float(last_frame_duration)
        script.items.append(ConcatItem(frame.offset, frame.end, duration))
    return script
