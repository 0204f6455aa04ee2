"""Ordered ffmpeg argument slots with explicit set/remove overrides."""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from scast_core.errors import ArgumentError
from scast_core.protocol import DEFAULT_FFMPEG_SLOTS, OUTPUT_SLOT


@dataclass
class ArgSlot:
    key: str
    flag: str | None
    value: str | None
    enabled: bool = True

    def tokens(self) -> list[str]:
        if not self.enabled:
            return []
        out = [self.flag] if self.flag is not None else []
        if self.value is not None:
            out.append(self.value)
        return out


class FfmpegArgs:
    """An ordered encoder command line addressed by slot key.

    Keys starting with "-" are flags (the key is also the flag text); other
    keys are positional. A removed slot stays in place, disabled, so setting it
    again restores its original position.
    """

    def __init__(self, slots=DEFAULT_FFMPEG_SLOTS):
        self.slots: list[ArgSlot] = [ArgSlot(k, f, v) for k, f, v in slots]

    def _find(self, key: str) -> ArgSlot | None:
        for slot in self.slots:
            if slot.key == key:
                return slot
        return None

    def __contains__(self, key: str) -> bool:
        slot = self._find(key)
        return slot is not None and slot.enabled

    def get(self, key: str) -> str | None:
        slot = self._find(key)
        if slot is None or not slot.enabled:
            return None
        return slot.value

    def set(self, key: str, value: str) -> None:
        """Replace a slot's value. An empty string leaves a bare flag, or
        removes a positional slot.

        Unknown keys are inserted before the output slot so they apply to it.
        """
        if not key:
            raise ArgumentError("empty argument key")
        value = str(value)
        flag_value = value if value != "" else None

        slot = self._find(key)
        positional = (slot.flag is None) if slot is not None else not key.startswith("-")
        if positional and value == "":
            self.remove(key)
            return

        if slot is not None:
            slot.value = flag_value if slot.flag is not None else value
            slot.enabled = True
            return

        flag = key if key.startswith("-") else None
        new = ArgSlot(key, flag, flag_value if flag is not None else value)
        out = self._find(OUTPUT_SLOT)
        if out is None:
            self.slots.append(new)
        else:
            self.slots.insert(self.slots.index(out), new)

    def remove(self, key: str) -> None:
        slot = self._find(key)
        if slot is not None:
            slot.enabled = False

    def apply(self, overrides: Mapping[str, str | None] | None) -> "FfmpegArgs":
        """None removes the argument entirely; any other value replaces it."""
        for key, value in (overrides or {}).items():
            if value is None:
                self.remove(key)
            else:
                self.set(key, value)
        return self

    def argv(self) -> list[str]:
        out: list[str] = []
        for slot in self.slots:
            out.extend(slot.tokens())
        return out
