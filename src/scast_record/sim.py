"""In-process stand-in for a browser screencast session.

Behaves like the real source where it matters to the recorder: a frame is
only emitted once the previous one was acknowledged, and the start/stop
commands answer synchronously with generated ids.
"""
from __future__ import annotations

import base64
import itertools
import os
import uuid
from collections.abc import Callable, Iterable
from typing import Any

from scast_core.protocol import (
    EVENT_SCREENCAST_FRAME,
    METHOD_FRAME_ACK,
    METHOD_START_SCREENCAST,
    METHOD_STOP_SCREENCAST,
)

_ids = itertools.count(1)


class SimulatedSession:
    def __init__(self):
        self.handlers: dict[str, list[Callable[[dict], Any]]] = {}
        self.sent: list[tuple[str, dict]] = []
        self.start_params: dict | None = None
        self.session_id: int | None = None
        self.stream_id: str | None = None
        self.pending_ack = False
        # "ack" / "handled" markers in the order they happened
        self.trace: list[str] = []

    def on(self, event: str, callback: Callable[[dict], Any]) -> None:
        self.handlers.setdefault(event, []).append(callback)

    def off(self, event: str, callback: Callable[[dict], Any]) -> None:
        cbs = self.handlers.get(event, [])
        if callback in cbs:
            cbs.remove(callback)

    def send(self, method: str, params: dict) -> None:
        self.sent.append((method, dict(params)))
        if method == METHOD_FRAME_ACK:
            self.trace.append("ack")
            self.pending_ack = False

    def send_sync(self, method: str, params: dict) -> dict:
        self.sent.append((method, dict(params)))
        if method == METHOD_START_SCREENCAST:
            self.start_params = dict(params)
            self.session_id = next(_ids)
            self.stream_id = uuid.uuid4().hex
            return {"sessionId": self.session_id, "streamId": self.stream_id}
        if method == METHOD_STOP_SCREENCAST:
            self.session_id = None
            return {}
        raise ValueError(f"unsupported method {method}")

    @property
    def acks(self) -> list[dict]:
        return [p for m, p in self.sent if m == METHOD_FRAME_ACK]

    def emit_frame(self, payload: bytes, timestamp: float, extra_metadata: dict | None = None) -> None:
        """Deliver one frame to the subscribed handlers."""
        if self.session_id is None:
            raise RuntimeError("screencast not started")
        if self.pending_ack:
            raise RuntimeError("previous frame was never acknowledged")

        metadata = {"timestamp": timestamp}
        metadata.update(extra_metadata or {})
        params = {
            "data": base64.b64encode(payload).decode("ascii"),
            "metadata": metadata,
            "sessionId": self.session_id,
        }
        self.pending_ack = True
        for cb in list(self.handlers.get(EVENT_SCREENCAST_FRAME, [])):
            cb(params)
            self.trace.append("handled")

    def play(self, frames: Iterable[tuple[float, bytes]]) -> int:
        n = 0
        for timestamp, payload in frames:
            self.emit_frame(payload, timestamp)
            n += 1
        return n


def synthetic_frames(count: int, fps: float = 10.0, start: float = 0.0, size: int = 2048) -> list[tuple[float, bytes]]:
    """Random payloads with slightly irregular spacing, like a real screencast."""
    frames = []
    t = start
    for i in range(count):
        frames.append((round(t, 6), os.urandom(size + (i % 7) * 16)))
        t += (1.0 / fps) * (1.5 if i % 5 == 4 else 1.0)
    return frames
