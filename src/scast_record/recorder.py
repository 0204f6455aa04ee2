"""Screencast Recorder - browser frames to an append-only frame log.

The browser sends the next frame only after the previous one is acknowledged,
so the frame handler acks first and writes second. Any work done before the
ack shows up as stutter in the final video.
"""
from __future__ import annotations

import base64
import binascii
import enum
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, Protocol

from scast_core.errors import ArgumentError, LogicError, ProtocolError
from scast_core.framelog import FrameLogWriter
from scast_core.protocol import (
    DEFAULT_LAST_FRAME_DURATION,
    DEFAULT_OUTPUT_PATH,
    EVENT_SCREENCAST_FRAME,
    METHOD_FRAME_ACK,
    METHOD_START_SCREENCAST,
    METHOD_STOP_SCREENCAST,
    START_PARAM_NAMES,
)
from scast_render.assemble import assemble_video
from scast_render.indexer import FrameIndexEntry, scan


class ScreencastSession(Protocol):
    """Transport to the browser page being recorded."""

    def on(self, event: str, callback: Callable[[dict], None]) -> None: ...

    def off(self, event: str, callback: Callable[[dict], None]) -> None: ...

    def send(self, method: str, params: dict) -> None:
        """Fire-and-forget."""

    def send_sync(self, method: str, params: dict) -> Mapping[str, Any]:
        """Send and block until the response arrives."""


class RecordingState(enum.Enum):
    IDLE = "idle"
    RECORDING = "recording"


class Recorder:
    def __init__(self, session: ScreencastSession, log_path: Path | str | None = None, keep_log: bool | None = None):
        self.session = session
        self.state = RecordingState.IDLE
        self.session_id: Any = None
        self.stream_id: Any = None
        self._log = FrameLogWriter(log_path, keep=keep_log)

    @property
    def is_recording(self) -> bool:
        return self.state is RecordingState.RECORDING

    @property
    def log_path(self) -> Path:
        return self._log.path

    def get_recording_log_path(self) -> Path:
        return self._log.path

    def get_stats(self) -> dict:
        return {
            "state": self.state.value,
            "frames": self._log.frames_written,
            "bytes": self._log.bytes_written,
        }

    def start_recording(
        self,
        format: str | None = None,
        quality: int | None = None,
        max_width: int | None = None,
        max_height: int | None = None,
        every_nth_frame: int | None = None,
    ) -> None:
        if self.is_recording:
            raise LogicError("Recording already started!")
        if self._log.closed:
            raise LogicError("recorder is closed")

        self.session.on(EVENT_SCREENCAST_FRAME, self._on_screencast_frame)

        given = {
            "format": format,
            "quality": quality,
            "max_width": max_width,
            "max_height": max_height,
            "every_nth_frame": every_nth_frame,
        }
        params = {START_PARAM_NAMES[k]: v for k, v in given.items() if v is not None}

        try:
            data = self.session.send_sync(METHOD_START_SCREENCAST, params)
            if "sessionId" not in data:
                raise ProtocolError(f"{METHOD_START_SCREENCAST} response has no sessionId: {dict(data)!r}")
            # sessionId and streamId are distinct tokens issued by the browser.
            session_id = data["sessionId"]
            stream_id = data.get("streamId", data.get("id"))
        except Exception:
            self.session.off(EVENT_SCREENCAST_FRAME, self._on_screencast_frame)
            raise
        self.session_id = session_id
        self.stream_id = stream_id
        self.state = RecordingState.RECORDING

    def _on_screencast_frame(self, params: Mapping[str, Any]) -> None:
        # Ack before anything else: the next frame waits on it.
        self.session.send(METHOD_FRAME_ACK, {"sessionId": params["sessionId"]})

        try:
            payload = base64.b64decode(params["data"], validate=True)
        except (binascii.Error, TypeError) as e:
            raise ArgumentError(f"screencast frame data is not base64: {e}") from e
        self._log.append(float(params["metadata"]["timestamp"]), payload)

    def stop_recording(self) -> None:
        if not self.is_recording:
            raise LogicError("Recording not started!")

        self.session.send_sync(METHOD_STOP_SCREENCAST, {"sessionId": self.session_id})
        self.session.off(EVENT_SCREENCAST_FRAME, self._on_screencast_frame)
        self._log.sync()
        self.state = RecordingState.IDLE

    def get_frames(self, strict: bool = True) -> list[FrameIndexEntry]:
        if self.is_recording:
            raise LogicError("cannot index the frame log while recording")
        if self._log.closed:
            raise LogicError("recorder is closed")
        self._log.sync()
        return scan(self._log.path, strict=strict)

    def generate_video(
        self,
        output_path: Path | str = DEFAULT_OUTPUT_PATH,
        custom_args: Mapping[str, str | None] | None = None,
        last_frame_duration: float | None = DEFAULT_LAST_FRAME_DURATION,
    ) -> list[str]:
        if self.is_recording:
            raise LogicError("stop recording before generating a video")
        if self._log.closed:
            raise LogicError("recorder is closed")
        self._log.sync()
        return assemble_video(self._log.path, output_path, custom_args, last_frame_duration)

    def close(self) -> None:
        """Stop if needed, then release the log (a temp log is deleted)."""
        try:
            if self.is_recording:
                self.stop_recording()
        finally:
            self._log.close()

    def __enter__(self) -> "Recorder":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
