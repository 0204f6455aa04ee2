from __future__ import annotations

import os
import subprocess
import tempfile
from collections.abc import Mapping
from pathlib import Path

from scast_core.errors import ArgumentError, ExternalProcessError
from scast_core.protocol import (
    BINARY_SLOT,
    CONCAT_SCRIPT_PLACEHOLDER,
    DEFAULT_LAST_FRAME_DURATION,
    DEFAULT_OUTPUT_PATH,
    INPUT_SLOT,
    OUTPUT_PLACEHOLDER,
    OUTPUT_SLOT,
)
from scast_render.concat import generate_concat_script
from scast_render.ffmpeg_args import FfmpegArgs
from scast_render.indexer import scan


def build_ffmpeg_argv(
    script_path: Path | str,
    output_path: Path | str,
    custom_args: Mapping[str, str | None] | None = None,
    ffmpeg_binary: str | None = None,
) -> list[str]:
    """Default encoder command line with caller overrides applied.

    The script and output paths only fill slots the caller left at their
    placeholders.
    """
    args = FfmpegArgs()
    if ffmpeg_binary:
        args.set(BINARY_SLOT, ffmpeg_binary)
    args.apply(custom_args)

    if args.get(INPUT_SLOT) == CONCAT_SCRIPT_PLACEHOLDER:
        args.set(INPUT_SLOT, str(script_path))
    if args.get(OUTPUT_SLOT) == OUTPUT_PLACEHOLDER:
        args.set(OUTPUT_SLOT, str(output_path))
    return args.argv()


def assemble_video(
    log_path: Path | str,
    output_path: Path | str = DEFAULT_OUTPUT_PATH,
    custom_args: Mapping[str, str | None] | None = None,
    last_frame_duration: float | None = DEFAULT_LAST_FRAME_DURATION,
    ffmpeg_binary: str | None = None,
) -> list[str]:
    """Encode a frame log into a video with ffmpeg.

    Returns the argv that was run. Raises ExternalProcessError when ffmpeg
    cannot be started or exits non-zero; nothing is retried.
    """
    log_path = Path(log_path)
    if last_frame_duration is None:
        last_frame_duration = DEFAULT_LAST_FRAME_DURATION

    entries = scan(log_path)
    script = generate_concat_script(entries, log_path, last_frame_duration)

    fd, script_path = tempfile.mkstemp(prefix="screencast-", suffix=".ffconcat")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(script.render())

        argv = build_ffmpeg_argv(script_path, output_path, custom_args, ffmpeg_binary)
        if not argv:
            raise ArgumentError("encoder command line is empty")
        try:
            proc = subprocess.run(argv, check=False)
        except OSError as e:
            raise ExternalProcessError(f"cannot run {argv[0]!r}: {e}") from e

        if proc.returncode != 0:
            raise ExternalProcessError(
                f"Failed to create video! ffmpeg exit code: {proc.returncode}",
                returncode=proc.returncode,
            )
    finally:
        Path(script_path).unlink(missing_ok=True)

    return argv
