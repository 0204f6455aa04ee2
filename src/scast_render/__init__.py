"""Screencast Render - frame log index, concat script and ffmpeg assembly."""
from .indexer import FrameIndexEntry, read_payload, scan
from .concat import ConcatItem, ConcatScript, generate_concat_script
from .ffmpeg_args import ArgSlot, FfmpegArgs
from .assemble import assemble_video, build_ffmpeg_argv

__all__ = [
    "FrameIndexEntry",
    "read_payload",
    "scan",
    "ConcatItem",
    "ConcatScript",
    "generate_concat_script",
    "ArgSlot",
    "FfmpegArgs",
    "assemble_video",
    "build_ffmpeg_argv",
]
