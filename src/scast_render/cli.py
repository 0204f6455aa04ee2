"""Screencast Render - frame log to index, concat script or video."""
from __future__ import annotations

import functools
import json
from pathlib import Path

import click

from scast_core.errors import ArgumentError, ScreencastError
from scast_core.protocol import DEFAULT_LAST_FRAME_DURATION
from scast_render.assemble import assemble_video
from scast_render.concat import generate_concat_script
from scast_render.evidence import export_frame_index
from scast_render.indexer import read_payload, scan

CANONICAL_JSON_KW = {"sort_keys": True, "separators": (",", ":"), "ensure_ascii": False}

LOG_ARG = click.Path(exists=True, dir_okay=False, path_type=Path)


def fail_closed(fn):
    """Print a single-line reason and exit 1 instead of a stack trace."""
    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except (ScreencastError, OSError) as e:
            click.echo(f"FATAL: {e}", err=True)
            raise SystemExit(1)
    return wrapper


def parse_overrides(pairs: tuple[str, ...], drops: tuple[str, ...]) -> dict[str, str | None]:
    out: dict[str, str | None] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ArgumentError(f"--arg expects KEY=VALUE, got {pair!r}")
        out[key] = value
    for key in drops:
        out[key] = None
    return out


@click.group()
def main():
    pass


@main.command("index")
@click.argument("log", type=LOG_ARG)
@click.option("--lenient", is_flag=True, help="Drop a torn trailing record instead of failing")
@fail_closed
def index_cmd(log: Path, lenient: bool):
    """Print the frame index as JSON lines."""
    for entry in scan(log, strict=not lenient):
        click.echo(json.dumps(entry._asdict(), **CANONICAL_JSON_KW))


@main.command("script")
@click.argument("log", type=LOG_ARG)
@click.option("--last-frame-duration", type=float, default=DEFAULT_LAST_FRAME_DURATION, show_default=True)
@fail_closed
def script_cmd(log: Path, last_frame_duration: float):
    """Print the concat demuxer script for a frame log."""
    script = generate_concat_script(scan(log), log.resolve(), last_frame_duration)
    click.echo(script.render(), nl=False)


@main.command("assemble")
@click.argument("log", type=LOG_ARG)
@click.argument("out", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--last-frame-duration", type=float, default=DEFAULT_LAST_FRAME_DURATION, show_default=True)
@click.option("--ffmpeg", "ffmpeg_binary", default=None, help="ffmpeg executable")
@click.option("--arg", "arg_pairs", multiple=True, metavar="KEY=VALUE", help="Set an encoder argument, e.g. -qp=20")
@click.option("--drop", "drops", multiple=True, metavar="KEY", help="Remove an encoder argument, e.g. -fps_mode")
@fail_closed
def assemble_cmd(log: Path, out: Path, last_frame_duration: float, ffmpeg_binary: str | None,
                 arg_pairs: tuple[str, ...], drops: tuple[str, ...]):
    """Encode a frame log into a video with ffmpeg."""
    overrides = parse_overrides(arg_pairs, drops)
    assemble_video(log.resolve(), out, overrides, last_frame_duration, ffmpeg_binary=ffmpeg_binary)
    click.echo(f"PASS: Video written to {out}")


@main.command("export-index")
@click.argument("log", type=LOG_ARG)
@click.argument("out", type=click.Path(file_okay=False, path_type=Path))
@click.option("--lenient", is_flag=True, help="Drop a torn trailing record instead of failing")
@fail_closed
def export_index_cmd(log: Path, out: Path, lenient: bool):
    """Write frames.parquet describing every frame in the log."""
    target = export_frame_index(log, out, strict=not lenient)
    if target is None:
        click.echo("Frame log is empty, nothing exported.")
    else:
        click.echo(f"PASS: Index written to {target}")


@main.command("extract")
@click.argument("log", type=LOG_ARG)
@click.argument("out", type=click.Path(file_okay=False, path_type=Path))
@click.option("--ext", default="jpeg", show_default=True, help="File extension for the payloads")
@click.option("--lenient", is_flag=True, help="Drop a torn trailing record instead of failing")
@fail_closed
def extract_cmd(log: Path, out: Path, ext: str, lenient: bool):
    """Write every frame payload to its own file."""
    out.mkdir(parents=True, exist_ok=True)
    entries = scan(log, strict=not lenient)
    with open(log, "rb") as f:
        for frame_no, entry in enumerate(entries):
            (out / f"frame-{frame_no:06d}.{ext}").write_bytes(read_payload(f, entry))
    click.echo(f"Frames: {len(entries)}")


if __name__ == "__main__":
    main()
