import json
import os
import shutil
import subprocess
import sys
from pathlib import Path

import pyarrow.parquet as pq
import pytest
from click.testing import CliRunner

from scast_render.cli import main, parse_overrides
from scast_core.errors import ArgumentError

REPO = Path(__file__).resolve().parents[1]


def run(args, cwd=REPO):
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join([str(REPO / "src"), env.get("PYTHONPATH", "")])
    return subprocess.run([sys.executable, *args], cwd=cwd, env=env, check=False, capture_output=True, text=True)


def test_simulated_recording_to_index_and_parquet(tmp_path):
    log = tmp_path / "sim.framelog"
    r = run(["tools/sim_screencast.py", str(log), "--frames", "12"])
    assert r.returncode == 0, r.stderr + r.stdout
    assert "GENERATED" in r.stdout

    r = run(["-m", "scast_render.cli", "index", str(log)])
    assert r.returncode == 0, r.stderr + r.stdout
    rows = [json.loads(line) for line in r.stdout.splitlines()]
    assert len(rows) == 12
    assert rows[0]["offset"] == 12
    assert all(b["timestamp"] >= a["timestamp"] for a, b in zip(rows, rows[1:]))

    out = tmp_path / "export"
    r = run(["-m", "scast_render.cli", "export-index", str(log), str(out)])
    assert r.returncode == 0, r.stderr + r.stdout
    table = pq.read_table(out / "frames.parquet").to_pandas()
    assert list(table["frame_no"]) == list(range(12))
    assert list(table["offset"]) == [row["offset"] for row in rows]
    assert table["duration"].iloc[-1] == pytest.approx(0.1)
    assert table["content_hash"].str.len().eq(64).all()


def test_truncated_log_fails_closed(tmp_path):
    log = tmp_path / "cut.framelog"
    r = run(["tools/sim_screencast.py", str(log), "--frames", "4", "--truncate"])
    assert r.returncode == 0, r.stderr + r.stdout

    r = run(["-m", "scast_render.cli", "index", str(log)])
    assert r.returncode == 1
    assert r.stderr.startswith("FATAL:")

    r = run(["-m", "scast_render.cli", "index", "--lenient", str(log)])
    assert r.returncode == 0, r.stderr + r.stdout
    assert len(r.stdout.splitlines()) == 3


@pytest.fixture
def small_log(tmp_path):
    from scast_core.framelog import FrameLogWriter

    path = tmp_path / "small.framelog"
    with FrameLogWriter(path) as w:
        w.append(10.0, b"a")
        w.append(10.2, b"bb")
        w.append(10.35, b"ccc")
    return path


def test_script_command(small_log):
    result = CliRunner().invoke(main, ["script", str(small_log), "--last-frame-duration", "0.5"])
    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert len(lines) == 6
    assert lines[-1] == "duration 0.50000"
    assert lines[0].endswith(f":{small_log.resolve()}'")


def test_extract_command(small_log, tmp_path):
    out = tmp_path / "frames"
    result = CliRunner().invoke(main, ["extract", str(small_log), str(out), "--ext", "bin"])
    assert result.exit_code == 0, result.output
    assert (out / "frame-000002.bin").read_bytes() == b"ccc"
    assert sorted(p.name for p in out.iterdir()) == ["frame-000000.bin", "frame-000001.bin", "frame-000002.bin"]


def test_export_index_empty_log(tmp_path):
    from scast_core.framelog import FrameLogWriter

    log = tmp_path / "empty.framelog"
    FrameLogWriter(log).close()
    result = CliRunner().invoke(main, ["export-index", str(log), str(tmp_path / "out")])
    assert result.exit_code == 0, result.output
    assert not (tmp_path / "out" / "frames.parquet").exists()


@pytest.mark.skipif(shutil.which("true") is None or shutil.which("false") is None, reason="needs true/false")
def test_assemble_command_exit_status(small_log, tmp_path):
    r = run(["-m", "scast_render.cli", "assemble", str(small_log), str(tmp_path / "v.mp4"),
             "--ffmpeg", shutil.which("true"), "--arg=-qp=20", "--drop=-fps_mode"])
    assert r.returncode == 0, r.stderr + r.stdout
    assert "PASS" in r.stdout

    r = run(["-m", "scast_render.cli", "assemble", str(small_log), str(tmp_path / "v.mp4"),
             "--ffmpeg", shutil.which("false")])
    assert r.returncode == 1
    assert "exit code: 1" in r.stderr


def test_parse_overrides():
    assert parse_overrides(("-qp=20", "-vf=scale=640:-2"), ("-fps_mode",)) == {
        "-qp": "20",
        "-vf": "scale=640:-2",
        "-fps_mode": None,
    }
    with pytest.raises(ArgumentError):
        parse_overrides(("-qp",), ())
