import subprocess
from pathlib import Path

import pytest

from scast_core.errors import ExternalProcessError
from scast_core.framelog import FrameLogWriter
from scast_render import assemble as assemble_mod
from scast_render.assemble import assemble_video


class FakeRun:
    def __init__(self, returncode=0, exc=None):
        self.returncode = returncode
        self.exc = exc
        self.calls = []
        self.scripts = []

    def __call__(self, argv, check=False, **kw):
        self.calls.append(list(argv))
        script = Path(argv[argv.index("-i") + 1])
        self.scripts.append(script.read_text(encoding="utf-8") if script.exists() else None)
        if self.exc is not None:
            raise self.exc
        return subprocess.CompletedProcess(argv, self.returncode)


@pytest.fixture
def log(tmp_path):
    path = tmp_path / "rec.framelog"
    with FrameLogWriter(path) as w:
        w.append(10.0, b"a")
        w.append(10.2, b"bb")
        w.append(10.35, b"ccc")
    return path


def test_assemble_runs_ffmpeg_with_script(monkeypatch, log, tmp_path):
    fake = FakeRun()
    monkeypatch.setattr(assemble_mod.subprocess, "run", fake)

    out = tmp_path / "video.mp4"
    argv = assemble_video(log, out, last_frame_duration=0.5)

    assert fake.calls == [argv]
    assert argv[0] == "ffmpeg"
    assert argv[-1] == str(out)
    lines = fake.scripts[0].splitlines()
    assert lines[0] == f"file 'subfile,,start,12,end,13,,:{log}'"
    assert lines[-1] == "duration 0.50000"
    # temp script is gone after the call
    assert not Path(argv[argv.index("-i") + 1]).exists()


def test_assemble_custom_args(monkeypatch, log, tmp_path):
    fake = FakeRun()
    monkeypatch.setattr(assemble_mod.subprocess, "run", fake)

    argv = assemble_video(log, tmp_path / "v.mp4", {"-qp": "20", "-fps_mode": None})
    assert argv[argv.index("-qp") + 1] == "20"
    assert "-fps_mode" not in argv


def test_none_last_frame_duration_uses_default(monkeypatch, log, tmp_path):
    fake = FakeRun()
    monkeypatch.setattr(assemble_mod.subprocess, "run", fake)

    assemble_video(log, tmp_path / "v.mp4", last_frame_duration=None)
    assert fake.scripts[0].splitlines()[-1] == "duration 0.10000"


def test_nonzero_exit(monkeypatch, log, tmp_path):
    fake = FakeRun(returncode=3)
    monkeypatch.setattr(assemble_mod.subprocess, "run", fake)

    with pytest.raises(ExternalProcessError) as ei:
        assemble_video(log, tmp_path / "v.mp4")
    assert ei.value.returncode == 3
    assert ei.value.to_dict()["code"] == "E_EXTERNAL_PROCESS"
    assert not Path(fake.calls[0][fake.calls[0].index("-i") + 1]).exists()


def test_missing_binary(monkeypatch, log, tmp_path):
    fake = FakeRun(exc=FileNotFoundError(2, "No such file or directory"))
    monkeypatch.setattr(assemble_mod.subprocess, "run", fake)

    with pytest.raises(ExternalProcessError) as ei:
        assemble_video(log, tmp_path / "v.mp4", ffmpeg_binary="no-such-ffmpeg")
    assert ei.value.returncode is None
    assert fake.calls[0][0] == "no-such-ffmpeg"


def test_empty_log_still_invokes_encoder(monkeypatch, tmp_path):
    path = tmp_path / "empty.framelog"
    FrameLogWriter(path).close()
    fake = FakeRun()
    monkeypatch.setattr(assemble_mod.subprocess, "run", fake)

    assemble_video(path, tmp_path / "v.mp4")
    assert fake.scripts == [""]
