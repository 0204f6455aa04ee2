"""Record a synthetic screencast into a frame log through a real Recorder.

Usage:
    python tools/sim_screencast.py OUT_LOG [--frames N] [--fps F] [--truncate]
"""
from pathlib import Path

from scast_record.recorder import Recorder
from scast_record.sim import SimulatedSession, synthetic_frames


def generate_log(out_path, frames=30, fps=10.0, truncate=False):
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    session = SimulatedSession()
    with Recorder(session, out_path) as recorder:
        recorder.start_recording(format="jpeg", quality=80, every_nth_frame=1)
        print(f"Recording: session={recorder.session_id} stream={recorder.stream_id}")
        session.play(synthetic_frames(frames, fps=fps))
        recorder.stop_recording()
        stats = recorder.get_stats()

    if truncate:
        # Simulate a write cut short mid-frame.
        b = out_path.read_bytes()
        out_path.write_bytes(b[:-5])

    print(f"GENERATED: {out_path} ({stats['frames']} frames, {stats['bytes']} bytes, truncate={truncate})")
    return out_path


if __name__ == "__main__":
    import sys

    args = [a for a in sys.argv[1:] if a]

    def pop_flag(arg_list: list[str], flag: str) -> tuple[bool, list[str]]:
        """Remove a boolean flag from an argv-style list."""
        if flag in arg_list:
            return True, [a for a in arg_list if a != flag]
        return False, arg_list

    def pop_value(arg_list: list[str], flag: str, default):
        if flag not in arg_list:
            return default, arg_list
        i = arg_list.index(flag)
        if i + 1 >= len(arg_list):
            raise SystemExit(f"{flag} requires a value")
        return arg_list[i + 1], arg_list[:i] + arg_list[i + 2:]

    truncate, args = pop_flag(args, "--truncate")
    frames, args = pop_value(args, "--frames", "30")
    fps, args = pop_value(args, "--fps", "10")

    out = args[0] if len(args) > 0 else "screencast.framelog"
    generate_log(out, frames=int(frames), fps=float(fps), truncate=truncate)
