from __future__ import annotations

import hashlib
from pathlib import Path

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from scast_core.protocol import DEFAULT_LAST_FRAME_DURATION
from scast_render.concat import generate_concat_script
from scast_render.indexer import read_payload, scan

FRAMES_SCHEMA = pa.schema(
    [
        ("frame_no", pa.int32()),
        ("timestamp", pa.float64()),
        ("offset", pa.int64()),
        ("length", pa.int32()),
        ("duration", pa.float64()),
        ("content_hash", pa.string()),
    ]
)


def frame_index_records(
    log_path: Path,
    strict: bool = True,
    last_frame_duration: float = DEFAULT_LAST_FRAME_DURATION,
) -> list[dict]:
    """One row per frame: index entry, display duration and payload hash."""
    log_path = Path(log_path)
    entries = scan(log_path, strict=strict)
    script = generate_concat_script(entries, log_path, last_frame_duration)

    rows: list[dict] = []
    with open(log_path, "rb") as f:
        for frame_no, (entry, item) in enumerate(zip(entries, script)):
            rows.append(
                {
                    "frame_no": frame_no,
                    "timestamp": float(entry.timestamp),
                    "offset": int(entry.offset),
                    "length": int(entry.length),
                    "duration": float(item.duration),
                    "content_hash": hashlib.sha256(read_payload(f, entry)).hexdigest(),
                }
            )
    return rows


def export_frame_index(log_path: Path, out_path: Path, strict: bool = True) -> Path | None:
    """Write <out_path>/frames.parquet. Returns None for an empty log."""
    rows = frame_index_records(log_path, strict=strict)

    Path(out_path).mkdir(parents=True, exist_ok=True)

    df = pd.DataFrame(rows)
    if df.empty:
        return None

    target = Path(out_path) / "frames.parquet"
    table = pa.Table.from_pandas(df, schema=FRAMES_SCHEMA, preserve_index=False)
    pq.write_table(table, target)
    return target
