from __future__ import annotations

import os
from datetime import UTC, datetime
from pathlib import Path


def utc_now_iso() -> str:
    return datetime.now(UTC).isoformat()


def input_path_for(input_root: Path, year: int, day: int) -> Path:
    # Every part of a day shares one input file.
    return input_root / str(year) / str(day)


def available_parallelism() -> int:
    if hasattr(os, "process_cpu_count"):
        count = os.process_cpu_count()
    else:
        count = len(os.sched_getaffinity(0)) if hasattr(os, "sched_getaffinity") else os.cpu_count()
    return count or 1
