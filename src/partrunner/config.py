from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .utils import available_parallelism


@dataclass(slots=True)
class SelectConfig:
    years: list[int] = field(default_factory=list)
    days: list[int] = field(default_factory=list)
    parts: list[int] = field(default_factory=list)


@dataclass(slots=True)
class RunnerConfig:
    input: Path
    jobs: int = field(default_factory=available_parallelism)
    log: Path | None = None
    fail_fast: bool = False
    select: SelectConfig = field(default_factory=SelectConfig)


def _int_list(raw: object, key: str) -> list[int]:
    if raw is None:
        return []
    if isinstance(raw, int) and not isinstance(raw, bool):
        return [raw]
    if not isinstance(raw, list):
        raise ValueError(f"`select.{key}` must be an integer or a list of integers")
    values: list[int] = []
    for idx, item in enumerate(raw):
        if isinstance(item, bool) or not isinstance(item, int):
            raise ValueError(f"`select.{key}[{idx}]` must be an integer")
        if item < 1:
            raise ValueError(f"`select.{key}[{idx}]` must be >= 1")
        values.append(item)
    return values


def load_config(path: str | Path) -> RunnerConfig:
    config_path = Path(path).expanduser().resolve()
    raw = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError("Config root must be a mapping")

    if "input" not in raw:
        raise ValueError("Missing `root.input` in config")
    select_raw = raw.get("select", {}) or {}
    if not isinstance(select_raw, dict):
        raise ValueError("`select` must be a mapping")

    def to_path(value: object) -> Path:
        output = Path(str(value)).expanduser()
        if not output.is_absolute():
            output = config_path.parent / output
        return output

    jobs_raw = raw.get("jobs")
    if jobs_raw is None:
        jobs = available_parallelism()
    else:
        if isinstance(jobs_raw, bool) or not isinstance(jobs_raw, int):
            raise ValueError("`jobs` must be an integer")
        jobs = jobs_raw
        if jobs < 1:
            raise ValueError("`jobs` must be >= 1")

    fail_fast = raw.get("fail_fast", False)
    if not isinstance(fail_fast, bool):
        raise ValueError("`fail_fast` must be a boolean")

    return RunnerConfig(
        input=to_path(raw["input"]),
        jobs=jobs,
        log=to_path(raw["log"]) if raw.get("log") else None,
        fail_fast=fail_fast,
        select=SelectConfig(
            years=_int_list(select_raw.get("years"), "years"),
            days=_int_list(select_raw.get("days"), "days"),
            parts=_int_list(select_raw.get("parts"), "parts"),
        ),
    )
