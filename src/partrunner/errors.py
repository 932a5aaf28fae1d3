from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import PartId


class RunnerError(RuntimeError):
    pass


class InitError(RunnerError):
    pass


class FileError(RunnerError):
    def __init__(self, part_id: PartId, path: Path, reason: str) -> None:
        super().__init__(f"input error ({part_id.year},{part_id.day},{part_id.part}): {path}: {reason}")
        self.part_id = part_id
        self.path = path


class ComputeError(RunnerError):
    def __init__(self, part_id: PartId, desc: str) -> None:
        super().__init__(f"part error ({part_id.year},{part_id.day},{part_id.part}): {desc}")
        self.part_id = part_id
        self.desc = desc


class ChannelClosedError(RunnerError):
    pass
