from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from .errors import RunnerError

Computation = Callable[[bytes], int]


class StatusKind(str, Enum):
    NOT_REGISTERED = "not_registered"
    WAITING = "waiting"
    READING_INPUT = "reading_input"
    RUNNING = "running"
    COMPLETED = "completed"


_LABELS = {
    StatusKind.NOT_REGISTERED: "Not Registered",
    StatusKind.WAITING: "Waiting",
    StatusKind.READING_INPUT: "Reading Input",
    StatusKind.RUNNING: "Running",
}


@dataclass(frozen=True, slots=True, order=True)
class PartId:
    year: int
    day: int
    part: int

    def __str__(self) -> str:
        return f"{self.year}/{self.day}-{self.part}"


@dataclass(frozen=True, slots=True)
class Status:
    """Progress of one job. Only ``COMPLETED`` carries a value."""

    kind: StatusKind
    value: int | None = None

    def __post_init__(self) -> None:
        if (self.kind is StatusKind.COMPLETED) != (self.value is not None):
            raise ValueError(f"status {self.kind.value} cannot carry value {self.value!r}")

    @classmethod
    def completed(cls, value: int) -> Status:
        return cls(StatusKind.COMPLETED, value)

    @property
    def is_terminal(self) -> bool:
        return self.kind is StatusKind.COMPLETED

    def __str__(self) -> str:
        if self.kind is StatusKind.COMPLETED:
            return str(self.value)
        return _LABELS[self.kind]


NOT_REGISTERED = Status(StatusKind.NOT_REGISTERED)
WAITING = Status(StatusKind.WAITING)
READING_INPUT = Status(StatusKind.READING_INPUT)
RUNNING = Status(StatusKind.RUNNING)


@dataclass(frozen=True, slots=True)
class Answer:
    id: PartId
    status: Status

    def __str__(self) -> str:
        return str(self.status)


@dataclass(frozen=True, slots=True)
class JobFailure:
    id: PartId
    error: RunnerError

    def __str__(self) -> str:
        return f"Failed ({self.error})"


@dataclass(frozen=True, slots=True)
class Part:
    id: PartId
    computation: Computation

    @classmethod
    def new(cls, year: int, day: int, part: int, computation: Computation) -> Part:
        return cls(PartId(year, day, part), computation)

    def run(self, data: bytes) -> Answer:
        return Answer(self.id, Status.completed(self.computation(data)))
