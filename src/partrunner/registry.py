from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from .models import Computation, Part, PartId


@dataclass(slots=True)
class Selection:
    runnable: list[Part]
    missing: list[PartId]


class Registry:
    """Maps part ids to their computations."""

    def __init__(self) -> None:
        self._computations: dict[PartId, Computation] = {}

    def register(self, year: int, day: int, part: int, computation: Computation) -> None:
        part_id = PartId(year, day, part)
        if part_id in self._computations:
            raise ValueError(f"Duplicate registration for {part_id}")
        self._computations[part_id] = computation

    def solution(self, year: int, day: int, part: int) -> Callable[[Computation], Computation]:
        def decorator(computation: Computation) -> Computation:
            self.register(year, day, part, computation)
            return computation

        return decorator

    def get(self, part_id: PartId) -> Part | None:
        computation = self._computations.get(part_id)
        if computation is None:
            return None
        return Part(part_id, computation)

    def ids(self) -> list[PartId]:
        return sorted(self._computations)

    def years(self) -> list[int]:
        return sorted({part_id.year for part_id in self._computations})

    def __len__(self) -> int:
        return len(self._computations)

    def __contains__(self, part_id: object) -> bool:
        return part_id in self._computations

    def select(
        self,
        years: Iterable[int] | None = None,
        days: Iterable[int] | None = None,
        parts: Iterable[int] | None = None,
    ) -> Selection:
        year_set = set(years or [])
        day_set = set(days or [])
        part_set = set(parts or [])

        if day_set and not year_set and self._computations:
            year_set = {max(self.years())}

        chosen = [
            part_id
            for part_id in self.ids()
            if (not year_set or part_id.year in year_set)
            and (not day_set or part_id.day in day_set)
            and (not part_set or part_id.part in part_set)
        ]

        missing: list[PartId] = []
        if year_set and day_set and part_set:
            for year in sorted(year_set):
                for day in sorted(day_set):
                    for part in sorted(part_set):
                        part_id = PartId(year, day, part)
                        if part_id not in self._computations:
                            missing.append(part_id)

        runnable = [Part(part_id, self._computations[part_id]) for part_id in chosen]
        return Selection(runnable=runnable, missing=missing)


default_registry = Registry()

_builtins_loaded = False


def load_builtin_solutions(registry: Registry | None = None) -> Registry:
    global _builtins_loaded
    from .solutions import y2023

    if registry is None:
        registry = default_registry
        if _builtins_loaded:
            return registry
        _builtins_loaded = True
    y2023.register(registry)
    return registry
