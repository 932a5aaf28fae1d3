from __future__ import annotations

from ..registry import Registry

DIGITS = "0123456789"


def _lines(data: bytes) -> list[str]:
    return [line for line in data.decode("utf-8").splitlines() if line.strip()]


def day01_part1(data: bytes) -> int:
    """Sum the two-digit numbers made from the first and last digit of each line."""
    total = 0
    for line in _lines(data):
        digits = [char for char in line if char in DIGITS]
        if not digits:
            raise ValueError(f"no digit in line {line!r}")
        total += int(digits[0]) * 10 + int(digits[-1])
    return total


_SPELLED = {
    "one": 1,
    "two": 2,
    "three": 3,
    "four": 4,
    "five": 5,
    "six": 6,
    "seven": 7,
    "eight": 8,
    "nine": 9,
}


def _digits_with_words(line: str) -> list[int]:
    # Overlapping words count ("eightwo" holds 8 and 2).
    found: list[int] = []
    for index, char in enumerate(line):
        if char in DIGITS:
            found.append(int(char))
            continue
        for word, value in _SPELLED.items():
            if line.startswith(word, index):
                found.append(value)
                break
    return found


def day01_part2(data: bytes) -> int:
    total = 0
    for line in _lines(data):
        digits = _digits_with_words(line)
        if not digits:
            raise ValueError(f"no digit in line {line!r}")
        total += digits[0] * 10 + digits[-1]
    return total


def register(registry: Registry) -> None:
    registry.register(2023, 1, 1, day01_part1)
    registry.register(2023, 1, 2, day01_part2)
