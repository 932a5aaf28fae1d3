import unittest

from partrunner.solutions.y2023 import day01_part1, day01_part2


class Day01Test(unittest.TestCase):
    def test_part1(self) -> None:
        data = b"1abc2\npqr3stu8vwx\na1b2c3d4e5f\ntreb7uchet"
        self.assertEqual(day01_part1(data), 142)

    def test_part2(self) -> None:
        data = (
            b"two1nine\neightwothree\nabcone2threexyz\nxtwone3four\n"
            b"4nineeightseven2\nzoneight234\n7pqrstsixteen\n"
        )
        self.assertEqual(day01_part2(data), 281)

    def test_only_ascii_digits_count(self) -> None:
        self.assertEqual(day01_part1("a\u00b21b7\n".encode("utf-8")), 17)
        self.assertEqual(day01_part2("\u00b2one\n".encode("utf-8")), 11)

    def test_line_without_digits_fails(self) -> None:
        with self.assertRaises(ValueError):
            day01_part1(b"abc\n")


if __name__ == "__main__":
    unittest.main()
