"""Tests for svg_icons.pathdata module."""

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from svg_icons.pathdata import (
    PathCommand,
    deoptimize_path_data,
    format_number,
    optimize_path_data,
    parse_path_data,
    resolve_segments,
)


class TestFormatNumber:
    """Tests for format_number function."""

    def test_integer(self):
        assert format_number(10) == "10"
        assert format_number(1.0) == "1"

    def test_leading_zero_removed(self):
        assert format_number(0.5) == ".5"
        assert format_number(-0.5) == "-.5"

    def test_rounding(self):
        assert format_number(1.23456) == "1.235"
        assert format_number(1.23456, precision=1) == "1.2"

    def test_negative_zero(self):
        assert format_number(-0.0001) == "0"

    def test_zero_precision(self):
        assert format_number(99.6, precision=0) == "100"


class TestParsePathData:
    """Tests for parse_path_data function."""

    def test_simple_path(self):
        commands = parse_path_data("M 10,20 L 30 40 Z")
        assert commands == [
            PathCommand("M", [10, 20]),
            PathCommand("L", [30, 40]),
            PathCommand("Z"),
        ]

    def test_implicit_lineto_after_moveto(self):
        commands = parse_path_data("m1 2 3 4 5 6")
        assert [c.command for c in commands] == ["m", "l", "l"]

    def test_implicit_repetition(self):
        commands = parse_path_data("M0 0h1 2 3")
        assert [c.command for c in commands] == ["M", "h", "h", "h"]

    def test_compact_numbers(self):
        commands = parse_path_data("M.5.5l-1-1")
        assert commands[0].args == [0.5, 0.5]
        assert commands[1].args == [-1, -1]

    def test_exponent(self):
        assert parse_path_data("M1e2 2E-1")[0].args == [100, 0.2]

    def test_compact_arc_flags(self):
        commands = parse_path_data("M0 0a1 1 0 011 1")
        assert commands[1].args == [1, 1, 0, 0, 1, 1, 1]

    def test_empty(self):
        assert parse_path_data("") == []

    @pytest.mark.parametrize(
        "d",
        [
            "L 1 1",
            "10 10",
            "M 1",
            "M 1 1 L x 2",
            "M0 0a1 1 0 2 1 1 1",
            "M0 0z 1 1",
        ],
    )
    def test_malformed(self, d):
        with pytest.raises(ValueError):
            parse_path_data(d)


class TestResolveSegments:
    """Tests for resolve_segments function."""

    def test_relative_to_absolute(self):
        segments = resolve_segments(parse_path_data("M10 10l5 0v5h-5z"))
        assert [s.absolute for s in segments] == [[10, 10], [15, 10], [15], [10], []]

    def test_close_path_returns_to_start(self):
        segments = resolve_segments(parse_path_data("M1 1h2z m1 1"))
        assert segments[-1].absolute == [2, 2]

    def test_reflected_cubic_control(self):
        segments = resolve_segments(parse_path_data("M0 0C1 1 2 2 3 3S5 5 6 6"))
        assert segments[2].reflected == (4, 4)

    def test_shorthand_without_previous_curve(self):
        segments = resolve_segments(parse_path_data("M3 3T5 5"))
        assert segments[1].reflected == (3, 3)


class TestOptimizePathData:
    """Tests for optimize_path_data function."""

    def test_axis_aligned_lines(self):
        assert optimize_path_data("M 10 10 L 20 10 L 20 20 Z") == "M10 10h10v10z"

    def test_relative_when_shorter(self):
        assert optimize_path_data("M100 100L101 101") == "M100 100l1 1"

    def test_absolute_when_shorter(self):
        assert optimize_path_data("M1.235 .5L2.5 .5") == "M1.235.5H2.5"

    def test_implicit_repetition(self):
        assert optimize_path_data("M0 0L1 2L3 5") == "M0 0l1 2 2 3"

    def test_negative_numbers_need_no_separator(self):
        assert optimize_path_data("M10 4l4 4-4 4") == "M10 4l4 4-4 4"

    def test_rounding(self):
        assert optimize_path_data("M0.12345 0L0.12345 5.55555") == "M.123 0v5.556"

    def test_compact_arc_flags(self):
        assert optimize_path_data("M0 0A1 1 0 0 1 1 1") == "M0 0a1 1 0 011 1"


class TestDeoptimizePathData:
    """Tests for deoptimize_path_data function."""

    def test_explicit_commands(self):
        assert deoptimize_path_data("M0 0l1 2 2 3") == "M0 0l1 2l2 3"

    def test_implicit_lineto_after_moveto(self):
        assert deoptimize_path_data("M1 2 3 4") == "M1 2L3 4"
        assert deoptimize_path_data("m1 2 3 4") == "m1 2l3 4"

    def test_arc_flags_separated(self):
        assert deoptimize_path_data("M0 0a1 1 0 011 1") == "M0 0a1 1 0 0 1 1 1"

    def test_compact_numbers_separated(self):
        assert deoptimize_path_data("M.5.5h.006") == "M.5 .5h.006"

    def test_minus_sign_as_separator(self):
        assert deoptimize_path_data("M10 4l4 4-4 4") == "M10 4l4 4l-4 4"

    def test_smooth_cubic_expanded(self):
        assert (
            deoptimize_path_data("M0 0C1 1 2 2 3 3S5 5 6 6")
            == "M0 0C1 1 2 2 3 3C4 4 5 5 6 6"
        )

    def test_relative_smooth_cubic_expanded(self):
        assert deoptimize_path_data("M0 0c1 1 2 2 3 3s2 2 3 3") == "M0 0c1 1 2 2 3 3c1 1 2 2 3 3"

    def test_smooth_quadratic_expanded(self):
        assert deoptimize_path_data("M0 0Q1 1 2 0T4 0") == "M0 0Q1 1 2 0Q3-1 4 0"

    def test_smooth_without_previous_curve(self):
        assert deoptimize_path_data("M0 0s1 1 2 2") == "M0 0c0 0 1 1 2 2"

    def test_unchanged_when_already_verbose(self):
        d = "M8 5.333V8m0 2.666h.006"
        assert deoptimize_path_data(d) == d

    def test_round_trip_of_optimized_output(self):
        optimized = optimize_path_data("M 10 10 L 20 10 L 20 20 L 10 20 Z")
        assert deoptimize_path_data(optimized) == "M10 10h10v10H10z"
