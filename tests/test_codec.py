from pathlib import Path

import numpy as np
import pytest

from tabfluids import (
    FormatError,
    ParserState,
    TableIOError,
    TableParser,
    format_table,
    parse_table,
    read_table,
    write_table,
)

VALID = """\
# Tabulated properties
pressure
1e5
2e5

temperature
300
350
400

density
1.0
2.0
3.0
# comments are allowed inside blocks
4.0
5.0
6.0
"""


def test_parse_valid_table():
    table = parse_table(VALID)
    np.testing.assert_array_equal(table.pressure.values, [1e5, 2e5])
    np.testing.assert_array_equal(table.temperature.values, [300.0, 350.0, 400.0])
    np.testing.assert_array_equal(table.density, [[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]])
    assert table.present() == ("density",)


def test_round_trip(small_table):
    completed = small_table.with_properties(
        internal_energy=small_table.density * 1.0e5 / 3.0,
        enthalpy=small_table.density * 1.0e5 / 7.0,
    )
    assert parse_table(format_table(completed)) == completed


def test_file_round_trip(tmp_path: Path, small_table):
    path = write_table(tmp_path / "nested" / "table.csv", small_table)
    assert path.exists()
    assert read_table(path) == small_table


@pytest.mark.parametrize(
    "increasing, decreasing, keyword",
    [
        ("1e5\n2e5\n", "2e5\n1e5\n", "pressure"),
        ("300\n350\n400\n", "400\n350\n300\n", "temperature"),
    ],
)
def test_decreasing_axis_is_rejected(increasing, decreasing, keyword):
    with pytest.raises(FormatError, match=f"Invalid '{keyword}' block"):
        parse_table(VALID.replace(increasing, decreasing))


def test_wrong_value_count_is_rejected():
    text = VALID.replace("5.0\n6.0\n", "5.0\n")
    with pytest.raises(FormatError, match="got 5, expected 6"):
        parse_table(text)


def test_duplicate_keyword_is_rejected():
    text = VALID + "\npressure\n3e5\n4e5\n"
    with pytest.raises(FormatError, match="Duplicate keyword 'pressure'"):
        parse_table(text)


def test_unknown_keyword_is_rejected():
    with pytest.raises(FormatError, match="viscosity"):
        parse_table(VALID + "\nviscosity\n1.0\n")


def test_missing_axis_is_rejected():
    with pytest.raises(FormatError, match="'temperature' is required"):
        parse_table("pressure\n1e5\n2e5\n")


@pytest.mark.parametrize(
    "line", ["abc", "1.0 2.0", "nan", "inf", "1_00000", "0x10", "1e999", "2e5.0"]
)
def test_invalid_value_lines_are_rejected(line):
    text = VALID.replace("2e5\n", f"{line}\n", 1)
    with pytest.raises(FormatError, match=r"<string>:4"):
        parse_table(text)


def test_keyword_without_blank_line_is_rejected():
    text = "pressure\n1e5\n2e5\ntemperature\n300\n350\n"
    with pytest.raises(FormatError, match="missing blank line"):
        parse_table(text)


def test_parser_state_transitions():
    parser = TableParser()
    assert parser.state is ParserState.IDLE

    parser.feed("# header", 1)
    assert parser.state is ParserState.IDLE
    parser.feed("pressure", 2)
    assert parser.state is ParserState.IN_BLOCK
    assert parser.keyword == "pressure"
    parser.feed("1e5", 3)
    parser.feed("# comment", 4)
    parser.feed("2e5", 5)
    parser.feed("", 6)
    assert parser.state is ParserState.IDLE
    assert parser.keyword is None
    assert parser.blocks == {"pressure": [1e5, 2e5]}


def test_end_of_file_closes_block():
    table = parse_table("temperature\n300\n400\n\npressure\n1e5\n2e5")
    assert table.num_p == 2
    assert table.num_T == 2


def test_read_missing_file(tmp_path: Path):
    with pytest.raises(TableIOError) as exc_info:
        read_table(tmp_path / "missing.csv")
    assert isinstance(exc_info.value, OSError)


def test_read_error_names_file(tmp_path: Path):
    path = tmp_path / "bad.csv"
    path.write_text("density\n1.0\n")
    with pytest.raises(FormatError, match="bad.csv"):
        read_table(path)


@pytest.mark.parametrize("line", ["2e5", "+2e5", "200000.", ".2e6", "2E+05", "2.5e5"])
def test_plain_real_numbers_are_accepted(line):
    text = VALID.replace("2e5\n", f"{line}\n", 1)
    value = parse_table(text).pressure.values[1]
    assert value == float(line)


def test_byte_order_mark_is_ignored(tmp_path: Path, small_table):
    path = tmp_path / "bom.csv"
    path.write_text("\ufeff" + format_table(small_table), encoding="utf-8")
    assert read_table(path) == small_table


def test_invalid_utf8_is_a_format_error(tmp_path: Path):
    path = tmp_path / "binary.csv"
    path.write_bytes(b"pressure\n1e5\n2e5\n\ntemperature\n300\n400\n\n\xff\xfe\n")
    with pytest.raises(FormatError, match="binary.csv: not valid UTF-8"):
        read_table(path)


def test_write_into_unwritable_directory(tmp_path: Path, small_table):
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a directory")
    with pytest.raises(TableIOError) as exc_info:
        write_table(blocker / "sub" / "table.csv", small_table)
    assert isinstance(exc_info.value, OSError)
