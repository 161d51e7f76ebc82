"""
Reading and writing tabulated fluid property files.

The file format is line oriented. Lines that are empty or begin with '#' are
ignored between blocks. A keyword line ('pressure', 'temperature', 'density',
'internal_energy' or 'enthalpy') starts a block, followed by one real number per
line. A blank line (or the end of the file) ends the block.

Property blocks hold `n_pressures * n_temperatures` values that cycle through
all pressures for the first temperature, then all pressures for the second
temperature, and so on.

```
# Tabulated fluid properties
pressure
1e5
2e5

temperature
300
350

density
1.16
2.32
0.99
1.99
```
"""

import enum
import functools
import logging
import os
from pathlib import Path
import re
import typing

import numpy as np
from typing_extensions import ParamSpec

from tabfluids.errors import FormatError, TableIOError, ValidationError
from tabfluids.tables.data import Axis, PropertyTable, flatten_data, reshape_data_2d
from tabfluids.types import REQUIRED_AXES, TABULATED_PROPERTIES

logger = logging.getLogger(__name__)

__all__ = [
    "KEYWORDS",
    "ParserState",
    "TableParser",
    "parse_table",
    "read_table",
    "format_table",
    "write_table",
]

KEYWORDS: typing.Tuple[str, ...] = REQUIRED_AXES + TABULATED_PROPERTIES
"""All keywords recognised in a table file, in the order they are written."""

COMMENT_PREFIX = "#"

# Plain decimal or scientific notation. No digit separators, hex, nan or inf.
_REAL_NUMBER = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)

P = ParamSpec("P")
R = typing.TypeVar("R")


class ParserState(enum.Enum):
    """States of the table file parser."""

    IDLE = "idle"
    """Between blocks: expecting a keyword, a comment or a blank line."""
    IN_BLOCK = "in_block"
    """Inside a keyword block: expecting one value per line until a blank line."""


class TableParser:
    """
    Line-by-line state machine for the table file format.

    Feed lines with `feed` and call `finish` to validate the collected blocks and
    build a `PropertyTable`. The parser does no I/O.

    ```python
    parser = TableParser()
    for number, line in enumerate(text.splitlines(), start=1):
        parser.feed(line, number)
    table = parser.finish()
    ```
    """

    def __init__(self, source: str = "<string>") -> None:
        """
        :param source: Name of the data source, used in error messages
        """
        self.source = source
        self.state = ParserState.IDLE
        self.keyword: typing.Optional[str] = None
        self._blocks: typing.Dict[str, typing.List[float]] = {}
        self._block_lines: typing.Dict[str, int] = {}

    @property
    def blocks(self) -> typing.Dict[str, typing.List[float]]:
        """Values collected so far, keyed by keyword."""
        return {keyword: list(values) for keyword, values in self._blocks.items()}

    def _error(self, message: str, line_number: typing.Optional[int] = None) -> FormatError:
        location = self.source if line_number is None else f"{self.source}:{line_number}"
        return FormatError(f"{location}: {message}")

    def feed(self, line: str, line_number: int) -> None:
        """
        Consume one line of the file.

        :param line: Line content, with or without the trailing newline
        :param line_number: 1-based line number, used in error messages
        :raises `FormatError`: If the line is not valid in the current state
        """
        stripped = line.strip()

        if self.state is ParserState.IDLE:
            if not stripped or stripped.startswith(COMMENT_PREFIX):
                return
            if stripped not in KEYWORDS:
                raise self._error(
                    f"Keyword {stripped!r} not recognised. "
                    f"Valid keywords are: {', '.join(KEYWORDS)}",
                    line_number,
                )
            if stripped in self._blocks:
                raise self._error(
                    f"Duplicate keyword {stripped!r} (first given on line "
                    f"{self._block_lines[stripped]})",
                    line_number,
                )
            self.state = ParserState.IN_BLOCK
            self.keyword = stripped
            self._blocks[stripped] = []
            self._block_lines[stripped] = line_number
            return

        # ParserState.IN_BLOCK
        if not stripped:
            self.state = ParserState.IDLE
            self.keyword = None
            return
        if stripped.startswith(COMMENT_PREFIX):
            return

        assert self.keyword is not None
        tokens = stripped.split()
        if len(tokens) != 1:
            raise self._error(
                f"Expected a single value in '{self.keyword}' block, got {len(tokens)} tokens",
                line_number,
            )
        token = tokens[0]
        if _REAL_NUMBER.fullmatch(token) is None:
            hint = " (missing blank line before keyword?)" if token in KEYWORDS else ""
            raise self._error(
                f"Non-numeric value {token!r} in '{self.keyword}' block{hint}",
                line_number,
            )
        value = float(token)
        # Overflowing literals such as 1e999 parse to inf
        if not np.isfinite(value):
            raise self._error(
                f"Non-finite value {token!r} in '{self.keyword}' block", line_number
            )
        self._blocks[self.keyword].append(value)

    def _axis(self, keyword: str) -> Axis:
        if keyword not in self._blocks:
            raise self._error(f"No '{keyword}' data found. '{keyword}' is required")
        values = self._blocks[keyword]
        try:
            return Axis(values)
        except ValidationError as exc:
            raise self._error(
                f"Invalid '{keyword}' block: {exc}", self._block_lines[keyword]
            ) from exc

    def finish(self) -> PropertyTable:
        """
        Validate the collected blocks and build the table.

        :return: `PropertyTable` holding the axes and every property block present
        :raises `FormatError`: If an axis is missing or invalid, or a property block has the wrong number of values
        """
        pressure = self._axis("pressure")
        temperature = self._axis("temperature")
        expected = pressure.size * temperature.size

        matrices = {}
        for name in TABULATED_PROPERTIES:
            if name not in self._blocks:
                continue
            values = self._blocks[name]
            if len(values) != expected:
                raise self._error(
                    f"Incorrect number of '{name}' values: got {len(values)}, "
                    f"expected {expected} ({pressure.size} pressures x "
                    f"{temperature.size} temperatures)",
                    self._block_lines[name],
                )
            matrices[name] = reshape_data_2d(temperature.size, pressure.size, values)

        self.state = ParserState.IDLE
        self.keyword = None
        return PropertyTable(pressure=pressure, temperature=temperature, **matrices)


def parse_table(text: str, source: str = "<string>") -> PropertyTable:
    """
    Parse the contents of a table file.

    :param text: File contents
    :param source: Name of the data source, used in error messages
    :return: Parsed `PropertyTable`
    :raises `FormatError`: If the contents are malformed
    """
    parser = TableParser(source)
    for line_number, line in enumerate(text.splitlines(), start=1):
        parser.feed(line, line_number)
    table = parser.finish()
    logger.debug(
        f"Parsed {source}: {table.num_p} pressures x {table.num_T} temperatures, "
        f"properties={list(table.present())}"
    )
    return table


def _raise_table_io_error(func: typing.Callable[P, R]) -> typing.Callable[P, R]:
    """
    Wraps a function to raise TableIOError on OS-level failures.

    :param func: Function to wrap
    """

    @functools.wraps(func)
    def _wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return func(*args, **kwargs)
        except OSError as exc:
            if isinstance(exc, TableIOError):
                raise
            raise TableIOError(
                f"{exc.strerror or exc} ({exc.filename or 'unknown file'})"
            ) from exc

    return _wrapper


@_raise_table_io_error
def read_table(filepath: typing.Union[str, os.PathLike]) -> PropertyTable:
    """
    Read and parse a table file.

    :param filepath: Path to the table file
    :return: Parsed `PropertyTable`
    :raises `TableIOError`: If the file cannot be read
    :raises `FormatError`: If the file is malformed or not UTF-8 text
    """
    path = Path(filepath)
    try:
        # "utf-8-sig" drops a leading byte order mark
        text = path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as exc:
        raise FormatError(
            f"{path}: not valid UTF-8 text ({exc.reason} at byte {exc.start})"
        ) from exc
    logger.info(f"Reading tabulated properties from {path}")
    return parse_table(text, source=str(path))


def _format_block(keyword: str, values: typing.Iterable[float]) -> typing.List[str]:
    return [keyword, *(repr(float(value)) for value in values), ""]


def format_table(table: PropertyTable) -> str:
    """
    Serialize a table in the table file format.

    Values are written with full precision, so parsing the result reproduces `table` exactly.

    :param table: Table to serialize
    :return: File contents
    """
    lines = [
        "# Tabulated fluid properties",
        f"# {table.num_p} pressure points (Pa), {table.num_T} temperature points (K)",
        "# Property values cycle through all pressures for each temperature",
        "",
    ]
    lines += _format_block("pressure", table.pressure)
    lines += _format_block("temperature", table.temperature)
    for name in table.present():
        lines += _format_block(name, flatten_data(table.get(name)))
    return "\n".join(lines)


@_raise_table_io_error
def write_table(
    filepath: typing.Union[str, os.PathLike], table: PropertyTable
) -> Path:
    """
    Write a table to file, creating parent directories as needed.

    :param filepath: Destination path
    :param table: Table to write
    :return: Path written to
    :raises `TableIOError`: If the file cannot be written
    """
    path = Path(filepath)
    directory = path.parent
    if not directory.exists():
        directory.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Created parent directory: {directory}")

    path.write_text(format_table(table), encoding="utf-8")
    logger.info(
        f"Wrote tabulated properties {list(table.present())} to {path}"
    )
    return path
