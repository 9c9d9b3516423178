"""
CSV-driven table rendering for the table directive

Loads a CSV data file (RFC 4180 quoting via the csv module) and renders it
as an HTML table. The first record is always the header.

Expected structure:
    data/languages.csv:
        name,year
        Python,1991
        "C, the language",1972

    Output:
        <table class="data">
        <thead>
        <tr><th>name</th><th>year</th></tr>
        </thead>
        <tbody>
        <tr><td>Python</td><td>1991</td></tr>
        <tr><td>C, the language</td><td>1972</td></tr>
        </tbody>
        </table>
"""

import csv
import html
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from ..config import appsettings
from ..models.errors import MalformedTableError, ResourceNotFoundError
from .log import LOG


@dataclass
class CsvTable:
    """
    Parsed CSV data

    Attributes:
        header: Cells of the first record
        rows: Remaining records; each has len(header) cells
        path: File the table was loaded from
    """
    header: List[str]
    rows: List[List[str]] = field(default_factory=list)
    path: Optional[Path] = None


def path_resolve(src: str, base_dir: Union[str, Path]) -> Path:
    """
    Resolve a table src against the base directory

    Absolute paths are returned unchanged.

    Example:
        >>> path_resolve("sales.csv", "data")
        PosixPath('data/sales.csv')
    """
    path = Path(src)
    if path.is_absolute():
        return path
    return Path(base_dir) / path


def table_parse(lines, path: Optional[Path] = None) -> CsvTable:
    """
    Parse CSV records into a CsvTable

    Blank records are skipped and do not count toward row indices.

    Args:
        lines: Iterable of text lines (an open file or list of strings)
        path: Source path, for error messages

    Returns:
        CsvTable with header and rows

    Raises:
        MalformedTableError: Empty input, bad quoting, or a row whose cell
                             count differs from the header's
    """
    reader = csv.reader(lines, strict=True)
    records: List[List[str]] = []
    try:
        for record in reader:
            if not record:
                continue
            records.append(record)
    except csv.Error as e:
        raise MalformedTableError(
            f"Invalid CSV quoting near line {reader.line_num}: {e}",
            row=len(records),
            path=path,
        ) from e
    except UnicodeDecodeError as e:
        raise MalformedTableError(
            f"CSV file is not valid text in the expected encoding: {e.reason}",
            row=len(records),
            path=path,
        ) from e

    if not records:
        raise MalformedTableError("CSV file has no header row", path=path)

    header, rows = records[0], records[1:]
    for index, row in enumerate(rows, start=1):
        if len(row) != len(header):
            raise MalformedTableError(
                f"Row has {len(row)} cells but header has {len(header)}",
                row=index,
                path=path,
            )

    return CsvTable(header=header, rows=rows, path=path)


def table_load(path: Union[str, Path], encoding: Optional[str] = None) -> CsvTable:
    """
    Load and parse a CSV file

    Args:
        path: CSV file to read
        encoding: Text encoding (defaults to appsettings.csv_encoding)

    Returns:
        Parsed CsvTable

    Raises:
        ResourceNotFoundError: If path does not exist or is not a file
        MalformedTableError: If the data is not a rectangular table
    """
    path = Path(path)
    if not path.is_file():
        raise ResourceNotFoundError(f"Table data file not found: {path}", path=path)

    LOG(f"Loading table data from {path}", level=2)
    with open(path, "r", encoding=encoding or appsettings.csv_encoding, newline="") as f:
        table = table_parse(f, path)

    LOG(f"Parsed {len(table.header)} columns x {len(table.rows)} rows", level=3)
    return table


def table_render(table: CsvTable, css_class: Optional[str] = None) -> str:
    """
    Render a CsvTable as an HTML table fragment

    Every cell and the class attribute are HTML-escaped, so cell text such
    as "<script>" is shown, never executed.

    Args:
        table: Parsed table
        css_class: Optional class attribute for the <table> element

    Returns:
        HTML fragment
    """
    class_attr = f' class="{html.escape(css_class)}"' if css_class else ''

    header_cells = ''.join(f'<th>{html.escape(cell)}</th>' for cell in table.header)
    body_rows = [
        '<tr>' + ''.join(f'<td>{html.escape(cell)}</td>' for cell in row) + '</tr>'
        for row in table.rows
    ]

    parts = [
        f'<table{class_attr}>',
        '<thead>',
        f'<tr>{header_cells}</tr>',
        '</thead>',
        '<tbody>',
        *body_rows,
        '</tbody>',
        '</table>',
    ]
    return '\n'.join(parts)
