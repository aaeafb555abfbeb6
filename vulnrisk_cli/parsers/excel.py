from __future__ import annotations

import csv
import io
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, BinaryIO, Iterable, Sequence, Union

from openpyxl import load_workbook

from vulnrisk_cli.log import get_logger
from vulnrisk_cli.parsers.base import ParseResult
from vulnrisk_cli.parsers.delimited import DELIMITER, QUOTE_CHAR, parse_delimited

log = get_logger(__name__)

ExcelSource = Union[str, Path, bytes, BinaryIO]


def parse_excel(source: ExcelSource, filename: str) -> ParseResult:
    """Flatten the first worksheet to delimited text and parse it like a CSV export."""
    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(source)

    try:
        workbook = load_workbook(source, read_only=True, data_only=True)
        try:
            worksheet = workbook.worksheets[0]
            content = sheet_to_delimited(worksheet.iter_rows(values_only=True))
        finally:
            workbook.close()
    except Exception as exc:
        log.error("Cannot read workbook %s: %s", filename, exc)
        return ParseResult(errors=[f"Error parsing Excel file {filename}: {exc}"])

    return parse_delimited(content, filename)


def sheet_to_delimited(rows: Iterable[Sequence[Any]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(
        buffer,
        delimiter=DELIMITER,
        quotechar=QUOTE_CHAR,
        lineterminator="\n",
    )
    for row in rows:
        cells = [cell_text(value) for value in row]
        if not any(cell.strip() for cell in cells):
            continue
        writer.writerow(cells)
    return buffer.getvalue()


def cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, (date, time)):
        return value.isoformat()
    return str(value)
