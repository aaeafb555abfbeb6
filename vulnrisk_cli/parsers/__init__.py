from __future__ import annotations

from pathlib import Path

from vulnrisk_cli.exceptions import ImportFileError, UnsupportedFileError
from vulnrisk_cli.parsers.base import ParseResult
from vulnrisk_cli.parsers.delimited import parse_delimited
from vulnrisk_cli.parsers.excel import parse_excel

DELIMITED_EXTENSIONS = (".csv", ".txt")
EXCEL_EXTENSIONS = (".xlsx", ".xlsm")

__all__ = [
    "DELIMITED_EXTENSIONS",
    "EXCEL_EXTENSIONS",
    "ParseResult",
    "parse_delimited",
    "parse_excel",
    "parse_file",
]


def parse_file(path: Path) -> ParseResult:
    suffix = path.suffix.lower()
    if suffix not in DELIMITED_EXTENSIONS + EXCEL_EXTENSIONS:
        supported = ", ".join(DELIMITED_EXTENSIONS + EXCEL_EXTENSIONS)
        raise UnsupportedFileError(
            f"Unsupported file type '{suffix or path.name}'. Supported: {supported}."
        )

    try:
        data = path.read_bytes()
    except OSError as exc:
        raise ImportFileError(f"Cannot read {path}: {exc.strerror or exc}") from exc

    if suffix in EXCEL_EXTENSIONS:
        return parse_excel(data, path.name)
    return parse_delimited(data.decode("utf-8-sig", errors="replace"), path.name)
