from __future__ import annotations

import csv
import io
import sys
from typing import Dict, List, Sequence

from vulnrisk_cli.log import get_logger
from vulnrisk_cli.models.vulnerability import Vulnerability
from vulnrisk_cli.normalizer import is_row_empty, normalize_header_name
from vulnrisk_cli.parsers.base import ParseResult
from vulnrisk_cli.parsers.record import build_vulnerability

log = get_logger(__name__)

DELIMITER = ";"
QUOTE_CHAR = '"'
BOM = "\ufeff"


def _raise_field_size_limit() -> int:
    # Description and evidence cells can exceed csv's 128 KiB default.
    limit = sys.maxsize
    while True:
        try:
            csv.field_size_limit(limit)
            return limit
        except OverflowError:
            limit //= 10


_raise_field_size_limit()


def normalize_line_endings(content: str) -> str:
    return content.replace("\r\n", "\n").replace("\r", "\n")


def parse_delimited(content: str, filename: str) -> ParseResult:
    """Parse ``;``-delimited export text into findings.

    The first record is the header row. Rows that are empty or carry no ID
    are skipped without an error; only a failure to tokenize the content at
    all is reported, and then no findings are returned.
    """
    vulnerabilities: List[Vulnerability] = []
    try:
        reader = csv.reader(
            io.StringIO(normalize_line_endings(content.lstrip(BOM)), newline=""),
            delimiter=DELIMITER,
            quotechar=QUOTE_CHAR,
            doublequote=True,
        )
        header_fields = next(reader, None)
        if header_fields is None:
            return ParseResult()
        headers = [normalize_header_name(h) for h in header_fields]

        for index, fields in enumerate(reader, start=1):
            row = _build_row(headers, fields, index)
            if is_row_empty(row):
                continue
            vuln = build_vulnerability(row, index)
            if vuln is not None:
                vulnerabilities.append(vuln)
    except Exception as exc:
        log.error("Failed to parse %s: %s", filename, exc)
        return ParseResult(errors=[f"Failed to parse file {filename}: {exc}"])

    log.debug("Parsed %d finding(s) from %s", len(vulnerabilities), filename)
    return ParseResult(vulnerabilities=vulnerabilities)


def _build_row(headers: Sequence[str], fields: Sequence[str], index: int) -> Dict[str, str]:
    # Missing trailing cells stay absent; a repeated header keeps its first cell.
    row: Dict[str, str] = {}
    for header, value in zip(headers, fields):
        row.setdefault(header, value or "")
    if len(fields) > len(headers):
        log.debug("Row %d has %d field(s) beyond the header", index, len(fields) - len(headers))
    return row
