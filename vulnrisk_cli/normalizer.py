"""Canonicalize column headers and cell values of exported finding sheets.

Exports of the same assessment workbook drift between tools and analysts:
headers pick up line breaks and doubled spaces, slashes move around, and
"no value" is spelled half a dozen ways. Everything downstream reads cells
through :func:`get_field_value` so that drift never fails a row.
"""

from __future__ import annotations

import re
from typing import Mapping, Optional

_NULL_TOKENS = frozenset({"none", "n/a", "na", "-", "null"})

_WHITESPACE_RE = re.compile(r"\s+")
_DELIMITER_ONLY_RE = re.compile(r"^;+$")

# Lower-cased, whitespace-collapsed variant -> canonical header.
_HEADER_SYNONYMS = {
    "no.": "No.",
    "no": "No.",
    "nama kerentanan": "Nama Kerentanan",
    "mstg /wstg": "MSTG /WSTG",
    "mstg/wstg": "MSTG /WSTG",
    "mstg / wstg": "MSTG /WSTG",
    "mstg/ wstg": "MSTG /WSTG",
    "jalur lokasi terdampak": "Jalur lokasi terdampak",
    "owasp risk rating": "OWASP Risk Rating",
    "objek terdampak": "Objek terdampak",
    "rekomendasi/mitigasi": "Rekomendasi/Mitigasi",
    "rekomendasi / mitigasi": "Rekomendasi/Mitigasi",
    "status mitigasi": "Status Mitigasi",
    "keterangan remediasi": "Keterangan remediasi",
    "new endpoint": "New Endpoint",
    "keterangan retest": "Keterangan Retest",
    "retest #1": "Retest #1",
    "retest#1": "Retest #1",
    "retest #2": "Retest #2",
    "retest#2": "Retest #2",
    "klasifikasi temuan": "Klasifikasi Temuan",
}


def normalize_value(raw: Optional[str]) -> str:
    if not raw:
        return ""
    trimmed = raw.strip()
    if trimmed.lower() in _NULL_TOKENS:
        return ""
    return trimmed


def normalize_header_name(raw: Optional[str]) -> str:
    if not raw:
        return ""
    # \s covers \r and \n, so every line-break variant collapses to one space.
    collapsed = _WHITESPACE_RE.sub(" ", raw).strip()
    return _HEADER_SYNONYMS.get(collapsed.lower(), collapsed)


def get_field_value(row: Mapping[str, Optional[str]], field_name: str) -> str:
    """Look up *field_name* in *row*, tolerating header drift.

    Tries the exact key, then the normalized header, then every key of the
    row compared case-insensitively after normalization. Returns the
    normalized cell value, or ``""`` when no column matches.
    """
    if field_name in row:
        return normalize_value(row[field_name])

    normalized = normalize_header_name(field_name)
    if normalized in row:
        return normalize_value(row[normalized])

    wanted = normalized.lower()
    for key, value in row.items():
        if normalize_header_name(key).lower() == wanted:
            return normalize_value(value)

    return ""


def is_row_empty(row: Mapping[str, Optional[str]]) -> bool:
    if not row:
        return True
    for value in row.values():
        if not value:
            continue
        trimmed = value.strip()
        if trimmed and not _DELIMITER_ONLY_RE.match(trimmed):
            return False
    return True
