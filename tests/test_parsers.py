from __future__ import annotations

from pathlib import Path

import pytest
from openpyxl import Workbook

from vulnrisk_cli.exceptions import ImportFileError, UnsupportedFileError
from vulnrisk_cli.parsers import parse_file


class TestParseFile:
    def test_csv_with_bom(self, tmp_path: Path) -> None:
        path = tmp_path / "findings.csv"
        path.write_bytes("\ufeffNo.;RI\nV-01;Tinggi\n".encode("utf-8"))
        result = parse_file(path)
        assert [v.id for v in result.vulnerabilities] == ["V-01"]

    def test_extension_is_case_insensitive(self, tmp_path: Path) -> None:
        path = tmp_path / "FINDINGS.CSV"
        path.write_text("No.;RI\nV-01;Tinggi\n", encoding="utf-8")
        assert len(parse_file(path).vulnerabilities) == 1

    def test_txt_is_delimited(self, tmp_path: Path) -> None:
        path = tmp_path / "export.txt"
        path.write_text("No.;RI\nV-01;Tinggi\n", encoding="utf-8")
        assert len(parse_file(path).vulnerabilities) == 1

    def test_xlsx_dispatch(self, tmp_path: Path) -> None:
        path = tmp_path / "findings.xlsx"
        wb = Workbook()
        wb.active.append(["No.", "RI"])
        wb.active.append(["V-01", "Sedang"])
        wb.save(path)
        assert [v.id for v in parse_file(path).vulnerabilities] == ["V-01"]

    def test_unsupported_extension(self, tmp_path: Path) -> None:
        path = tmp_path / "report.pdf"
        path.write_bytes(b"%PDF")
        with pytest.raises(UnsupportedFileError, match="Unsupported file type '.pdf'"):
            parse_file(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ImportFileError, match="Cannot read"):
            parse_file(tmp_path / "missing.csv")
