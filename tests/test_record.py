from __future__ import annotations

import logging

import pytest

from vulnrisk_cli.models.vulnerability import RiskLevel
from vulnrisk_cli.parsers import record
from vulnrisk_cli.parsers.record import build_vulnerability

VECTOR = (
    "vector=(SL:7/M:7/O:7/S:7/ED:8/EE:8/A:7/ID:8/"
    "LC:7/LI:7/LAV:7/LAC:7/FD:8/RD:8/NC:7/PV:7)"
)


class TestBuildVulnerability:
    def test_fields_are_mapped(self) -> None:
        row = {
            "No.": "V-01",
            "Nama Kerentanan": "SQL Injection",
            "MSTG /WSTG": "INPV-05",
            "Objek terdampak": "Web",
            "KI": "Tinggi",
            "DI": "Tinggi",
            "RI": "Kritis",
            "PJ": "Backend",
            "Status Mitigasi": "Open",
        }
        vuln = build_vulnerability(row, 1)
        assert vuln is not None
        assert vuln.id == "V-01"
        assert vuln.title == "SQL Injection"
        assert vuln.mstg_wstg == "INPV-05"
        assert vuln.owner == "Backend"
        assert vuln.initial_risk_level is RiskLevel.CRITICAL
        assert vuln.calculated_risk_level is RiskLevel.CRITICAL
        assert vuln.retest_risk_level is None
        assert vuln.risk_reduction_percentage is None

    @pytest.mark.parametrize("finding_id", ["", "   ", "N/A", "-", "None"])
    def test_row_without_id_is_skipped(self, finding_id: str) -> None:
        assert build_vulnerability({"No.": finding_id, "Nama Kerentanan": "Note"}, 1) is None

    def test_header_drift(self) -> None:
        row = {"no": "V-02", "NAMA  KERENTANAN": "XSS", "Status\nMitigasi": "Closed"}
        vuln = build_vulnerability(row, 2)
        assert vuln is not None
        assert vuln.id == "V-02"
        assert vuln.title == "XSS"
        assert vuln.mitigation_status == "Closed"

    def test_retested_row(self) -> None:
        row = {"No.": "V-03", "RI": "Tinggi", "KR": "Rendah", "DR": "Rendah", "RR": "Rendah"}
        vuln = build_vulnerability(row, 3)
        assert vuln is not None
        assert vuln.initial_risk_level is RiskLevel.HIGH
        assert vuln.retest_risk_level is RiskLevel.LOW
        assert vuln.risk_reduction_percentage == 67

    def test_retested_without_change(self) -> None:
        row = {"No.": "V-09", "RI": "Rendah", "KR": "Rendah", "DR": "Rendah", "RR": "Rendah"}
        vuln = build_vulnerability(row, 9)
        assert vuln is not None
        assert vuln.initial_risk_level is RiskLevel.LOW
        assert vuln.retest_risk_level is RiskLevel.LOW
        assert vuln.risk_reduction_percentage == 0

    def test_not_retested_marker(self) -> None:
        row = {"No.": "V-04", "RI": "Tinggi", "KR": "None", "DR": "None", "RR": "None"}
        vuln = build_vulnerability(row, 4)
        assert vuln is not None
        assert vuln.kr == ""
        assert vuln.retest_risk_level is None
        assert vuln.risk_reduction_percentage is None

    def test_partial_residual_is_not_retested(self) -> None:
        row = {"No.": "V-05", "RI": "Tinggi", "KR": "Rendah", "DR": "", "RR": "Rendah"}
        vuln = build_vulnerability(row, 5)
        assert vuln is not None
        assert vuln.retest_risk_level is None

    def test_vector_is_parsed_but_level_comes_from_ri(self) -> None:
        row = {"No.": "V-06", "OWASP Risk Rating": VECTOR, "RI": "Sedang"}
        vuln = build_vulnerability(row, 6)
        assert vuln is not None
        assert vuln.owasp_vector is not None
        assert vuln.owasp_vector.skill_level == 7
        assert vuln.owasp_risk_rating == VECTOR
        assert vuln.initial_risk_level is RiskLevel.MEDIUM

    def test_malformed_vector_keeps_row(self) -> None:
        row = {"No.": "V-07", "OWASP Risk Rating": "vector=(SL:x)", "RI": "Rendah"}
        vuln = build_vulnerability(row, 7)
        assert vuln is not None
        assert vuln.owasp_vector is None

    def test_failure_is_logged_and_row_dropped(
        self, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        def explode(text: str) -> None:
            raise ValueError("bad cell")

        monkeypatch.setattr(record, "parse_vector", explode)
        with caplog.at_level(logging.WARNING, logger="vulnrisk_cli"):
            assert build_vulnerability({"No.": "V-08"}, 8) is None
        assert "Skipping row 8: bad cell" in caplog.text
