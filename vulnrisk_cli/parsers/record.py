from __future__ import annotations

from typing import Dict, Mapping, Optional

from vulnrisk_cli.log import get_logger
from vulnrisk_cli.models.vulnerability import Vulnerability
from vulnrisk_cli.normalizer import get_field_value
from vulnrisk_cli.owasp import parse_vector
from vulnrisk_cli.risk import calculate_risk_reduction, classify_risk_label, has_residual_data

log = get_logger(__name__)

ID_HEADER = "No."

# Vulnerability attribute -> canonical column header.
FIELD_HEADERS: Dict[str, str] = {
    "title": "Nama Kerentanan",
    "mstg_wstg": "MSTG /WSTG",
    "affected_path": "Jalur lokasi terdampak",
    "owasp_risk_rating": "OWASP Risk Rating",
    "affected_object": "Objek terdampak",
    "ki": "KI",
    "di": "DI",
    "ri": "RI",
    "description": "Deskripsi",
    "recommendation": "Rekomendasi/Mitigasi",
    "owner": "PJ",
    "due_date": "Tenggat",
    "mitigation_status": "Status Mitigasi",
    "remediation_notes": "Keterangan remediasi",
    "new_endpoint": "New Endpoint",
    "kr": "KR",
    "dr": "DR",
    "rr": "RR",
    "retest_notes": "Keterangan Retest",
    "retest1": "Retest #1",
    "finding_classification": "Klasifikasi Temuan",
    "retest2": "Retest #2",
}


def build_vulnerability(
    row: Mapping[str, Optional[str]], index: int
) -> Optional[Vulnerability]:
    """Turn one parsed row into a finding, or ``None`` if the row is not one.

    Rows without an ID (title rows, footnotes, separators) are skipped
    silently. Any other failure is logged with the 1-based *index* and the
    row is dropped.
    """
    try:
        finding_id = get_field_value(row, ID_HEADER)
        if not finding_id:
            return None

        values = {attr: get_field_value(row, header) for attr, header in FIELD_HEADERS.items()}

        inherent = classify_risk_label(values["ri"])
        retest_level = None
        reduction = None
        if has_residual_data(values["kr"], values["dr"], values["rr"]):
            retest_level = classify_risk_label(values["rr"])
            reduction = calculate_risk_reduction(inherent, retest_level)

        return Vulnerability(
            id=finding_id,
            owasp_vector=parse_vector(values["owasp_risk_rating"]),
            calculated_risk_level=inherent,
            initial_risk_level=inherent,
            retest_risk_level=retest_level,
            risk_reduction_percentage=reduction,
            **values,
        )
    except Exception as exc:
        log.warning("Skipping row %d: %s", index, exc)
        return None
