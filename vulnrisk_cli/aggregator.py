from __future__ import annotations

import re
import uuid
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional, Sequence

from vulnrisk_cli.models.vulnerability import MitigationStatus, RiskLevel, Vulnerability
from vulnrisk_cli.models.workbook import (
    RiskReductionSummary,
    WorkbookData,
    WorkbookStats,
    empty_risk_distribution,
    empty_status_distribution,
)
from vulnrisk_cli.risk import calculate_risk_reduction, round_half_up

DEFAULT_TTL = timedelta(hours=1)

_CLOSED = "closed"
_IN_PROGRESS_KEYWORDS = ("parsial", "partial", "proses", "progress")
_EXTENSION_RE = re.compile(r"\.[^/.\\]+$")
_PATH_SEPARATOR_RE = re.compile(r"[/\\]")


def classify_status(text: Optional[str]) -> MitigationStatus:
    status = (text or "").strip().lower()
    if status == _CLOSED:
        return MitigationStatus.CLOSED
    if any(keyword in status for keyword in _IN_PROGRESS_KEYWORDS):
        return MitigationStatus.PARSIAL
    return MitigationStatus.OPEN


def effective_status(vuln: Vulnerability) -> MitigationStatus:
    """Status after retest when recorded, otherwise the mitigation status."""
    text = vuln.retest1.strip() or vuln.mitigation_status.strip()
    return classify_status(text)


def calculate_workbook_stats(vulnerabilities: Sequence[Vulnerability]) -> WorkbookStats:
    total = len(vulnerabilities)
    risk_distribution = empty_risk_distribution()
    risk_distribution_inherent = empty_risk_distribution()
    risk_distribution_residual = empty_risk_distribution()
    status_distribution = empty_status_distribution()

    total_reduction = 0
    retested = 0

    for vuln in vulnerabilities:
        risk_distribution[vuln.calculated_risk_level or RiskLevel.LOW] += 1
        inherent = vuln.initial_risk_level or RiskLevel.LOW
        risk_distribution_inherent[inherent] += 1

        # Findings not yet retested stay out of the residual distribution.
        if vuln.retest_risk_level is not None:
            risk_distribution_residual[vuln.retest_risk_level] += 1
            total_reduction += calculate_risk_reduction(inherent, vuln.retest_risk_level)
            retested += 1

        status_distribution[effective_status(vuln)] += 1

    progress = round_half_up(status_distribution[MitigationStatus.CLOSED] / total * 100) if total else 0
    average_reduction = round_half_up(total_reduction / retested) if retested else 0

    return WorkbookStats(
        total_vulnerabilities=total,
        risk_distribution=risk_distribution,
        risk_distribution_inherent=risk_distribution_inherent,
        risk_distribution_residual=risk_distribution_residual,
        status_distribution=status_distribution,
        progress_percentage=progress,
        average_risk_reduction=average_reduction,
    )


def summarize_risk_reduction(vulnerabilities: Iterable[Vulnerability]) -> RiskReductionSummary:
    retested = reduced = eliminated = unchanged = 0
    for vuln in vulnerabilities:
        residual = vuln.retest_risk_level
        if residual is None:
            continue
        inherent = vuln.initial_risk_level
        retested += 1
        if residual < inherent:
            reduced += 1
        elif residual == inherent:
            unchanged += 1
        if residual is RiskLevel.LOW and inherent is not RiskLevel.LOW:
            eliminated += 1

    return RiskReductionSummary(
        retested=retested,
        reduced=reduced,
        eliminated=eliminated,
        unchanged=unchanged,
        reduced_percentage=round_half_up(reduced / retested * 100) if retested else 0,
    )


def generate_workbook_id(now: Optional[datetime] = None) -> str:
    moment = now or datetime.now(timezone.utc)
    return f"wb-{int(moment.timestamp() * 1000)}-{uuid.uuid4().hex[:9]}"


def extract_workbook_name(filename: str) -> str:
    """``"exports/Q3 Findings.xlsx"`` -> ``"Q3 Findings"``."""
    name = _PATH_SEPARATOR_RE.split(filename)[-1]
    name = _EXTENSION_RE.sub("", name)
    return name or filename


def create_workbook(
    vulnerabilities: Sequence[Vulnerability],
    filename: str,
    ttl: timedelta = DEFAULT_TTL,
    now: Optional[datetime] = None,
) -> WorkbookData:
    uploaded_at = now or datetime.now(timezone.utc)
    findings = tuple(vulnerabilities)
    return WorkbookData(
        id=generate_workbook_id(uploaded_at),
        name=extract_workbook_name(filename),
        uploaded_at=uploaded_at,
        expires_at=uploaded_at + ttl,
        vulnerabilities=findings,
        stats=calculate_workbook_stats(findings),
        risk_reduction=summarize_risk_reduction(findings),
    )
