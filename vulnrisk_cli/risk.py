from __future__ import annotations

import math
from typing import Optional, Tuple

from vulnrisk_cli.models.vulnerability import RiskLevel, RiskVector

# Checked in this order; the first level with a matching keyword wins.
_LEVEL_KEYWORDS: Tuple[Tuple[RiskLevel, Tuple[str, ...]], ...] = (
    (RiskLevel.CRITICAL, ("kritis", "critical")),
    (RiskLevel.HIGH, ("tinggi", "high")),
    (RiskLevel.MEDIUM, ("sedang", "medium")),
    (RiskLevel.LOW, ("rendah", "low")),
)

_NOT_RETESTED = "none"


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def classify_risk_label(text: Optional[str]) -> RiskLevel:
    """Map a free-text risk label (``"Tinggi"``, ``"HIGH"``, ...) to a level."""
    if not text:
        return RiskLevel.LOW
    lowered = text.strip().lower()
    for level, keywords in _LEVEL_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return level
    return RiskLevel.LOW


def vector_average_level(vector: RiskVector) -> RiskLevel:
    """Simplified classification from the mean of all 16 factors.

    Can disagree with the Likelihood x Impact matrix in
    :mod:`vulnrisk_cli.owasp` for uneven vectors; both are kept.
    """
    factors = vector.factors()
    average = sum(factors) / len(factors)
    if average >= 6:
        return RiskLevel.CRITICAL
    if average >= 4.5:
        return RiskLevel.HIGH
    if average >= 3:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def _legacy_score(text: str) -> int:
    return classify_risk_label(text).score


def legacy_matrix_level(ki: Optional[str], di: Optional[str]) -> RiskLevel:
    """Multiplicative KI x DI matrix for files that predate the RI column."""
    product = _legacy_score(ki or "") * _legacy_score(di or "")
    if product >= 12:
        return RiskLevel.CRITICAL
    if product >= 9:
        return RiskLevel.HIGH
    if product >= 4:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def calculate_risk_level(
    vector: Optional[RiskVector] = None,
    ki: Optional[str] = None,
    di: Optional[str] = None,
    ri: Optional[str] = None,
) -> RiskLevel:
    if vector is not None:
        return vector_average_level(vector)
    if ri and ri.strip():
        return classify_risk_label(ri)
    if ki and ki.strip() and di and di.strip():
        return legacy_matrix_level(ki, di)
    return RiskLevel.LOW


def has_residual_data(kr: Optional[str], dr: Optional[str], rr: Optional[str]) -> bool:
    """True once a finding has been retested, i.e. KR, DR and RR are all filled."""
    for value in (kr, dr, rr):
        if not value or not value.strip():
            return False
        if value.strip().lower() == _NOT_RETESTED:
            return False
    return True


def calculate_risk_reduction(inherent: RiskLevel, residual: Optional[RiskLevel]) -> int:
    if residual is None:
        return 0
    inherent_score = inherent.score
    if inherent_score == 0:
        return 0
    reduction = (inherent_score - residual.score) / inherent_score * 100
    return max(0, round_half_up(reduction))
