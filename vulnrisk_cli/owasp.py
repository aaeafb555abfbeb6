"""OWASP Risk Rating Methodology helpers.

The risk-rating cell of an assessment row embeds the 16 factors of the OWASP
methodology as ``vector=(SL:n/M:n/.../PV:n)``. This module parses that
grammar and implements the methodology's Likelihood x Impact matrix.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from vulnrisk_cli.models.vulnerability import VECTOR_KEYS, RiskLevel, RiskVector

_VECTOR_RE = re.compile(r"vector=\(([^)]+)\)")
_INTEGER_RE = re.compile(r"^[+-]?\d+$")

# (likelihood level, impact level) -> overall risk.
_RISK_MATRIX: Dict[tuple, RiskLevel] = {
    (RiskLevel.HIGH, RiskLevel.HIGH): RiskLevel.CRITICAL,
    (RiskLevel.HIGH, RiskLevel.MEDIUM): RiskLevel.HIGH,
    (RiskLevel.MEDIUM, RiskLevel.HIGH): RiskLevel.HIGH,
    (RiskLevel.HIGH, RiskLevel.LOW): RiskLevel.MEDIUM,
    (RiskLevel.MEDIUM, RiskLevel.MEDIUM): RiskLevel.MEDIUM,
    (RiskLevel.MEDIUM, RiskLevel.LOW): RiskLevel.LOW,
    (RiskLevel.LOW, RiskLevel.HIGH): RiskLevel.MEDIUM,
    (RiskLevel.LOW, RiskLevel.MEDIUM): RiskLevel.LOW,
    (RiskLevel.LOW, RiskLevel.LOW): RiskLevel.LOW,
}


@dataclass(frozen=True)
class OwaspRiskValues:
    likelihood: float
    impact: float
    likelihood_level: RiskLevel
    impact_level: RiskLevel
    risk_level: RiskLevel

    @property
    def ki(self) -> str:
        return self.likelihood_level.label_id

    @property
    def di(self) -> str:
        return self.impact_level.label_id

    @property
    def ri(self) -> str:
        return self.risk_level.label_id


def parse_vector(text: Optional[str]) -> Optional[RiskVector]:
    """Extract the 16-factor vector from a risk-rating cell.

    Returns ``None`` unless the ``vector=(...)`` pattern is present, every
    pair reads ``KEY:INTEGER`` and all 16 keys are given. A partial vector is
    never returned.
    """
    if not text or not text.strip():
        return None

    match = _VECTOR_RE.search(text)
    if not match:
        return None

    values: Dict[str, int] = {}
    for pair in match.group(1).split("/"):
        key, sep, raw_value = pair.partition(":")
        key = key.strip()
        raw_value = raw_value.strip()
        if not sep or not key or not _INTEGER_RE.match(raw_value):
            return None
        values[key] = int(raw_value)

    if any(key not in values for key in VECTOR_KEYS):
        return None
    return RiskVector.from_keys(values)


def _round_one_decimal(value: float) -> float:
    return math.floor(value * 10 + 0.5) / 10


def _mean(values: Iterable[int]) -> float:
    items = list(values)
    return sum(items) / len(items)


def calculate_likelihood(vector: RiskVector) -> float:
    """Mean of the threat-agent and vulnerability factors, one decimal."""
    return _round_one_decimal(_mean(vector.likelihood_factors()))


def calculate_impact(vector: RiskVector) -> float:
    """Mean of the technical and business impact factors, one decimal."""
    return _round_one_decimal(_mean(vector.impact_factors()))


def score_to_level(score: float) -> RiskLevel:
    if score >= 6:
        return RiskLevel.HIGH
    if score >= 3:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def risk_from_matrix(likelihood: float, impact: float) -> RiskLevel:
    key = (score_to_level(likelihood), score_to_level(impact))
    return _RISK_MATRIX.get(key, RiskLevel.LOW)


def calculate_owasp_risk_values(vector: RiskVector) -> OwaspRiskValues:
    likelihood = calculate_likelihood(vector)
    impact = calculate_impact(vector)
    return OwaspRiskValues(
        likelihood=likelihood,
        impact=impact,
        likelihood_level=score_to_level(likelihood),
        impact_level=score_to_level(impact),
        risk_level=risk_from_matrix(likelihood, impact),
    )
