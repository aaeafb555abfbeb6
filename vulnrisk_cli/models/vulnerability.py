from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class RiskLevel(Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"

    @property
    def score(self) -> int:
        return _RISK_SCORES[self]

    @property
    def label_id(self) -> str:
        """Indonesian label as used in the assessment workbooks."""
        return _RISK_LABELS_ID[self]

    @classmethod
    def ordered(cls) -> Tuple[RiskLevel, ...]:
        """Levels from most to least severe, the order reports list them in."""
        return (cls.CRITICAL, cls.HIGH, cls.MEDIUM, cls.LOW)

    def __lt__(self, other: Any) -> bool:
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.score < other.score

    def __le__(self, other: Any) -> bool:
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.score <= other.score

    def __gt__(self, other: Any) -> bool:
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.score > other.score

    def __ge__(self, other: Any) -> bool:
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.score >= other.score


_RISK_SCORES: Dict[RiskLevel, int] = {
    RiskLevel.LOW: 1,
    RiskLevel.MEDIUM: 2,
    RiskLevel.HIGH: 3,
    RiskLevel.CRITICAL: 4,
}

_RISK_LABELS_ID: Dict[RiskLevel, str] = {
    RiskLevel.LOW: "Rendah",
    RiskLevel.MEDIUM: "Sedang",
    RiskLevel.HIGH: "Tinggi",
    RiskLevel.CRITICAL: "Kritis",
}


class MitigationStatus(Enum):
    OPEN = "Open"
    PARSIAL = "Parsial"
    CLOSED = "Closed"

    @property
    def label_id(self) -> str:
        return _STATUS_LABELS_ID[self]

    @classmethod
    def ordered(cls) -> Tuple[MitigationStatus, ...]:
        return (cls.OPEN, cls.PARSIAL, cls.CLOSED)


_STATUS_LABELS_ID: Dict[MitigationStatus, str] = {
    MitigationStatus.OPEN: "Terbuka",
    MitigationStatus.PARSIAL: "Dalam Proses",
    MitigationStatus.CLOSED: "Ditutup",
}


# Vector grammar key -> attribute name, in the order the grammar lists them.
VECTOR_KEYS: Dict[str, str] = {
    "SL": "skill_level",
    "M": "motive",
    "O": "opportunity",
    "S": "size",
    "ED": "ease_of_discovery",
    "EE": "ease_of_exploit",
    "A": "awareness",
    "ID": "intrusion_detection",
    "LC": "loss_of_confidentiality",
    "LI": "loss_of_integrity",
    "LAV": "loss_of_availability",
    "LAC": "loss_of_accountability",
    "FD": "financial_damage",
    "RD": "reputation_damage",
    "NC": "non_compliance",
    "PV": "privacy_violation",
}


@dataclass(frozen=True)
class RiskVector:
    # Threat agent
    skill_level: int
    motive: int
    opportunity: int
    size: int
    # Vulnerability
    ease_of_discovery: int
    ease_of_exploit: int
    awareness: int
    intrusion_detection: int
    # Technical impact
    loss_of_confidentiality: int
    loss_of_integrity: int
    loss_of_availability: int
    loss_of_accountability: int
    # Business impact
    financial_damage: int
    reputation_damage: int
    non_compliance: int
    privacy_violation: int

    @classmethod
    def from_keys(cls, values: Dict[str, int]) -> RiskVector:
        """Build from grammar keys (``SL``, ``M``, ...). Raises ``KeyError`` if one is missing."""
        return cls(**{attr: values[key] for key, attr in VECTOR_KEYS.items()})

    def as_keys(self) -> Dict[str, int]:
        return {key: getattr(self, attr) for key, attr in VECTOR_KEYS.items()}

    def factors(self) -> Tuple[int, ...]:
        return tuple(getattr(self, f.name) for f in fields(self))

    def likelihood_factors(self) -> Tuple[int, ...]:
        return self.factors()[:8]

    def impact_factors(self) -> Tuple[int, ...]:
        return self.factors()[8:]

    def to_vector_string(self) -> str:
        pairs = "/".join(f"{key}:{value}" for key, value in self.as_keys().items())
        return f"vector=({pairs})"


@dataclass(frozen=True)
class Vulnerability:
    id: str
    title: str = ""
    mstg_wstg: str = ""
    affected_path: str = ""
    owasp_risk_rating: str = ""
    owasp_vector: Optional[RiskVector] = None
    affected_object: str = ""
    ki: str = ""
    di: str = ""
    ri: str = ""
    description: str = ""
    recommendation: str = ""
    owner: str = ""
    due_date: str = ""
    mitigation_status: str = ""
    remediation_notes: str = ""
    new_endpoint: str = ""
    kr: str = ""
    dr: str = ""
    rr: str = ""
    retest_notes: str = ""
    retest1: str = ""
    finding_classification: str = ""
    retest2: str = ""
    calculated_risk_level: RiskLevel = RiskLevel.LOW
    initial_risk_level: RiskLevel = RiskLevel.LOW
    retest_risk_level: Optional[RiskLevel] = None
    risk_reduction_percentage: Optional[int] = None

    @property
    def is_retested(self) -> bool:
        return self.retest_risk_level is not None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, RiskLevel):
                value = value.value
            elif isinstance(value, RiskVector):
                value = value.as_keys()
            data[f.name] = value
        return data
