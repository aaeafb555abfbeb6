from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Tuple

from vulnrisk_cli.models.vulnerability import MitigationStatus, RiskLevel, Vulnerability


def empty_risk_distribution() -> Dict[RiskLevel, int]:
    return {level: 0 for level in RiskLevel.ordered()}


def empty_status_distribution() -> Dict[MitigationStatus, int]:
    return {status: 0 for status in MitigationStatus.ordered()}


@dataclass(frozen=True)
class WorkbookStats:
    total_vulnerabilities: int = 0
    risk_distribution: Dict[RiskLevel, int] = field(default_factory=empty_risk_distribution)
    risk_distribution_inherent: Dict[RiskLevel, int] = field(default_factory=empty_risk_distribution)
    risk_distribution_residual: Dict[RiskLevel, int] = field(default_factory=empty_risk_distribution)
    status_distribution: Dict[MitigationStatus, int] = field(
        default_factory=empty_status_distribution
    )
    progress_percentage: int = 0
    average_risk_reduction: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_vulnerabilities": self.total_vulnerabilities,
            "risk_distribution": _keyed_by_value(self.risk_distribution),
            "risk_distribution_inherent": _keyed_by_value(self.risk_distribution_inherent),
            "risk_distribution_residual": _keyed_by_value(self.risk_distribution_residual),
            "status_distribution": _keyed_by_value(self.status_distribution),
            "progress_percentage": self.progress_percentage,
            "average_risk_reduction": self.average_risk_reduction,
        }


@dataclass(frozen=True)
class RiskReductionSummary:
    retested: int = 0
    reduced: int = 0
    eliminated: int = 0
    unchanged: int = 0
    reduced_percentage: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "retested": self.retested,
            "reduced": self.reduced,
            "eliminated": self.eliminated,
            "unchanged": self.unchanged,
            "reduced_percentage": self.reduced_percentage,
        }


@dataclass(frozen=True)
class WorkbookData:
    id: str
    name: str
    uploaded_at: datetime
    expires_at: datetime
    vulnerabilities: Tuple[Vulnerability, ...]
    stats: WorkbookStats
    risk_reduction: RiskReductionSummary

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "uploaded_at": self.uploaded_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
        }
        data.update(self.stats.to_dict())
        data["risk_reduction"] = self.risk_reduction.to_dict()
        data["vulnerabilities"] = [v.to_dict() for v in self.vulnerabilities]
        return data


def _keyed_by_value(distribution: Dict[Any, int]) -> Dict[str, int]:
    return {key.value: count for key, count in distribution.items()}
