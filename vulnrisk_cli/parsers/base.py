from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from vulnrisk_cli.models.vulnerability import Vulnerability


@dataclass
class ParseResult:
    vulnerabilities: List[Vulnerability] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return bool(self.errors)
