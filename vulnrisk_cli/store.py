from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional, Tuple

from vulnrisk_cli.log import get_logger
from vulnrisk_cli.models.workbook import WorkbookData

log = get_logger(__name__)


class WorkbookStore:
    """In-memory holder of imported workbooks.

    Expiry is driven by the caller: nothing here reads the clock, so
    ``sweep`` must be given the current time.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, Tuple[WorkbookData, datetime]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, workbook_id: object) -> bool:
        return workbook_id in self._entries

    def add(self, workbook: WorkbookData, expires_at: Optional[datetime] = None) -> None:
        self._entries[workbook.id] = (workbook, expires_at or workbook.expires_at)

    def get(self, workbook_id: str) -> Optional[WorkbookData]:
        entry = self._entries.get(workbook_id)
        return entry[0] if entry else None

    def remove(self, workbook_id: str) -> bool:
        return self._entries.pop(workbook_id, None) is not None

    def all(self) -> List[WorkbookData]:
        return [workbook for workbook, _ in self._entries.values()]

    def clear(self) -> None:
        self._entries.clear()

    def expired_ids(self, now: datetime) -> List[str]:
        return [wid for wid, (_, expires_at) in self._entries.items() if expires_at <= now]

    def sweep(self, now: datetime) -> List[str]:
        """Evict every workbook whose expiry is at or before *now*; return their IDs."""
        expired = self.expired_ids(now)
        for workbook_id in expired:
            del self._entries[workbook_id]
        if expired:
            log.info("Evicted %d expired workbook(s)", len(expired))
        return expired
