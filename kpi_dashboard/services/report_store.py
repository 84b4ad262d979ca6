"""
In-process store for generated reports.

Reports live for a fixed TTL and are never persisted; a restart drops them.
The store is created by the application lifespan and handed to routes
through a dependency, so tests can build their own instance.
"""
import asyncio
import logging
import threading
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class StoredReport:
    id: str
    title: str
    content: str
    user_id: int
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now

    def remaining_minutes(self, now: datetime) -> int:
        return max(0, round((self.expires_at - now).total_seconds() / 60))


class ReportStore:
    def __init__(self, ttl: timedelta = timedelta(hours=1)):
        self.ttl = ttl
        self._reports: Dict[str, StoredReport] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._reports)

    @staticmethod
    def _new_id() -> str:
        return f"report_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"

    def save(self, user_id: int, title: str, content: str, now: Optional[datetime] = None) -> StoredReport:
        now = now or _utcnow()
        report = StoredReport(
            id=self._new_id(),
            title=title,
            content=content,
            user_id=user_id,
            created_at=now,
            expires_at=now + self.ttl,
        )
        with self._lock:
            self._reports[report.id] = report
        return report

    def get(self, report_id: str, now: Optional[datetime] = None) -> Optional[StoredReport]:
        """The report, or None when unknown or expired (expired entries are dropped)."""
        now = now or _utcnow()
        with self._lock:
            report = self._reports.get(report_id)
            if report is not None and report.is_expired(now):
                del self._reports[report_id]
                return None
            return report

    def list_for_user(self, user_id: int, now: Optional[datetime] = None) -> List[StoredReport]:
        now = now or _utcnow()
        with self._lock:
            reports = [
                r for r in self._reports.values()
                if r.user_id == user_id and not r.is_expired(now)
            ]
        return sorted(reports, key=lambda r: r.created_at, reverse=True)

    def delete(self, report_id: str) -> bool:
        with self._lock:
            return self._reports.pop(report_id, None) is not None

    def purge_expired(self, now: Optional[datetime] = None) -> int:
        now = now or _utcnow()
        with self._lock:
            expired = [rid for rid, r in self._reports.items() if r.is_expired(now)]
            for rid in expired:
                del self._reports[rid]
        if expired:
            logger.info(f"Purged {len(expired)} expired reports")
        return len(expired)


async def sweep_periodically(store: ReportStore, interval_seconds: float) -> None:
    """Runs until cancelled by the application lifespan."""
    while True:
        await asyncio.sleep(interval_seconds)
        store.purge_expired()
