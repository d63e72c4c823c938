"""Append-only check result storage."""
from datetime import datetime
from typing import Optional

from sqlalchemy import delete

from ..models import CheckResult
from ..utils.timeutils import utcnow
from .base import Repository


class CheckResultRepository(Repository):

    async def add(
        self,
        monitor_id: int,
        status: str,
        response_time_ms: Optional[int] = None,
        message: Optional[str] = None,
    ) -> CheckResult:
        row = CheckResult(
            monitor_id=monitor_id,
            status=status,
            response_time_ms=response_time_ms,
            message=message,
            created_at=utcnow(),
        )
        async with self._session("record check result") as session:
            session.add(row)
            await session.flush()
        return row

    async def delete_older_than(self, cutoff: datetime) -> int:
        """Delete results created before ``cutoff``; returns the row count."""
        async with self._session("delete old check results") as session:
            result = await session.execute(
                delete(CheckResult).where(CheckResult.created_at < cutoff)
            )
            return result.rowcount or 0
