"""Result recorder - appends one CheckResult per completed check."""
import logging
from typing import Optional

from ..exceptions import PersistenceFailure
from ..models import CheckResult
from ..repositories import CheckResultRepository

logger = logging.getLogger(__name__)


class ResultRecorder:

    def __init__(self, results: CheckResultRepository):
        self.results = results

    async def record(
        self,
        monitor_id: int,
        status: str,
        response_time_ms: Optional[int] = None,
        message: Optional[str] = None,
    ) -> Optional[CheckResult]:
        """Persist the outcome. A write failure is logged and returns None."""
        try:
            return await self.results.add(monitor_id, status, response_time_ms, message)
        except PersistenceFailure as e:
            logger.error(f"Failed to save check result for monitor {monitor_id}: {e}")
            return None
