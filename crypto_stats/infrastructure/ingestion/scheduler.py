"""
Daily trigger for the ingestion batch.

The scheduler is an asyncio task owned by the FastAPI lifespan. The batch
itself is synchronous, so each run is pushed to a worker thread and the event
loop keeps serving requests meanwhile.
"""

import asyncio
import logging
from datetime import datetime, time, timedelta
from zoneinfo import ZoneInfo

from crypto_stats.application.services.price_ingestor import PriceIngestionService
from crypto_stats.domain.exceptions import IngestionError

logger = logging.getLogger(__name__)


def seconds_until(at: time, zone: ZoneInfo, now: datetime) -> float:
    """Seconds from *now* (timezone-aware) until the next *at* wall time in *zone*."""
    local_now = now.astimezone(zone)
    target = datetime.combine(local_now.date(), at, tzinfo=zone)
    if target <= local_now:
        target = datetime.combine(local_now.date() + timedelta(days=1), at, tzinfo=zone)
    return (target - local_now).total_seconds()


class BatchScheduler:
    def __init__(self, ingestion: PriceIngestionService, at: time, timezone: str) -> None:
        self._ingestion = ingestion
        self._at = at
        self._zone = ZoneInfo(timezone)
        self._task: asyncio.Task | None = None

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._loop(), name="price-ingestion-scheduler")
            logger.info("Daily ingestion scheduled at %s %s", self._at.isoformat(), self._zone.key)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _loop(self) -> None:
        while True:
            delay = seconds_until(self._at, self._zone, datetime.now(self._zone))
            await asyncio.sleep(delay)
            try:
                await asyncio.to_thread(self._ingestion.run)
            except IngestionError:
                # Already logged and recorded as the last run; wait for the next slot.
                continue
