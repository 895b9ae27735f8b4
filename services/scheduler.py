import asyncio
import logging
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Optional
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)


def seconds_until(now: datetime, hour: int, minute: int) -> float:
    """Segundos até a próxima ocorrência de hour:minute no fuso de `now`."""
    target = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if target <= now:
        target += timedelta(days=1)
    return (target - now).total_seconds()


class DailyScheduler:
    """Executa um job uma vez por dia no horário local configurado."""

    def __init__(self,
                 job: Callable[[], Awaitable[None]],
                 hour: int,
                 minute: int,
                 timezone_name: str,
                 sleep: Callable[[float], Awaitable[None]] = asyncio.sleep):
        self._job = job
        self._hour = hour
        self._minute = minute
        self._tz = ZoneInfo(timezone_name)
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def next_delay(self, now: Optional[datetime] = None) -> float:
        now = now or datetime.now(self._tz)
        return seconds_until(now.astimezone(self._tz), self._hour, self._minute)

    async def run_once(self) -> None:
        try:
            await self._job()
        except Exception:
            logger.exception("Scheduled job failed")

    async def _loop(self) -> None:
        while True:
            delay = self.next_delay()
            logger.info("Next daily report in %.0f seconds", delay)
            await self._sleep(delay)
            await self.run_once()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop())
        logger.info(
            "Daily report scheduled at %02d:%02d (%s)", self._hour, self._minute, self._tz
        )

    async def stop(self) -> None:
        if not self._task:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
