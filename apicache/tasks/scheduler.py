# tasks/scheduler.py
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from apicache.services.cache_service import ApiCache

logger = logging.getLogger(__name__)

SWEEP_JOB_ID = "sweep_expired"


def create_scheduler() -> AsyncIOScheduler:
    return AsyncIOScheduler()


def schedule_jobs(scheduler: AsyncIOScheduler, cache: ApiCache, interval_minutes: int) -> bool:
    # 0 keeps expiry purely lazy
    if interval_minutes <= 0:
        return False
    scheduler.add_job(
        sweep_expired_job,
        trigger=IntervalTrigger(minutes=interval_minutes),
        args=[cache],
        id=SWEEP_JOB_ID,
        replace_existing=True,
    )
    logger.info(f"Scheduled cache sweep every {interval_minutes} minutes")
    return True


async def sweep_expired_job(cache: ApiCache) -> int:
    # must stay a coroutine: sweeps run on the event loop, never in a worker thread
    removed = cache.sweep_expired()
    logger.info(f"Scheduled sweep removed {removed} expired cache entries")
    return removed
