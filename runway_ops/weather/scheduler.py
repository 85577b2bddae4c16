# runway_ops/weather/scheduler.py
"""
Periodic weather polling.

Runs inside the API process as an asyncio task; each tick calls the
synchronous poller in a worker thread so the event loop never blocks on
the provider or the database.
"""

import asyncio
from typing import Optional

from ..logging import get_logger
from ..settings import settings
from .poller import WeatherPoller

logger = get_logger(__name__)


async def poll_forever(poller: WeatherPoller, interval_seconds: Optional[float] = None) -> None:
    """
    Refresh immediately, then every `interval_seconds`, until cancelled.

    Tick failures are logged by the poller and never stop the loop.
    """
    interval = interval_seconds or settings.weather_poll_interval_seconds
    logger.info("weather_poller_started", interval_seconds=interval)
    try:
        while True:
            await asyncio.to_thread(poller.run_scheduled_tick)
            await asyncio.sleep(interval)
    except asyncio.CancelledError:
        logger.info("weather_poller_stopped")
        raise


def start_polling(poller: WeatherPoller, interval_seconds: Optional[float] = None) -> asyncio.Task:
    """Schedule poll_forever on the running loop."""
    return asyncio.create_task(poll_forever(poller, interval_seconds))


async def stop_polling(task: Optional[asyncio.Task]) -> None:
    if task is None:
        return
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass
