"""Workflow worker: resumes reminder runs as their wake messages arrive.

Run alongside the API:

    python -m scripts.run_workflow_worker
"""

import asyncio
import logging
import signal

from app.core.config import settings
from app.core.db import dispose_engine
from app.integrations.service_bus_consumer import consume_forever
from app.workflows.runtime import get_workflow_host

logger = logging.getLogger("subdub.worker")


async def main() -> None:
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    logger.info(f"Workflow worker starting (lead days: {list(settings.reminder_lead_days)})")
    try:
        await consume_forever(get_workflow_host(), stop=stop)
    finally:
        await dispose_engine()
        logger.info("Workflow worker stopped")


if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    asyncio.run(main())
