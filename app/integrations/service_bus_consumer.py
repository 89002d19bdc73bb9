"""Receives workflow wake messages and resumes the matching runs."""

import asyncio
import json
import logging
from typing import Optional

from azure.servicebus.aio import ServiceBusClient, ServiceBusReceiver
from azure.servicebus import ServiceBusReceivedMessage

from app.core.config import settings
from app.workflows.host import WorkflowHost

logger = logging.getLogger(__name__)

MAX_WAIT_SECONDS = 30


def parse_wake_message(message: ServiceBusReceivedMessage) -> Optional[tuple[str, str]]:
    try:
        payload = json.loads(str(message))
        return str(payload["run_id"]), str(payload["wake_token"])
    except (ValueError, KeyError, TypeError):
        return None


async def handle_message(host: WorkflowHost, receiver: ServiceBusReceiver, message: ServiceBusReceivedMessage) -> None:
    wake = parse_wake_message(message)
    if wake is None:
        logger.error(f"Malformed wake message {message.message_id}; dead-lettering")
        await receiver.dead_letter_message(message, reason="malformed", error_description="Missing run_id or wake_token")
        return

    run_id, wake_token = wake
    try:
        await host.resume(run_id, wake_token)
    except Exception as exc:
        # The run is already marked failed by the host
        await receiver.dead_letter_message(message, reason="run_failed", error_description=str(exc)[:1024])
        return
    await receiver.complete_message(message)


async def consume_forever(host: WorkflowHost, stop: Optional[asyncio.Event] = None) -> None:
    if not settings.SERVICEBUS_CONNECTION_STRING:
        raise RuntimeError("SERVICEBUS_CONNECTION_STRING is not configured; cannot consume wake messages.")

    stop = stop or asyncio.Event()
    async with ServiceBusClient.from_connection_string(
        conn_str=settings.SERVICEBUS_CONNECTION_STRING,
        logging_enable=False,
    ) as client:
        async with client.get_queue_receiver(queue_name=settings.SERVICEBUS_QUEUE_NAME) as receiver:
            logger.info(f"Consuming wake messages from {settings.SERVICEBUS_QUEUE_NAME}")
            while not stop.is_set():
                messages = await receiver.receive_messages(max_message_count=10, max_wait_time=MAX_WAIT_SECONDS)
                for message in messages:
                    await handle_message(host, receiver, message)
