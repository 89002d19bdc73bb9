import json
import logging
import asyncio
import uuid
from datetime import datetime
from typing import Optional

from azure.servicebus.aio import ServiceBusClient
from azure.servicebus import ServiceBusMessage
from azure.servicebus.exceptions import (
    ServiceBusError,
    ServiceBusAuthenticationError,
    ServiceBusConnectionError,
)

from app.core.config import settings

logger = logging.getLogger(__name__)

SERVICE_BUS_TIMEOUT = 30
WAKE_SUBJECT = "workflow-wake"


def build_wake_message(run_id: str, wake_token: str) -> ServiceBusMessage:
    payload = {"run_id": run_id, "wake_token": wake_token}
    return ServiceBusMessage(
        json.dumps(payload),
        content_type="application/json",
        subject=WAKE_SUBJECT,
        message_id=str(uuid.uuid4()),
        application_properties={"run_id": run_id},
    )


class ServiceBusWakeScheduler:
    """Publishes workflow wake messages, immediately or at a scheduled enqueue time.

    Scheduled messages are held by the broker, so a suspended run costs nothing
    until its wake time and survives process restarts.
    """

    def __init__(self, connection_string: Optional[str] = None, queue_name: Optional[str] = None):
        self._connection_string = connection_string if connection_string is not None else settings.SERVICEBUS_CONNECTION_STRING
        self._queue_name = queue_name if queue_name is not None else settings.SERVICEBUS_QUEUE_NAME

    async def schedule_wake(self, run_id: str, wake_token: str, wake_at: Optional[datetime] = None) -> bool:
        # Config validation
        if not self._connection_string:
            logger.warning("Service Bus connection string not configured")
            return False

        if not self._queue_name:
            logger.warning("Service Bus queue name not configured")
            return False

        try:
            async def _send_message() -> None:
                async with ServiceBusClient.from_connection_string(
                    conn_str=self._connection_string,
                    logging_enable=False,
                ) as client:
                    async with client.get_queue_sender(queue_name=self._queue_name) as sender:
                        message = build_wake_message(run_id, wake_token)
                        if wake_at is None:
                            await sender.send_messages(message)
                        else:
                            await sender.schedule_messages(message, wake_at)

            await asyncio.wait_for(_send_message(), timeout=SERVICE_BUS_TIMEOUT)
            logger.info(
                f"Wake message published (run_id={run_id}, wake_at={wake_at.isoformat() if wake_at else 'now'})"
            )
            return True

        except asyncio.TimeoutError:
            logger.error("Service Bus publish timed out")
            return False

        except ServiceBusAuthenticationError:
            logger.error("Service Bus authentication failed")
            return False

        except ServiceBusConnectionError:
            logger.error("Service Bus connection failed")
            return False

        except ServiceBusError:
            logger.error("Service Bus error")
            return False

        except Exception:
            logger.exception("Unexpected Service Bus error")
            return False
