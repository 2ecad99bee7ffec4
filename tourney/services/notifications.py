"""Payment notification side-channel.

Publishes a message on a Redis pub/sub channel when a ticket is paid so
other processes (mailers, live dashboards) can react. Delivery is best
effort: a failure never affects the reconciliation that triggered it.
"""

from datetime import datetime, timezone

from redis.asyncio import Redis
from redis.exceptions import RedisError

from tourney.config import get_settings
from tourney.logging_config import get_logger
from tourney.models.ticket import Ticket
from tourney.utils.json_utils import json_dumps

settings = get_settings()
logger = get_logger(__name__)


class PaymentNotifier:
    """Publishes ``payment_completed`` messages."""

    def __init__(self, redis_client: Redis | None, channel: str | None = None):
        self.redis = redis_client
        self.channel = channel or settings.payment_notification_channel

    @property
    def enabled(self) -> bool:
        return self.redis is not None

    async def payment_completed(self, ticket: Ticket) -> bool:
        """Announce a paid ticket.

        Returns:
            True if the message was published, False otherwise
        """
        if not self.enabled:
            return False

        message = json_dumps({
            "type": "payment_completed",
            "ticket_id": ticket.id,
            "event_id": ticket.event_id,
            "participant_id": ticket.participant_id,
            "amount": ticket.amount,
            "paid_at": ticket.paid_at,
            "published_at": datetime.now(timezone.utc),
        })

        try:
            await self.redis.publish(self.channel, message)
        except (RedisError, OSError) as e:
            logger.warning(
                "payment_notification_failed",
                ticket_id=ticket.id,
                channel=self.channel,
                error=str(e),
            )
            return False

        logger.debug("payment_notification_sent", ticket_id=ticket.id, channel=self.channel)
        return True
