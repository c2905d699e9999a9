"""Best-effort real-time fan-out of order updates to connected clients."""

import json
import logging

logger = logging.getLogger(__name__)


class RedisPublisher:
    """Publishes JSON payloads on Redis channels. Never raises."""

    def __init__(self, client_factory):
        self._client_factory = client_factory

    def publish(self, topic, payload):
        client = self._client_factory()
        if client is None:
            return False

        try:
            client.publish(topic, json.dumps(payload, default=str))
            return True
        except Exception as e:
            logger.warning(f"Failed to publish to {topic}: {e}")
            return False


class NullPublisher:

    def publish(self, topic, payload):
        return False
