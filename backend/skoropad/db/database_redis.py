import json
import logging
from typing import Optional

import redis.asyncio as redis

from skoropad.core import config

logger = logging.getLogger(__name__)

# Connection Pool (Reusable). None when REDIS_URL is not configured.
pool: Optional[redis.ConnectionPool] = (
    redis.ConnectionPool.from_url(config.REDIS_URL, decode_responses=True) if config.REDIS_URL else None
)

def user_channel(user_id) -> str:
    return f"chat:user:{user_id}"

class RedisManager:
    @staticmethod
    def is_enabled() -> bool:
        return pool is not None

    @staticmethod
    def get_client() -> redis.Redis:
        """
        Returns an async Redis client from the global connection pool.
        """
        if pool is None:
            raise RuntimeError("REDIS_URL is not configured")
        return redis.Redis(connection_pool=pool)

    @staticmethod
    async def publish_chat_notification(receiver_id, payload: dict) -> bool:
        """
        Publishes a new-message payload to the receiver's channel.
        Returns False when Redis is disabled.
        """
        if not RedisManager.is_enabled():
            return False
        client = RedisManager.get_client()
        await client.publish(user_channel(receiver_id), json.dumps(payload, default=str))
        return True

    @staticmethod
    async def close():
        if pool is not None:
            await pool.disconnect()
