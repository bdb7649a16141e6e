"""Garment IMS — Redis client for counters."""
from typing import Optional

import redis.asyncio as redis

from garment_ims.config import get_settings

_settings = get_settings()
_redis: Optional[redis.Redis] = None


async def get_redis() -> redis.Redis:
    """Get Redis connection (application DB 1)."""
    global _redis
    if _redis is None:
        _redis = redis.from_url(_settings.REDIS_URL, decode_responses=True)
    return _redis


def sequence_key(name: str) -> str:
    """Counter key for a named sequence: seq:{name}"""
    return f"seq:{name}"
